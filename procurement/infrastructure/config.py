"""Application configuration.

Loads settings from environment variables with sensible defaults and
derives the immutable role allowlist configuration from them. Both are
validated eagerly so a bad deployment fails at startup.
"""

from dataclasses import dataclass, field

from pydantic import model_validator
from pydantic_settings import BaseSettings


def split_email_list(raw: str) -> frozenset[str]:
    """Split a comma-separated email list into normalized addresses."""
    return frozenset(part.strip().lower() for part in raw.split(",") if part.strip())


@dataclass(frozen=True)
class RoleConfig:
    """Allowlists used to derive a user's role from their email.

    Attributes:
        ceo_emails: Emails with the approver role.
        purchaser_emails: Emails with the purchaser role.
        external_requester_emails: Requesters outside the organization domain.
        organization_domain: Domain whose addresses are requesters.
    """

    organization_domain: str
    ceo_emails: frozenset[str] = field(default_factory=frozenset)
    purchaser_emails: frozenset[str] = field(default_factory=frozenset)
    external_requester_emails: frozenset[str] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        domain = self.organization_domain.strip().lower().lstrip("@")
        if not domain or "@" in domain or "." not in domain:
            raise ValueError(f"Invalid organization domain: {self.organization_domain!r}")
        object.__setattr__(self, "organization_domain", domain)
        for name in ("ceo_emails", "purchaser_emails", "external_requester_emails"):
            emails = frozenset(e.strip().lower() for e in getattr(self, name) if e.strip())
            object.__setattr__(self, name, emails)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # API
    api_version: str = "0.1.0"
    debug: bool = False
    public_base_url: str = "http://localhost:8000"

    # Persistence (empty means in-memory store)
    database_url: str = ""

    # Tokens
    jwt_secret: str = "dev-jwt-secret-change-in-production"
    magic_link_secret: str = "dev-magic-link-secret-change-in-production"
    session_ttl_seconds: int = 8 * 60 * 60
    magic_link_ttl_seconds: int = 15 * 60
    cookie_secure: bool = True
    allow_direct_login: bool = False

    # Role allowlists (comma-separated)
    ceo_emails: str = ""
    purchaser_emails: str = ""
    external_requester_emails: str = ""
    organization_domain: str = "example.com"

    # Uploads
    upload_dir: str = "uploads"
    max_upload_bytes: int = 10 * 1024 * 1024

    # Email
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    email_from: str = ""

    # Logging
    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }

    @model_validator(mode="after")
    def _check_secrets(self) -> "Settings":
        if not self.jwt_secret or not self.magic_link_secret:
            raise ValueError("jwt_secret and magic_link_secret must be set")
        if self.jwt_secret == self.magic_link_secret:
            raise ValueError("jwt_secret and magic_link_secret must differ")
        if self.session_ttl_seconds <= 0 or self.magic_link_ttl_seconds <= 0:
            raise ValueError("token lifetimes must be positive")
        return self

    @property
    def smtp_configured(self) -> bool:
        return all([self.smtp_host, self.smtp_user, self.smtp_password, self.email_from])

    def role_config(self) -> RoleConfig:
        """Build the immutable role allowlists.

        Raises:
            ValueError: If the organization domain is invalid.
        """
        return RoleConfig(
            organization_domain=self.organization_domain,
            ceo_emails=split_email_list(self.ceo_emails),
            purchaser_emails=split_email_list(self.purchaser_emails),
            external_requester_emails=split_email_list(self.external_requester_emails),
        )


settings = Settings()
