"""Identity and role resolution.

Maps an email address onto a role using the configured allowlists. The
checks run in a fixed priority order (ceo, then purchaser, then
requester), so an address on several lists gets the highest role.
"""

import re

from procurement.domain.state_machines import Role
from procurement.domain.value_objects import User
from procurement.infrastructure.config import RoleConfig

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

LANDING_PATH = "/requests"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def is_valid_email(email: str) -> bool:
    """Check the basic shape ``local@domain.tld``."""
    return bool(EMAIL_PATTERN.match(email))


class RoleResolver:
    """Resolves roles from a fixed RoleConfig.

    All methods are pure functions of the email and the configuration.
    """

    def __init__(self, config: RoleConfig) -> None:
        self.config = config

    def resolve_role(self, email: str) -> Role | None:
        """Resolve the role for an email.

        Args:
            email: Email address, normalized before comparison.

        Returns:
            The role, or None if the email is not authorized.
        """
        email = normalize_email(email)
        if email in self.config.ceo_emails:
            return Role.CEO
        if email in self.config.purchaser_emails:
            return Role.PURCHASER
        if email in self.config.external_requester_emails:
            return Role.REQUESTER
        _, _, domain = email.rpartition("@")
        if domain and domain == self.config.organization_domain:
            return Role.REQUESTER
        return None

    def is_authorized(self, email: str) -> bool:
        return self.resolve_role(email) is not None

    def create_user(self, email: str) -> User | None:
        """Build a fresh user for an authorized email."""
        email = normalize_email(email)
        role = self.resolve_role(email)
        if role is None:
            return None
        return User.from_email(email, role)

    @staticmethod
    def redirect_path_for(role: Role) -> str:
        """Landing path after sign-in; the same for every role."""
        return LANDING_PATH
