"""Cost proof upload service."""

import secrets
import string
import time
from dataclasses import dataclass

import structlog

from procurement.domain.exceptions import (
    ForbiddenError,
    UpstreamFailureError,
    ValidationFailureError,
)
from procurement.domain.state_machines import Role
from procurement.domain.value_objects import CostProofType, User
from procurement.infrastructure.blob_store import BlobStore

logger = structlog.get_logger()

# Content type -> (file extension, cost proof type)
ALLOWED_CONTENT_TYPES: dict[str, tuple[str, CostProofType]] = {
    "application/pdf": ("pdf", CostProofType.PDF),
    "image/jpeg": ("jpg", CostProofType.IMAGE),
    "image/jpg": ("jpg", CostProofType.IMAGE),
    "image/png": ("png", CostProofType.IMAGE),
    "image/gif": ("gif", CostProofType.IMAGE),
}

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


@dataclass
class UploadResult:
    """Stored cost proof file."""

    filename: str
    url: str
    proof_type: CostProofType
    size: int


class UploadService:
    """Validates and stores cost proof files."""

    def __init__(self, blob_store: BlobStore, max_bytes: int) -> None:
        self.blob_store = blob_store
        self.max_bytes = max_bytes

    async def upload_cost_proof(
        self,
        actor: User,
        data: bytes,
        content_type: str | None,
    ) -> UploadResult:
        """Store a cost proof file.

        Args:
            actor: Authenticated uploader.
            data: File content.
            content_type: Declared MIME type.

        Returns:
            UploadResult describing the stored file.

        Raises:
            ForbiddenError: If the actor is below purchaser.
            ValidationFailureError: If the file is empty, too large or of a disallowed type.
            UpstreamFailureError: If the blob store fails.
        """
        if not actor.role.at_least(Role.PURCHASER):
            raise ForbiddenError("upload cost proofs", Role.PURCHASER.value, actor.role.value)
        if not data:
            raise ValidationFailureError("No file provided", details={"field": "file"})
        if len(data) > self.max_bytes:
            raise ValidationFailureError(
                f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB.",
                details={"field": "file", "size": len(data), "max_bytes": self.max_bytes},
            )
        allowed = ALLOWED_CONTENT_TYPES.get((content_type or "").lower())
        if allowed is None:
            raise ValidationFailureError(
                "Invalid file type. Only PDF and image files are allowed.",
                details={"field": "file", "content_type": content_type},
            )

        extension, proof_type = allowed
        suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(9))
        filename = f"cost-proof-{int(time.time() * 1000)}-{suffix}.{extension}"
        try:
            url = await self.blob_store.put(filename, data, content_type)
        except Exception as e:
            logger.error("Cost proof upload failed", filename=filename, error=str(e))
            raise UpstreamFailureError("store uploaded file") from e

        logger.info(
            "Cost proof uploaded",
            filename=filename,
            size=len(data),
            uploaded_by=actor.email,
        )
        return UploadResult(filename=filename, url=url, proof_type=proof_type, size=len(data))
