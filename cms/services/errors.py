"""Error taxonomy shared by services and routers.

Routers never build error responses for these by hand; the handlers in
``cms.main`` translate each type into the ``{success: false, ...}`` envelope.
"""


class ContentValidationError(Exception):
    """A candidate record failed schema validation.

    ``field_errors`` maps a wire field name (or ``"_"`` for record-level
    problems) to the list of messages for that field.
    """

    def __init__(
        self, message: str, field_errors: dict[str, list[str]] | None = None
    ) -> None:
        super().__init__(message)
        self.message = message
        self.field_errors = field_errors or {}


class NotFoundError(Exception):
    """Unknown id or slug."""

    def __init__(self, message: str = "Not found") -> None:
        super().__init__(message)
        self.message = message


class StorageError(Exception):
    """The backing store failed (connectivity, constraint, driver error)."""


class UniqueConstraintViolation(StorageError):
    """A write collided with a unique column (the slug)."""

    def __init__(self, field: str = "slug", value: str | None = None) -> None:
        self.field = field
        self.value = value
        detail = f" {value!r}" if value is not None else ""
        super().__init__(f"A record with this {field}{detail} already exists")


class UploadRejected(Exception):
    """An upload was refused before anything was written to disk."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthenticationError(Exception):
    """Missing, invalid, expired, or revoked admin session."""

    def __init__(self, message: str = "Not authenticated") -> None:
        super().__init__(message)
        self.message = message
