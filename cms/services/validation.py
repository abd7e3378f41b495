"""Schema validation entry point used by the routers.

``validate`` never mutates the candidate; it returns a fresh model instance or
raises ``ContentValidationError`` with messages indexed by wire field name.
"""

from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from cms.services.errors import ContentValidationError

M = TypeVar("M", bound=BaseModel)

RECORD_LEVEL = "_"


def field_errors(exc: ValidationError) -> dict[str, list[str]]:
    """Group pydantic error entries by their top-level field."""
    grouped: dict[str, list[str]] = {}
    for err in exc.errors():
        loc = err.get("loc") or ()
        key = str(loc[0]) if loc else RECORD_LEVEL
        message = err.get("msg", "Invalid value")
        # "Value error, must not be blank" -> "must not be blank"
        if message.startswith("Value error, "):
            message = message[len("Value error, ") :]
        grouped.setdefault(key, []).append(message)
    return grouped


def validate(model: type[M], candidate: Any, *, message: str = "Invalid data") -> M:
    """Validate *candidate* against *model*.

    Raises:
        ContentValidationError: when any constraint is violated.
    """
    if not isinstance(candidate, dict):
        raise ContentValidationError(
            message, {RECORD_LEVEL: ["Request body must be a JSON object"]}
        )
    try:
        return model.model_validate(candidate)
    except ValidationError as exc:
        raise ContentValidationError(message, field_errors(exc)) from exc
