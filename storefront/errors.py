"""
Error types shared by the API client and the stores.
"""

from typing import Any, Mapping, Optional

from pydantic import ValidationError


class FieldErrors(dict):
    """Field name -> message, as shown inline next to form fields."""

    def get(self, field: str, default: Optional[str] = None) -> Optional[str]:
        return super().get(field, default)


class ApiError(Exception):
    def __init__(self, message: str, status_code: Optional[int] = None,
                 payload: Any = None, field_errors: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.payload = payload
        self.field_errors = FieldErrors(field_errors or {})

    @property
    def is_auth_error(self) -> bool:
        return self.status_code in (401, 403)

    def __repr__(self):
        return f"ApiError({self.message!r}, status_code={self.status_code})"


def _first_message(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return str(value[0]) if value else ""
    return str(value)


def field_errors_from_payload(payload: Any) -> FieldErrors:
    """
    Pull per-field messages out of a backend validation response.

    Two shapes are understood:
    - {"errors": {"SiteName": ["The SiteName field is required."]}}
    - FastAPI's {"detail": [{"loc": ["body", "siteName"], "msg": "..."}]}
    Field names are normalized to camelCase with a lowercase first letter.
    """
    errors = FieldErrors()
    if not isinstance(payload, dict):
        return errors

    raw = payload.get("errors")
    if isinstance(raw, dict):
        for field, messages in raw.items():
            name = field[:1].lower() + field[1:] if field else field
            errors[name] = _first_message(messages)
        return errors

    detail = payload.get("detail")
    if isinstance(detail, list):
        for entry in detail:
            if not isinstance(entry, dict):
                continue
            loc = [str(part) for part in entry.get("loc", []) if part != "body"]
            if loc:
                errors[loc[-1]] = entry.get("msg", "")
    return errors


def field_errors_from_validation(exc: ValidationError) -> FieldErrors:
    errors = FieldErrors()
    for entry in exc.errors():
        loc = entry.get("loc") or ()
        name = str(loc[-1]) if loc else "__root__"
        errors.setdefault(name, entry.get("msg", "Invalid value"))
    return errors


def message_from_payload(payload: Any, fallback: str) -> str:
    """The backend's own message if it sent one, otherwise the fallback."""
    if isinstance(payload, dict):
        for key in ("message", "detail", "title"):
            value = payload.get(key)
            if isinstance(value, str) and value:
                return value
    if isinstance(payload, str) and payload:
        return payload
    return fallback


def error_slot(exc: ApiError) -> Any:
    """What a store puts in its error slot: the field map when there is one."""
    if exc.field_errors:
        return exc.field_errors
    return exc.message

