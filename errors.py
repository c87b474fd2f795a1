"""Exceptions raised by the tracker. None of them is fatal to the app."""

from typing import Dict

from pydantic import ValidationError


class ExpensePilotError(Exception):
    pass


class FormValidationError(ExpensePilotError):
    """A form failed its schema; ``field_errors`` maps field name -> message."""

    def __init__(self, field_errors: Dict[str, str]):
        self.field_errors = field_errors
        super().__init__("; ".join(f"{k}: {v}" for k, v in field_errors.items()))

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "FormValidationError":
        field_errors = {}
        for err in exc.errors():
            field = ".".join(str(part) for part in err["loc"]) or "__root__"
            # Keep the first message per field, like an inline form hint
            field_errors.setdefault(field, err["msg"])
        return cls(field_errors)


class DuplicateCategoryError(ExpensePilotError):
    def __init__(self, label: str):
        self.label = label
        super().__init__(f'A category named "{label}" already exists.')


class RemoteFailure(ExpensePilotError):
    """Network error, timeout, non-2xx status or malformed payload."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(RemoteFailure):
    pass


class BusyError(ExpensePilotError):
    def __init__(self, action: str):
        self.action = action
        super().__init__(f"'{action}' is already in progress.")
