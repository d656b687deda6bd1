"""Public exceptions for the Helpdesk SDK."""

from typing import Any

from pydantic import BaseModel


class FieldError(BaseModel):
    """A single field-level problem reported by the service."""

    field: str
    message: str

    def __str__(self) -> str:
        label = self.field.replace("_", " ").replace(".", " ").title()
        return f"{label}: {self.message}"


class HelpdeskError(Exception):
    """Base exception for all Helpdesk SDK errors."""


class HelpdeskAPIError(HelpdeskError):
    """Error from the Helpdesk API."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RemoteError(HelpdeskAPIError):
    """Non-2xx response or transport failure. Never retried by the SDK."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        body: Any = None,
    ) -> None:
        super().__init__(message, status_code=status_code)
        self.body = body


class NotFound(RemoteError):
    """No record exists for the requested identity."""

    def __init__(self, message: str, body: Any = None) -> None:
        super().__init__(message, status_code=404, body=body)


class ValidationError(RemoteError):
    """One or more field-level problems on create or update."""

    def __init__(self, errors: list[FieldError], body: Any = None) -> None:
        self.errors = list(errors)
        message = "; ".join(str(error) for error in self.errors) or "Record invalid"
        super().__init__(message, status_code=422, body=body)


class HelpdeskConfigError(HelpdeskError):
    """Configuration error (missing env vars, invalid config)."""


class RequiredAttributeError(HelpdeskError):
    """A required attribute is missing before a request could be issued."""

    def __init__(self, missing: list[str], message: str | None = None) -> None:
        self.missing = list(missing)
        if message is None:
            message = ", ".join(f"{name} is required" for name in self.missing)
        super().__init__(message)


class MissingIdentityError(RequiredAttributeError):
    """The operation needs a persisted resource but identity is unset."""

    def __init__(self, resource: str) -> None:
        super().__init__(["identity"], f"{resource} identity is required")


class ResourceDestroyedError(HelpdeskError):
    """The resource was destroyed and can no longer be saved."""


class TypeCoercionError(HelpdeskError):
    """A raw value cannot satisfy a declared array attribute."""
