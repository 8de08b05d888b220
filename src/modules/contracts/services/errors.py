from enum import Enum
from typing import List, Optional


class ErrorKind(Enum):
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    CONFIG_ERROR = "CONFIG_ERROR"
    INVALID_INPUT = "INVALID_INPUT"
    ROLE_NOT_ALLOWED = "ROLE_NOT_ALLOWED"
    RENDER_FAILED = "RENDER_FAILED"
    SIGN_FAILED = "SIGN_FAILED"
    NOTIFY_FAILED = "NOTIFY_FAILED"


class StateReason(Enum):
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    CUSTOMER_ALREADY_SIGNED = "CUSTOMER_ALREADY_SIGNED"
    CUSTOMER_NOT_DONE = "CUSTOMER_NOT_DONE"
    NOT_COMPLETED = "NOT_COMPLETED"


class SigningError(Exception):
    """Error raised by the signing workflow, carrying its kind and context."""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        role: Optional[str] = None,
        allowed_roles: Optional[List[str]] = None,
        reason: Optional[StateReason] = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.role = role
        self.allowed_roles = allowed_roles
        self.reason = reason

    def to_dict(self) -> dict:
        data = {"kind": self.kind.value, "message": self.message}
        if self.role is not None:
            data["role"] = self.role
        if self.allowed_roles is not None:
            data["allowedRoles"] = list(self.allowed_roles)
        if self.reason is not None:
            data["reason"] = self.reason.value
        return data

    def __repr__(self):
        return f"{type(self).__name__}({self.kind.value}, {self.message!r})"


class NotFound(SigningError):
    def __init__(self, document_id: str):
        super().__init__(ErrorKind.NOT_FOUND, f"Contract {document_id} not found")


class InvalidState(SigningError):
    def __init__(self, reason: StateReason, message: str):
        super().__init__(ErrorKind.INVALID_STATE, message, reason=reason)


class ConfigError(SigningError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.CONFIG_ERROR, message)


class InvalidInput(SigningError):
    def __init__(self, message: str, role: Optional[str] = None):
        super().__init__(ErrorKind.INVALID_INPUT, message, role=role)


class InvalidImage(InvalidInput):
    def __init__(self, role: str):
        super().__init__(f"Invalid signature image for role '{role}'", role=role)


class InvalidRole(InvalidInput):
    def __init__(self, role):
        super().__init__(
            f"Invalid role identifier: {role!r}",
            role=role if isinstance(role, str) else None,
        )


class RoleNotAllowed(SigningError):
    def __init__(self, role: str, allowed_roles: List[str]):
        super().__init__(
            ErrorKind.ROLE_NOT_ALLOWED,
            f"Role '{role}' is not allowed for this party",
            role=role,
            allowed_roles=allowed_roles,
        )


class RenderFailed(SigningError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.RENDER_FAILED, message)


class SignFailed(SigningError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.SIGN_FAILED, message)


class NotifyFailed(SigningError):
    def __init__(self, message: str):
        super().__init__(ErrorKind.NOTIFY_FAILED, message)
