"""Application error taxonomy.

Every failure that crosses a service boundary is an ``AppError`` tagged with
one of the ``ErrorType`` values. Wrapping keeps the original exception both
as ``cause`` and as ``__cause__`` so tracebacks stay intact; the HTTP layer
only looks at the outermost tag.
"""

import enum


class ErrorType(str, enum.Enum):
    not_found = "not_found"
    validation = "validation"
    conflict = "conflict"
    unauthorized = "unauthorized"
    forbidden = "forbidden"
    internal = "internal"
    external = "external"
    method_not_allowed = "method_not_allowed"


STATUS_CODES: dict[ErrorType, int] = {
    ErrorType.not_found: 404,
    ErrorType.validation: 400,
    ErrorType.conflict: 409,
    ErrorType.unauthorized: 401,
    ErrorType.forbidden: 403,
    ErrorType.internal: 500,
    ErrorType.external: 503,
    ErrorType.method_not_allowed: 405,
}


class AppError(Exception):
    def __init__(self, type: ErrorType, message: str, cause: BaseException | None = None):
        super().__init__(message)
        self.type = type
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        return f"AppError({self.type.value!r}, {self.message!r})"

    @property
    def status_code(self) -> int:
        return STATUS_CODES[self.type]

    @classmethod
    def not_found(cls, message: str) -> "AppError":
        return cls(ErrorType.not_found, message)

    @classmethod
    def validation(cls, message: str) -> "AppError":
        return cls(ErrorType.validation, message)

    @classmethod
    def conflict(cls, message: str) -> "AppError":
        return cls(ErrorType.conflict, message)

    @classmethod
    def unauthorized(cls, message: str) -> "AppError":
        return cls(ErrorType.unauthorized, message)

    @classmethod
    def forbidden(cls, message: str) -> "AppError":
        return cls(ErrorType.forbidden, message)

    @classmethod
    def internal(cls, message: str) -> "AppError":
        return cls(ErrorType.internal, message)

    @classmethod
    def external(cls, message: str) -> "AppError":
        return cls(ErrorType.external, message)

    @classmethod
    def method_not_allowed(cls, method: str) -> "AppError":
        return cls(ErrorType.method_not_allowed, f"method {method} not allowed")

    @classmethod
    def wrap(cls, type: ErrorType, message: str, cause: BaseException) -> "AppError":
        return cls(type, message, cause)

    @classmethod
    def wrap_internal(cls, message: str, cause: BaseException) -> "AppError":
        return cls(ErrorType.internal, message, cause)

    @classmethod
    def wrap_validation(cls, message: str, cause: BaseException) -> "AppError":
        return cls(ErrorType.validation, message, cause)

    @classmethod
    def wrap_external(cls, message: str, cause: BaseException) -> "AppError":
        return cls(ErrorType.external, message, cause)


def error_type_of(exc: BaseException) -> ErrorType:
    """Return the tag of ``exc``; anything that is not an AppError is internal."""
    if isinstance(exc, AppError):
        return exc.type
    return ErrorType.internal


def status_code_for(exc: BaseException) -> int:
    return STATUS_CODES[error_type_of(exc)]
