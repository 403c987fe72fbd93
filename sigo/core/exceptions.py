"""
Error taxonomy.

Every failure a domain operation can report is one of these classes.
They subclass `HTTPException` so FastAPI routes them to the handlers in
`sigo.main`, which render the uniform `{success, message, error}`
envelope.

Usage:
    raise NotFoundError("Sierra no encontrada")
    raise ConflictError("Error al crear el cliente", error=str(exc))
"""

from fastapi import HTTPException, status


class AppError(HTTPException):
    """Base class; carries a user-facing message and an optional technical error."""

    status_code_default: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        *,
        error: str | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(status_code=self.status_code_default, detail=message, headers=headers)
        self.message = message
        self.error = error


class ValidationError(AppError):
    """Malformed or missing input."""

    status_code_default = status.HTTP_400_BAD_REQUEST


class ConflictError(AppError):
    """Business-rule violation: duplicate barcode, blocking dependents, failed write."""

    status_code_default = status.HTTP_400_BAD_REQUEST


class AuthError(AppError):
    """Missing or invalid credential, or an unrecognised subject."""

    status_code_default = status.HTTP_401_UNAUTHORIZED

    def __init__(self, message: str, *, error: str | None = None):
        super().__init__(message, error=error, headers={"WWW-Authenticate": "Bearer"})


class ForbiddenError(AppError):
    """Authenticated, but the target lies outside the caller's scope or role."""

    status_code_default = status.HTTP_403_FORBIDDEN


class NotFoundError(AppError):
    """Referenced entity absent."""

    status_code_default = status.HTTP_404_NOT_FOUND


class UnexpectedError(AppError):
    """Store or identity-provider failure not otherwise classified."""

    status_code_default = status.HTTP_500_INTERNAL_SERVER_ERROR


class StoreError(UnexpectedError):
    """Typed failure returned by the data store gateway."""

    def __init__(self, message: str = "Error en la base de datos", *, error: str | None = None):
        super().__init__(message, error=error)


class IdentityError(UnexpectedError):
    """Failure reported by the identity provider."""

    def __init__(self, message: str = "Error en el proveedor de identidad", *, error: str | None = None):
        super().__init__(message, error=error)
