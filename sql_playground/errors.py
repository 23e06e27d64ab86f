from sqlalchemy.exc import SQLAlchemyError


class GatewayError(Exception):
    """Base exception for sql_playground; carries the HTTP status to answer with."""

    status_code = 500


class ValidationError(GatewayError):
    status_code = 400


class ConflictError(GatewayError):
    status_code = 400


class AuthError(GatewayError):
    status_code = 401


class ExecutionError(GatewayError):
    status_code = 500

    @classmethod
    def from_db(cls, exc: SQLAlchemyError) -> "ExecutionError":
        """Wrap a SQLAlchemy error, keeping only the driver's own message."""
        orig = getattr(exc, "orig", None)
        message = str(orig) if orig is not None else str(exc)
        return cls(message.strip())
