"""Domain errors raised by the services and mapped to HTTP by the API layer."""


class TailorShopError(Exception):
    """Base exception for all application errors."""
    status_code = 500

    def __init__(self, message="An internal error occurred", details=None):
        super().__init__(message)
        self.message = message
        self.details = details

    def to_dict(self):
        rv = {"error": self.message}
        if self.details:
            rv["details"] = self.details
        return rv


class ValidationError(TailorShopError):
    """Input is well-formed JSON but violates a business rule."""
    status_code = 400


class NotFoundError(TailorShopError):
    status_code = 404

    def __init__(self, message="Resource not found", details=None):
        super().__init__(message, details)


class ConflictError(TailorShopError):
    """A unique value (e.g. a phone number) is already taken."""
    status_code = 400


class HasDependentsError(ConflictError):
    """The row is still referenced and cannot be deleted."""


def is_unique_violation(exc: Exception, column: str = "") -> bool:
    """Classify a driver IntegrityError by its message (postgres 23505 / sqlite UNIQUE)."""
    text = str(getattr(exc, "orig", exc)).lower()
    code = getattr(getattr(exc, "orig", None), "pgcode", None)
    unique = code == "23505" or "unique" in text or "duplicate key" in text
    return unique and column.lower() in text
