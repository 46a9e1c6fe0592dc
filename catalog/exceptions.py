"""
Error types raised and collected by the catalog workflows.

Each carries a human readable ``message`` and the HTTP ``status`` a view
should answer with when the error reaches it.
"""


class CatalogError(Exception):
    status = 500

    def __init__(self, message):
        super().__init__(message)
        self.message = message


class ValidationError(CatalogError):
    """A rejected form field. Collected into a list, not raised."""
    status = 200

    def __init__(self, field, message):
        super().__init__(message)
        self.field = field

    def __eq__(self, other):
        if not isinstance(other, ValidationError):
            return NotImplemented
        return (self.field, self.message) == (other.field, other.message)

    def __hash__(self):
        return hash((self.field, self.message))

    def __repr__(self):
        return f"ValidationError({self.field!r}, {self.message!r})"


class NotFoundError(CatalogError):
    status = 404


class ConflictError(CatalogError):
    """A write refused by a unique or protected-reference constraint."""
    status = 409

    def __init__(self, message, field=None):
        super().__init__(message)
        self.field = field


class StorageError(CatalogError):
    status = 500
