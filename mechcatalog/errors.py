from __future__ import annotations


class CatalogError(RuntimeError):
    pass


class MalformedInput(CatalogError):
    """Source text is not valid JSON."""


class InvalidFormat(CatalogError):
    """Valid JSON that lacks the fields identifying a mech record."""

    def __init__(self, message: str, *, field: str | None = None):
        super().__init__(message)
        self.field = field


class NotFound(CatalogError):
    def __init__(self, mech_id: str):
        super().__init__(f'Mech with id "{mech_id}" not found')
        self.mech_id = mech_id


class SourceUnavailable(CatalogError):
    def __init__(self, message: str, *, location: str | None = None):
        super().__init__(message)
        self.location = location
