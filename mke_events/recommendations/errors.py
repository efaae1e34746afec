from __future__ import annotations


class DataStoreError(Exception):
    """Raised when a backing dataset cannot be read or is malformed."""


class HistoryStoreError(DataStoreError):
    pass


class CatalogError(DataStoreError):
    pass
