from __future__ import annotations


class QuotesyncError(Exception):
    pass


class ValidationError(QuotesyncError):
    pass


class MalformedImportError(QuotesyncError):
    pass


class ConflictNotFoundError(QuotesyncError):
    pass


class SyncError(QuotesyncError):
    """Base for failures talking to the remote endpoint."""


class NetworkError(SyncError):
    pass


class DecodeError(SyncError):
    pass
