class CompanionError(Exception):
    """Base class for errors raised by the companion bot."""


class StorageError(CompanionError):
    """The database could not be reached or a query failed."""


class ServiceError(CompanionError):
    """The AI service failed, timed out or returned an unusable reply."""
