"""Domain and data-store errors surfaced to the delivery layer."""

from sqlalchemy.exc import InterfaceError, OperationalError


class DataStoreError(Exception):
    """Base class for data-store boundary failures."""


class StoreUnavailableError(DataStoreError):
    """The data store is not connected or cannot be reached."""

    def __init__(self, message: str = "Database not connected") -> None:
        super().__init__(message)


class ReferentialIntegrityError(DataStoreError):
    """A write would break an ownership relationship between records."""


class SnapshotOrderError(ValueError):
    """A snapshot would not be strictly after the latest one for its offer."""


# Low-level exceptions that mean "the store is down", not "the query is wrong"
STORE_CONNECTION_ERRORS: tuple[type[BaseException], ...] = (
    StoreUnavailableError,
    OperationalError,
    InterfaceError,
    ConnectionError,
    TimeoutError,
)
