"""Errors raised by the ledger and its storage adapters."""


class LedgerError(Exception):
    """Base class for ledger failures."""


class StorageUnavailable(LedgerError):
    """The durable store cannot be opened."""


class StorageError(LedgerError):
    """The durable store was opened but an operation failed."""


class PersistenceFailed(LedgerError):
    """A durable write failed after the in-memory state was already updated."""

    def __init__(self, operation: str, record_id: str, cause: Exception) -> None:
        super().__init__(f"Failed to {operation} record {record_id}: {cause}")
        self.operation = operation
        self.record_id = record_id
        self.cause = cause


class RecordNotFound(LedgerError):
    """No record with this id belongs to the owner."""

    def __init__(self, record_id: str) -> None:
        super().__init__(f"Record {record_id} not found")
        self.record_id = record_id
