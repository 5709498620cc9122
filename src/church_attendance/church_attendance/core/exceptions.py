class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class DataAccessError(DomainError):
    """Raised when the backing store fails or rejects an operation."""


class RecordNotFoundError(DataAccessError):
    """Raised when an attendance record to update/delete does not exist."""

    def __init__(self, record_id: int):
        self.record_id = record_id
        super().__init__(f"Attendance record {record_id} not found")
