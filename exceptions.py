"""Error taxonomy for person profile sync."""
from __future__ import annotations

from typing import Optional


class SyncError(Exception):
    """Base exception for all sync errors."""


class MalformedPayloadError(SyncError):
    """Raised when a profile body does not match the expected schema."""


class InvalidIdentifierError(SyncError):
    """Raised when an external-id is not numeric where a numeric compare is needed."""

    def __init__(self, value: object, record_id: Optional[int] = None) -> None:
        self.value = value
        self.record_id = record_id
        super().__init__(f"External id {value!r} is not numeric (record_id={record_id})")


class RecordNotFoundError(SyncError):
    """Raised when a local person record does not exist."""

    def __init__(self, record_id: object) -> None:
        self.record_id = record_id
        super().__init__(f"Person record not found: {record_id}")


class TransportFailureError(SyncError):
    """Raised when no HTTP response could be obtained for a callout."""


class RemoteRejectedError(SyncError):
    """Raised when the profile API answers with an unexpected status.

    The connector handles this itself and treats it as a no-op.
    """

    def __init__(self, status_code: int, body: str) -> None:
        self.status_code = status_code
        self.body = body
        super().__init__(f"Remote rejected request with status {status_code}: {body}")
