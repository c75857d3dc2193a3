"""Value objects for the ledger domain."""

from ledger.domain.value_objects.credentials import DEFAULT_PORT, Credentials
from ledger.domain.value_objects.record_kind import RecordKind

__all__ = ["Credentials", "DEFAULT_PORT", "RecordKind"]
