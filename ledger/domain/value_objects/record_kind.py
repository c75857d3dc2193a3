"""Record kind value object."""

from enum import Enum


class RecordKind(str, Enum):
    """Kind of ledger record (EXPENSE or INCOME)."""

    EXPENSE = "expense"
    INCOME = "income"

    @property
    def collection(self) -> str:
        """Name of the MongoDB collection holding records of this kind."""
        return f"{self.value}s"
