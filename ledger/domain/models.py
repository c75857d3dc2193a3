"""
Domain Models - ledger records and the edits allowed on them.

Expense and income records share one shape; the RecordKind decides which
collection a record lives in.
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Mapping, Optional

from ledger.domain.exceptions import ValidationError

# Fields returned by range queries, in stored (wire) names
RECORD_FIELDS = (
    "_id",
    "account",
    "amount",
    "currency",
    "timestamp",
    "description",
    "availableCredit",
    "category",
)

# Fields an edit may touch; everything else is fixed after insert
EDITABLE_FIELDS = ("description", "timestamp", "category")


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _to_timestamp(value: Any) -> int:
    if not _is_number(value):
        raise ValidationError("timestamp must be a number of unix seconds")
    if isinstance(value, float) and not value.is_integer():
        raise ValidationError("timestamp must be a whole number of seconds")
    return int(value)


@dataclass(frozen=True)
class LedgerRecord:
    """A single expense or income entry."""

    account: str
    amount: float
    currency: str
    timestamp: int
    description: str
    available_credit: float
    category: Optional[str] = None
    id: Optional[str] = None

    def __post_init__(self):
        """Validate record data."""
        if not self.account or not str(self.account).strip():
            raise ValidationError("account cannot be empty")

        if not _is_number(self.amount):
            raise ValidationError("amount must be numeric")

        if not _is_number(self.available_credit):
            raise ValidationError("availableCredit must be numeric")

        object.__setattr__(self, "timestamp", _to_timestamp(self.timestamp))

    @classmethod
    def from_input(cls, data: Mapping[str, Any]) -> "LedgerRecord":
        """Build a new record from caller input.

        Only the recognized fields are read; any other key is ignored. An
        ``id`` in the input is ignored too, the store assigns it on insert.

        Raises:
            ValidationError: If a required field is missing or mistyped
        """
        available_credit = data.get("availableCredit", data.get("available_credit"))
        required = {
            "account": data.get("account"),
            "amount": data.get("amount"),
            "currency": data.get("currency"),
            "timestamp": data.get("timestamp"),
            "description": data.get("description"),
            "availableCredit": available_credit,
        }
        missing = [name for name, value in required.items() if value is None]
        if missing:
            raise ValidationError(f"missing required fields: {', '.join(missing)}")

        return cls(
            account=required["account"],
            amount=required["amount"],
            currency=required["currency"],
            timestamp=required["timestamp"],
            description=required["description"],
            available_credit=available_credit,
            category=data.get("category"),
        )

    @classmethod
    def from_document(cls, doc: Mapping[str, Any]) -> "LedgerRecord":
        """Create a LedgerRecord from a stored document."""
        record_id = doc.get("_id")
        return cls(
            id=str(record_id) if record_id is not None else None,
            account=doc["account"],
            amount=doc["amount"],
            currency=doc["currency"],
            timestamp=doc["timestamp"],
            description=doc["description"],
            available_credit=doc["availableCredit"],
            category=doc.get("category"),
        )

    def to_document(self) -> dict:
        """Convert to the stored document, without an id."""
        return {
            "account": self.account,
            "amount": self.amount,
            "currency": self.currency,
            "timestamp": self.timestamp,
            "description": self.description,
            "availableCredit": self.available_credit,
            "category": self.category,
        }

    def public_view(self) -> dict:
        """Trimmed view handed to the front end."""
        return {
            "account": self.account,
            "currency": self.currency,
            "timestamp": self.timestamp,
            "description": self.description,
            "availableCredit": self.available_credit,
        }


@dataclass(frozen=True)
class RecordChanges:
    """Edit applied to an existing record.

    Only the fields named in ``fields_set`` are written, so an explicit None
    category clears the stored one. Built by from_input(), the set holds the
    keys present in the input; built directly, it holds every field that is
    not None.
    """

    description: Optional[str] = None
    timestamp: Optional[int] = None
    category: Optional[str] = None
    fields_set: Optional[FrozenSet[str]] = field(
        default=None, compare=False, repr=False
    )

    def __post_init__(self):
        if self.fields_set is None:
            fields_set = frozenset(
                name for name in EDITABLE_FIELDS if getattr(self, name) is not None
            )
        else:
            fields_set = frozenset(self.fields_set) & frozenset(EDITABLE_FIELDS)
        object.__setattr__(self, "fields_set", fields_set)

        if "timestamp" in fields_set:
            if self.timestamp is None:
                raise ValidationError("timestamp cannot be cleared")
            object.__setattr__(self, "timestamp", _to_timestamp(self.timestamp))
        if "description" in fields_set and self.description is None:
            raise ValidationError("description cannot be cleared")

    @classmethod
    def from_input(cls, data: Mapping[str, Any]) -> "RecordChanges":
        """Keep only description, timestamp and category from ``data``."""
        present = [name for name in EDITABLE_FIELDS if name in data]
        return cls(
            **{name: data[name] for name in present},
            fields_set=frozenset(present),
        )

    def to_update(self) -> dict:
        """Fields to set on the stored document."""
        return {
            name: getattr(self, name)
            for name in EDITABLE_FIELDS
            if name in self.fields_set
        }

    @property
    def is_empty(self) -> bool:
        return not self.fields_set
