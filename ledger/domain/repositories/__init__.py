"""Driver contracts used by the ledger store."""

from ledger.domain.repositories.protocols import (
    IConnection,
    IDocumentDriver,
    ReadyState,
)

__all__ = ["IConnection", "IDocumentDriver", "ReadyState"]
