"""Storage layer -- async SQLite database and the transaction journal."""

from mvx_agent.storage.database import Database
from mvx_agent.storage.journal import TransactionJournal, TransactionRecord

__all__ = [
    "Database",
    "TransactionJournal",
    "TransactionRecord",
]
