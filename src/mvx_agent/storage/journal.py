"""Transaction journal: an audit trail of every submission and its outcome."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel

from mvx_agent.storage.database import Database
from mvx_agent.wallet.transaction import TransactionReceipt, TransactionRequest
from mvx_agent.wallet.watcher import OutcomeStatus, TransactionOutcome

logger = logging.getLogger("mvx_agent.storage.journal")


class TransactionRecord(BaseModel):
    """Maps to the ``transactions`` table."""

    tx_hash: str
    action: str
    caller_id: str = ""
    network: str
    sender: str
    receiver: str
    value: str
    nonce: int
    status: OutcomeStatus = OutcomeStatus.PENDING
    reason: Optional[str] = None
    submitted_at: datetime
    resolved_at: Optional[datetime] = None


class TransactionJournal:
    """Records submissions and outcomes in the ``transactions`` table."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def record_submission(
        self,
        receipt: TransactionReceipt,
        request: TransactionRequest,
        *,
        action: str,
        caller_id: str,
        network: str,
        sender: str,
    ) -> TransactionRecord:
        record = TransactionRecord(
            tx_hash=receipt.tx_hash,
            action=action,
            caller_id=caller_id,
            network=network,
            sender=sender,
            receiver=request.receiver,
            value=str(request.value),
            nonce=receipt.nonce,
            submitted_at=receipt.submitted_at,
        )
        await self.db.execute(
            "INSERT INTO transactions "
            "(tx_hash, action, caller_id, network, sender, receiver, value, nonce, status, submitted_at) "
            "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)",
            (
                record.tx_hash,
                record.action,
                record.caller_id,
                record.network,
                record.sender,
                record.receiver,
                record.value,
                record.nonce,
                record.status.value,
                record.submitted_at.isoformat(),
            ),
        )
        return record

    async def record_outcome(self, outcome: TransactionOutcome) -> None:
        """Store a terminal outcome.

        Only rows still open (pending, or timed out while we were watching)
        are updated; a settled success or failure is final.
        """
        if not outcome.is_terminal:
            return
        cursor = await self.db.execute(
            "UPDATE transactions SET status = ?, reason = ?, resolved_at = ? "
            "WHERE tx_hash = ? AND status IN (?, ?)",
            (
                outcome.status.value,
                outcome.reason,
                datetime.now(timezone.utc).isoformat(),
                outcome.tx_hash,
                OutcomeStatus.PENDING.value,
                OutcomeStatus.TIMED_OUT.value,
            ),
        )
        if cursor.rowcount == 0:
            logger.debug(f"No open journal row for {outcome.tx_hash}")

    async def get(self, tx_hash: str) -> TransactionRecord | None:
        row = await self.db.fetch_one("SELECT * FROM transactions WHERE tx_hash = ?", (tx_hash,))
        return TransactionRecord.model_validate(row) if row else None

    async def list_recent(self, limit: int = 20) -> list[TransactionRecord]:
        rows = await self.db.fetch_all(
            "SELECT * FROM transactions ORDER BY submitted_at DESC LIMIT ?", (limit,)
        )
        return [TransactionRecord.model_validate(r) for r in rows]
