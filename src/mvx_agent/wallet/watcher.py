"""Transaction watcher: follow a submitted transaction to a terminal outcome.

Where status updates come from is behind :class:`StatusFeed`, so the
polling feed used today can be swapped for a push subscription without
changing :meth:`TransactionWatcher.await_terminal`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from contextlib import aclosing
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator

import httpx

from mvx_agent.errors import ConfirmationTimeout, TransactionFailed
from mvx_agent.wallet.client import (
    FAILURE_STATUSES,
    SUCCESS_STATUSES,
    MultiversXApiClient,
    StatusReport,
)
from mvx_agent.wallet.networks import NetworkProfile
from mvx_agent.wallet.transaction import TransactionReceipt

logger = logging.getLogger("mvx_agent.wallet.watcher")

MIN_TIMEOUT_SECONDS = 1.0


class OutcomeStatus(str, Enum):
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


def classify_status(raw_status: str) -> OutcomeStatus:
    """Map a network status string onto the outcome state machine."""
    status = (raw_status or "").strip().lower()
    if status in SUCCESS_STATUSES:
        return OutcomeStatus.SUCCESS
    if status in FAILURE_STATUSES:
        return OutcomeStatus.FAILED
    return OutcomeStatus.PENDING


@dataclass(frozen=True)
class TransactionOutcome:
    """Where a transaction ended up. Frozen: a terminal outcome never changes."""

    status: OutcomeStatus
    tx_hash: str
    reason: str | None = None
    waited_seconds: float | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status is not OutcomeStatus.PENDING

    @property
    def succeeded(self) -> bool:
        return self.status is OutcomeStatus.SUCCESS

    def raise_for_status(self) -> None:
        """Raise ``TransactionFailed`` or ``ConfirmationTimeout`` unless successful."""
        if self.status is OutcomeStatus.FAILED:
            raise TransactionFailed(self.tx_hash, self.reason or "unknown reason")
        if self.status in (OutcomeStatus.TIMED_OUT, OutcomeStatus.PENDING):
            raise ConfirmationTimeout(self.tx_hash, self.waited_seconds)


# ---------------------------------------------------------------------------
# Status feeds
# ---------------------------------------------------------------------------


class StatusFeed(ABC):
    """Source of status reports for a transaction hash."""

    @abstractmethod
    def updates(self, tx_hash: str) -> AsyncIterator[StatusReport]:
        """Yield reports for *tx_hash*. May end early or never end."""


class PollingStatusFeed(StatusFeed):
    """Polls the API at a fixed interval, at most ``max_attempts`` times."""

    def __init__(
        self,
        client: MultiversXApiClient,
        interval_seconds: float,
        max_attempts: int,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.client = client
        self.interval_seconds = interval_seconds
        self.max_attempts = max_attempts

    async def updates(self, tx_hash: str) -> AsyncIterator[StatusReport]:
        for attempt in range(1, self.max_attempts + 1):
            try:
                report = await self.client.get_transaction_status(tx_hash)
            except httpx.HTTPError as exc:
                logger.warning(
                    f"Status poll {attempt}/{self.max_attempts} for {tx_hash} failed: {exc}"
                )
            else:
                yield report
            if attempt < self.max_attempts:
                await asyncio.sleep(self.interval_seconds)


class NotificationStatusFeed(StatusFeed):
    """Push-style feed: something else calls :meth:`publish` as updates arrive.

    Reports published before anyone listens are buffered per hash. At most
    *max_buffered* hashes are kept; past that, the oldest hash nobody is
    listening to is dropped.
    """

    def __init__(self, max_buffered: int = 1024) -> None:
        if max_buffered < 1:
            raise ValueError("max_buffered must be at least 1")
        self.max_buffered = max_buffered
        self._queues: dict[str, asyncio.Queue[StatusReport]] = {}
        self._listening: set[str] = set()

    @property
    def buffered_hashes(self) -> list[str]:
        return list(self._queues)

    def _queue(self, tx_hash: str) -> asyncio.Queue[StatusReport]:
        if tx_hash not in self._queues:
            self._evict()
            self._queues[tx_hash] = asyncio.Queue()
        return self._queues[tx_hash]

    def _evict(self) -> None:
        # dicts keep insertion order, so the first unwatched hash is the oldest
        while len(self._queues) >= self.max_buffered:
            stale = next((h for h in self._queues if h not in self._listening), None)
            if stale is None:
                return
            del self._queues[stale]
            logger.debug(f"Dropped unwatched status updates for {stale}")

    def publish(self, tx_hash: str, status: str, reason: str | None = None) -> None:
        self._queue(tx_hash).put_nowait(StatusReport(status=status.lower(), reason=reason))

    async def updates(self, tx_hash: str) -> AsyncIterator[StatusReport]:
        queue = self._queue(tx_hash)
        self._listening.add(tx_hash)
        try:
            while True:
                yield await queue.get()
        finally:
            self._listening.discard(tx_hash)
            self._queues.pop(tx_hash, None)


# ---------------------------------------------------------------------------
# Watcher
# ---------------------------------------------------------------------------


class TransactionWatcher:
    """Waits for a submitted transaction to succeed, fail or time out.

    Parameters
    ----------
    feed:
        Where status reports come from.
    timeout_seconds:
        Wall-clock deadline. Together with a finite feed this guarantees
        :meth:`await_terminal` always returns.
    """

    def __init__(self, feed: StatusFeed, timeout_seconds: float) -> None:
        if timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be positive")
        self.feed = feed
        self.timeout_seconds = timeout_seconds

    @classmethod
    def polling(
        cls,
        client: MultiversXApiClient,
        network: NetworkProfile,
        *,
        interval_seconds: float | None = None,
        max_attempts: int | None = None,
        timeout_seconds: float | None = None,
    ) -> TransactionWatcher:
        """Build a polling watcher, defaulting to the network's parameters."""
        interval = network.poll_interval_seconds if interval_seconds is None else interval_seconds
        attempts = max_attempts or network.max_poll_attempts
        if timeout_seconds is None:
            timeout_seconds = max(interval * (attempts + 1), MIN_TIMEOUT_SECONDS)
        return cls(PollingStatusFeed(client, interval, attempts), timeout_seconds)

    async def await_terminal(self, receipt: TransactionReceipt) -> TransactionOutcome:
        """Follow *receipt* until SUCCESS, FAILED or TIMED_OUT.

        Cancelling the calling task stops the polling only; the submitted
        transaction is out of our hands.
        """
        started = time.monotonic()
        try:
            status, reason = await asyncio.wait_for(
                self._follow(receipt.tx_hash), timeout=self.timeout_seconds
            )
        except asyncio.TimeoutError:
            status, reason = OutcomeStatus.TIMED_OUT, None

        waited = time.monotonic() - started
        if status is OutcomeStatus.TIMED_OUT and reason is None:
            reason = f"no final status after {waited:.0f}s"
        outcome = TransactionOutcome(
            status=status, tx_hash=receipt.tx_hash, reason=reason, waited_seconds=waited
        )

        if outcome.succeeded:
            logger.info(f"Transaction {receipt.tx_hash} succeeded after {waited:.1f}s")
        else:
            logger.warning(f"Transaction {receipt.tx_hash} ended {status.value}: {reason}")
        return outcome

    async def _follow(self, tx_hash: str) -> tuple[OutcomeStatus, str | None]:
        async with aclosing(self.feed.updates(tx_hash)) as updates:
            async for report in updates:
                status = classify_status(report.status)
                if status is OutcomeStatus.SUCCESS:
                    return status, None
                if status is OutcomeStatus.FAILED:
                    return status, report.reason or report.status
        return OutcomeStatus.TIMED_OUT, "status polling gave up"
