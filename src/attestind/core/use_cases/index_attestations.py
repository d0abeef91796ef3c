from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

import httpx

from attestind.core.assembler import assemble_attestation
from attestind.core.errors import RPCError, SkipError, TransactionNotFound
from attestind.core.interfaces import IAttestationSink, IChainProvider, ITransactionSource
from attestind.core.models import Attestation, TransactionRef
from attestind.decoding.call import decode_attest_call
from attestind.decoding.payload import decode_attestation_data
from attestind.decoding.subject import normalize_subject

logger = logging.getLogger(__name__)

# per-transaction failures that drop the transaction but keep the run going
_SKIPPABLE = (SkipError, RPCError, httpx.HTTPError)

_STOP = None


# ---------------------------------------------------------------------------
# Domain configuration
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class IndexConfig:
    """
    Domain-level configuration for the indexing use case.

    Free of infrastructure concerns (no URLs, no filesystem paths).
    """

    contract: str
    workers: int = 8
    queue_size: int = 64


# ---------------------------------------------------------------------------
# Stats
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class IndexStats:
    """
    Aggregated counters for one run.

    - seen: references pulled from the source
    - indexed: records appended to the sink
    - skipped: not applicable (wrong destination, no call data, empty payload)
    - failed: skip-and-continue errors (decode, subject, RPC)
    """

    seen: int = 0
    indexed: int = 0
    skipped: int = 0
    failed: int = 0


# ---------------------------------------------------------------------------
# Domain service – AttestationIndexer
# ---------------------------------------------------------------------------


class AttestationIndexer:
    """
    Runs the decode pipeline over a transaction source.

    A single producer pushes references onto a bounded queue; a fixed pool of
    workers drains it; the sink serializes its own appends.
    """

    def __init__(
        self,
        chain: IChainProvider,
        sink: IAttestationSink,
        config: IndexConfig,
    ) -> None:
        self._chain = chain
        self._sink = sink
        self._config = config
        self._block_ts: dict[int, int] = {}

    async def _block_timestamp(self, block_number: int) -> int:
        ts = self._block_ts.get(block_number)
        if ts is None:
            ts = await self._chain.get_block_timestamp(block_number)
            self._block_ts[block_number] = ts
        return ts

    async def process(self, ref: TransactionRef) -> Attestation | None:
        """Decode one transaction into a record; None if not applicable.

        Raises a `SkipError` subclass (or an RPC/transport error) when the
        transaction should be dropped.
        """
        tx = await self._chain.get_transaction(ref.tx_hash)
        if tx is None:
            raise TransactionNotFound(f"transaction {ref.tx_hash} not found")

        call = decode_attest_call(tx, self._config.contract)
        if call is None:
            logger.warning("skipping non-matching transaction %s", ref.tx_hash)
            return None

        payload = decode_attestation_data(call.attestation_payload.attestation_data)
        if payload is None:
            logger.warning("skipping empty attestation data in %s", ref.tx_hash)
            return None

        subject = normalize_subject(call.attestation_payload.subject)
        block_ts = await self._block_timestamp(ref.block_number)

        return assemble_attestation(
            ref=ref,
            call=call,
            payload=payload,
            subject=subject,
            block_timestamp=block_ts,
        )

    async def _handle(self, ref: TransactionRef, stats: IndexStats) -> None:
        try:
            att = await self.process(ref)
        except _SKIPPABLE as e:
            stats.failed += 1
            logger.error("error decoding transaction %s: %s", ref.tx_hash, e)
            return
        if att is None:
            stats.skipped += 1
            return
        await self._sink.append(att)
        stats.indexed += 1
        logger.info("attestation found: tx=%s subject=%s page=%s", att.tx_hash, att.subject, att.article_page)

    async def _worker(self, queue: asyncio.Queue, stats: IndexStats) -> None:
        while True:
            ref = await queue.get()
            try:
                if ref is _STOP:
                    return
                await self._handle(ref, stats)
            finally:
                queue.task_done()

    async def _produce(self, source: ITransactionSource, queue: asyncio.Queue, stats: IndexStats) -> None:
        async for ref in source.transactions():
            stats.seen += 1
            await queue.put(ref)

    async def _send_stop(self, queue: asyncio.Queue, n: int) -> None:
        for _ in range(n):
            await queue.put(_STOP)

    @staticmethod
    async def _abort(tasks: list[asyncio.Task], workers: list[asyncio.Task]) -> None:
        """Cancel everything and re-raise the first worker failure."""
        for t in tasks:
            t.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        for w in workers:
            if not w.cancelled() and w.exception() is not None:
                raise w.exception()
        raise RuntimeError("worker exited unexpectedly")

    async def run(self, source: ITransactionSource) -> IndexStats:
        """
        Drain `source` through the worker pool.

        - A source failure (e.g. `ExplorerError`) lets already queued work
          finish, then propagates.
        - An unexpected worker exception cancels the run and propagates,
          whether it happens while the source is still producing or while
          the queue drains.
        """
        stats = IndexStats()
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._config.queue_size)

        workers = [
            asyncio.create_task(self._worker(queue, stats))
            for _ in range(self._config.workers)
        ]
        producer = asyncio.create_task(self._produce(source, queue, stats))

        done, _ = await asyncio.wait([producer, *workers], return_when=asyncio.FIRST_COMPLETED)
        if producer not in done:
            # a worker died: that is a bug, not a skippable error
            await self._abort([producer, *workers], workers)

        feeder = asyncio.create_task(self._send_stop(queue, len(workers)))
        _, pending = await asyncio.wait([feeder, *workers], return_when=asyncio.FIRST_EXCEPTION)
        if pending or any(not w.cancelled() and w.exception() is not None for w in workers):
            await self._abort([feeder, producer, *workers], workers)

        # re-raise a source failure only after in-flight work drained
        producer.result()
        return stats
