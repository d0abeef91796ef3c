"""Transaction sources feeding the indexer.

- `ExplorerSource`: one-shot historical scan of one explorer page.
- `LiveBlockSource`: polls the chain head and scans every new block until its
  stop event is set.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Protocol

import httpx

from attestind.clients.explorer import ExplorerTx
from attestind.core.config import ExplorerQuery
from attestind.core.errors import RPCError
from attestind.core.models import ChainTransaction, TransactionRef

logger = logging.getLogger(__name__)


class _TxLister(Protocol):
    async def txlist(self, address: str, query: ExplorerQuery) -> list[ExplorerTx]: ...


class _BlockReader(Protocol):
    async def latest_block(self) -> int: ...

    async def get_block_transactions(self, block_number: int) -> list[ChainTransaction]: ...


def _is_to(to: str | None, contract: str) -> bool:
    return bool(to) and to.lower() == contract.lower()


class ExplorerSource:
    """Historical source: one explorer page, filtered to the target contract.

    The page is fetched in full before anything is yielded, so an explorer
    error aborts the batch before any reference reaches the decoders.
    """

    def __init__(self, explorer: _TxLister, contract: str, query: ExplorerQuery | None = None) -> None:
        self.explorer = explorer
        self.contract = contract
        self.query = query or ExplorerQuery()
        # highest block seen on the last page; None until a reference is yielded
        self.last_block: int | None = None

    async def transactions(self) -> AsyncIterator[TransactionRef]:
        items = await self.explorer.txlist(self.contract, self.query)
        kept = 0
        for it in items:
            if not _is_to(it.to, self.contract):
                continue
            kept += 1
            if self.last_block is None or it.blockNumber > self.last_block:
                self.last_block = it.blockNumber
            yield TransactionRef(tx_hash=it.hash.lower(), block_number=it.blockNumber)
        logger.info("explorer page: %d/%d transactions addressed to %s", kept, len(items), self.contract)


class LiveBlockSource:
    """Live source: scan each newly confirmed block for calls to the contract.

    Runs until `stop` is set. The block currently being scanned is finished
    before the iterator returns.
    """

    def __init__(
        self,
        rpc: _BlockReader,
        contract: str,
        *,
        stop: asyncio.Event,
        poll_interval_s: float = 4.0,
        start_block: int | None = None,
    ) -> None:
        self.rpc = rpc
        self.contract = contract
        self.stop = stop
        self.poll_interval_s = poll_interval_s
        self.start_block = start_block

    async def _sleep(self) -> None:
        try:
            await asyncio.wait_for(self.stop.wait(), timeout=self.poll_interval_s)
        except asyncio.TimeoutError:
            pass

    async def transactions(self) -> AsyncIterator[TransactionRef]:
        next_block = self.start_block
        if next_block is None:
            next_block = await self.rpc.latest_block() + 1
        logger.info("watching blocks from %d", next_block)

        while not self.stop.is_set():
            try:
                head = await self.rpc.latest_block()
            except (httpx.HTTPError, RPCError) as e:
                logger.warning("head poll failed, retrying: %s", e)
                await self._sleep()
                continue
            while next_block <= head and not self.stop.is_set():
                try:
                    txs = await self.rpc.get_block_transactions(next_block)
                except (httpx.HTTPError, RPCError) as e:
                    # retried from the same block on the next poll
                    logger.warning("block %d fetch failed: %s", next_block, e)
                    break
                logger.debug("new block %d (%d txs)", next_block, len(txs))
                for tx in txs:
                    if _is_to(tx.to, self.contract):
                        yield TransactionRef(tx_hash=tx.tx_hash, block_number=next_block)
                next_block += 1
            await self._sleep()
        logger.info("live source stopped at block %d", next_block - 1)
