"""Lightweight JSON-RPC client for Ethereum-compatible nodes.

This module provides:
- `RPC`: an async client with sane timeouts/connection limits
- Helpers to map raw RPC transactions into `ChainTransaction`

It implements `IChainProvider` for the indexing use case.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from eth_utils import decode_hex

from attestind.core.errors import RPCError
from attestind.core.models import ChainTransaction

logger = logging.getLogger(__name__)


def to_hex_block(x: int) -> str:
    """Return a 0x-prefixed hex block number."""
    return hex(x)


def _hex_int(v: Any) -> int | None:
    if isinstance(v, int):
        return v
    if isinstance(v, str) and v:
        return int(v, 16)
    return None


def tx_from_rpc(raw: dict[str, Any]) -> ChainTransaction:
    """Map a raw RPC transaction object into a `ChainTransaction`."""
    to = raw.get("to")
    # some nodes still return the legacy "data" key
    data_hex = raw.get("input") or raw.get("data") or "0x"
    return ChainTransaction(
        tx_hash=str(raw["hash"]).lower(),
        to=to.lower() if to else None,
        input=decode_hex(data_hex),
        block_number=_hex_int(raw.get("blockNumber")),
    )


class RPC:
    """Minimal async RPC client.

    Parameters
    ----------
    url : str
        RPC endpoint URL.
    timeout_s : int
        Per-operation timeout in seconds (connect/read/write).
    max_connections : int
        Maximum concurrent connections to keep in the pool.
    transport : httpx.AsyncBaseTransport | None
        Optional transport override (tests use `httpx.MockTransport`).
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_s: int = 20,
        max_connections: int = 64,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self._next_id = 0
        self.client = httpx.AsyncClient(
            timeout=httpx.Timeout(
                connect=timeout_s,
                read=timeout_s,
                write=timeout_s,
                pool=max(30, timeout_s * 3),
            ),
            limits=httpx.Limits(
                max_connections=max_connections,
                max_keepalive_connections=max(1, max_connections // 2),
            ),
            http2=True,
            transport=transport,
        )

    async def _call(self, method: str, params: list[Any]) -> Any:
        self._next_id += 1
        payload = {"jsonrpc": "2.0", "id": self._next_id, "method": method, "params": params}
        r = await self.client.post(self.url, json=payload)
        r.raise_for_status()
        data = r.json()
        if "error" in data:
            e = data["error"]
            raise RPCError(e.get("code"), e.get("message", ""))
        return data.get("result")

    async def latest_block(self) -> int:
        """Return the latest block number as an int."""
        return int(await self._call("eth_blockNumber", []), 16)

    async def get_transaction(self, tx_hash: str) -> ChainTransaction | None:
        """Fetch one transaction by hash; None if the node does not know it."""
        raw = await self._call("eth_getTransactionByHash", [tx_hash])
        if raw is None:
            return None
        return tx_from_rpc(raw)

    async def get_block_timestamp(self, block_number: int) -> int:
        """Return the unix timestamp of a block."""
        raw = await self._call("eth_getBlockByNumber", [to_hex_block(block_number), False])
        if raw is None:
            raise RPCError(None, f"block {block_number} not found")
        return int(raw["timestamp"], 16)

    async def get_block_transactions(self, block_number: int) -> list[ChainTransaction]:
        """Return all transactions of a block (full objects)."""
        raw = await self._call("eth_getBlockByNumber", [to_hex_block(block_number), True])
        if raw is None:
            raise RPCError(None, f"block {block_number} not found")
        txs = [tx_from_rpc(t) for t in raw.get("transactions", [])]
        logger.debug("block %d: %d transactions", block_number, len(txs))
        return txs

    async def aclose(self) -> None:
        """Close the underlying HTTP client."""
        await self.client.aclose()
