"""Indexing orchestrator: source → decode → sink.

This module provides two layers:

1) `run_indexer(...)`:
   - Pure application-layer use case.
   - Depends ONLY on interfaces (IChainProvider, IAttestationSink,
     ITransactionSource).
   - Does NOT instantiate clients or manage their lifecycle.

2) `index_history(...)` / `watch_blocks(...)`:
   - Wire concrete implementations (RPC, Explorer, AttestationSink) for
     typical CLI usage and close clients when done.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from pathlib import Path

from attestind.clients.explorer import Explorer
from attestind.clients.rpc import RPC
from attestind.core.config import IndexerConfig
from attestind.core.interfaces import IAttestationSink, IChainProvider, ITransactionSource
from attestind.core.use_cases.index_attestations import AttestationIndexer, IndexConfig, IndexStats
from attestind.sources import ExplorerSource, LiveBlockSource
from attestind.storage.sink import AttestationSink

logger = logging.getLogger(__name__)

MIN_RPC_CONNECTIONS = 8


# ---------------------------------------------------------------------------
# Output DTO
# ---------------------------------------------------------------------------


@dataclass(kw_only=True)
class IndexOutput:
    """High-level output of one run."""

    stats: IndexStats
    json_path: Path
    csv_path: Path
    # highest block covered by a historical run, when known
    last_block: int | None = None


# ---------------------------------------------------------------------------
# 1) Pure application use case
# ---------------------------------------------------------------------------


async def run_indexer(
    *,
    config: IndexerConfig,
    chain: IChainProvider,
    sink: IAttestationSink,
    source: ITransactionSource,
) -> IndexStats:
    """Run one source through the decode pipeline into `sink`."""
    indexer = AttestationIndexer(
        chain=chain,
        sink=sink,
        config=IndexConfig(
            contract=config.contract,
            workers=config.workers,
            queue_size=config.queue_size,
        ),
    )
    return await indexer.run(source)


# ---------------------------------------------------------------------------
# 2) Concrete wiring
# ---------------------------------------------------------------------------


def _make_rpc(config: IndexerConfig) -> RPC:
    return RPC(
        config.rpc_url,
        timeout_s=config.timeout_s,
        max_connections=max(MIN_RPC_CONNECTIONS, 2 * config.workers),
    )


async def _make_sink(config: IndexerConfig) -> AttestationSink:
    sink = AttestationSink(config.out_dir, config.schema_version)
    # every run starts from empty artifacts
    await sink.reset()
    return sink


async def index_history(config: IndexerConfig) -> IndexOutput:
    """One-shot historical run over one explorer page."""
    if not config.explorer_url:
        raise ValueError("explorer_url is required for a historical run")

    sink = await _make_sink(config)
    rpc = _make_rpc(config)
    explorer = Explorer(config.explorer_url, api_key=config.explorer_api_key, timeout_s=config.timeout_s)
    try:
        source = ExplorerSource(explorer, config.contract, config.explorer_query)
        stats = await run_indexer(config=config, chain=rpc, sink=sink, source=source)
    finally:
        await explorer.aclose()
        await rpc.aclose()

    return IndexOutput(
        stats=stats,
        json_path=sink.json_path,
        csv_path=sink.csv_path,
        last_block=source.last_block,
    )


def live_config_after(config: IndexerConfig, history: IndexOutput) -> IndexerConfig:
    """Config for a live run that picks up right after `history`.

    Live polling then starts at the block after the newest explorer result
    instead of the chain head, so blocks mined during the historical pass are
    still scanned. Without any explorer result the head is used.
    """
    if history.last_block is None:
        return config
    return replace(config, live_start_block=history.last_block + 1)


async def watch_blocks(
    config: IndexerConfig,
    stop: asyncio.Event,
    *,
    reset: bool = True,
) -> IndexOutput:
    """Long-running live run; returns after `stop` is set and work drained.

    With `reset=False` records are appended to the artifacts left by a
    preceding historical run instead of starting fresh.
    """
    if reset:
        sink = await _make_sink(config)
    else:
        sink = AttestationSink(config.out_dir, config.schema_version)
    rpc = _make_rpc(config)
    try:
        source = LiveBlockSource(
            rpc,
            config.contract,
            stop=stop,
            poll_interval_s=config.poll_interval_s,
            start_block=config.live_start_block,
        )
        stats = await run_indexer(config=config, chain=rpc, sink=sink, source=source)
    finally:
        await rpc.aclose()

    return IndexOutput(stats=stats, json_path=sink.json_path, csv_path=sink.csv_path)
