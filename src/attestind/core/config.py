from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from attestind.core.schemas import SchemaVersion


@dataclass(frozen=True)
class ExplorerQuery:
    """Paging window for the explorer `txlist` query."""

    start_block: int = 0
    end_block: int = 99_999_999
    page: int = 1
    offset: int = 100
    sort: str = "desc"


@dataclass(frozen=True)
class IndexerConfig:
    """Configuration for one indexing run, built once by the CLI."""

    rpc_url: str
    contract: str
    explorer_url: str | None = None
    explorer_api_key: str = ""
    explorer_query: ExplorerQuery = ExplorerQuery()
    out_dir: Path = Path("./data")
    schema_version: SchemaVersion = SchemaVersion.ATTESTATION
    workers: int = 8
    queue_size: int = 64
    timeout_s: int = 20
    poll_interval_s: float = 4.0
    # Live mode: first block to scan (None = the block after the current head)
    live_start_block: int | None = None
