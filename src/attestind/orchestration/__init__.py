"""Orchestration for historical and live attestation indexing.

This package provides:
- `run_indexer`: interface-only application use case
- `index_history` / `watch_blocks`: concrete wiring for the CLI
- `live_config_after`: continue a historical run with live polling
"""

from attestind.orchestration.orchestrator import (
    IndexOutput,
    index_history,
    live_config_after,
    run_indexer,
    watch_blocks,
)

__all__ = [
    "IndexOutput",
    "index_history",
    "live_config_after",
    "run_indexer",
    "watch_blocks",
]
