"""Storage components.

This package provides:
- AttestationSink: append-only JSONL + CSV writer with a single-writer lock
"""

from attestind.storage.sink import AttestationSink

__all__ = [
    "AttestationSink",
]
