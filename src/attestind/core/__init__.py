"""Core data models, configuration, and errors.

This package provides:
- Data models (TransactionRef, RawCall, DecodedPayload, Attestation)
- Configuration classes (IndexerConfig, ExplorerQuery)
- Output schema versions
"""

from attestind.core.config import ExplorerQuery, IndexerConfig
from attestind.core.models import Attestation, ChainTransaction, DecodedPayload, RawCall, TransactionRef
from attestind.core.schemas import SchemaVersion

__all__ = [
    "ExplorerQuery",
    "IndexerConfig",
    "Attestation",
    "ChainTransaction",
    "DecodedPayload",
    "RawCall",
    "TransactionRef",
    "SchemaVersion",
]
