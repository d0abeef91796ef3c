"""Versioned output schemas.

Two column sets were used historically for the same attestation data. Each is
a `SchemaVersion`; a run picks exactly one and every artifact it writes uses
that version's columns.

- `attestation`: raw decoded fields (default).
- `feedback`: submitter plus a positive/negative counter pair derived from
  `isPositive`.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import pyarrow as pa

from attestind.core.models import Attestation


_COLUMNS: dict[str, list[tuple[str, pa.DataType]]] = {
    "attestation": [
        ("txHash", pa.string()),
        ("blockNumber", pa.uint64()),
        ("schemaId", pa.string()),
        ("subject", pa.string()),
        ("isPositive", pa.bool_()),
        ("articlePage", pa.string()),
        ("submitter", pa.string()),
        ("timestamp", pa.string()),
    ],
    "feedback": [
        ("txHash", pa.string()),
        ("blockNumber", pa.uint64()),
        ("from", pa.string()),
        ("timestamp", pa.string()),
        ("articlePage", pa.string()),
        ("positiveFeedback", pa.uint8()),
        ("negativeFeedback", pa.uint8()),
    ],
}


class SchemaVersion(str, Enum):
    """Explicit selector for the output column set."""

    ATTESTATION = "attestation"
    FEEDBACK = "feedback"

    @property
    def columns(self) -> list[str]:
        """Ordered column names (the CSV header row)."""
        return [name for name, _ in _COLUMNS[self.value]]

    @property
    def arrow_schema(self) -> pa.Schema:
        return pa.schema([pa.field(n, t) for n, t in _COLUMNS[self.value]])

    def project(self, att: Attestation) -> dict[str, Any]:
        """Project a record onto this version's columns, in header order."""
        if self is SchemaVersion.FEEDBACK:
            return {
                "txHash": att.tx_hash,
                "blockNumber": att.block_number,
                "from": att.submitter,
                "timestamp": att.timestamp,
                "articlePage": att.article_page,
                "positiveFeedback": 1 if att.is_positive else 0,
                "negativeFeedback": 0 if att.is_positive else 1,
            }
        return {
            "txHash": att.tx_hash,
            "blockNumber": att.block_number,
            "schemaId": att.schema_id,
            "subject": att.subject,
            "isPositive": att.is_positive,
            "articlePage": att.article_page,
            "submitter": att.submitter,
            "timestamp": att.timestamp,
        }
