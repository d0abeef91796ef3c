"""Record assembly: merge decoded fields with chain metadata.

The timestamp is the on-chain timestamp of the block containing the
transaction (chain-confirmed time), not the time the record was decoded.
"""

from __future__ import annotations

from datetime import datetime, timezone

from attestind.core.models import Attestation, DecodedPayload, RawCall, TransactionRef


def format_block_timestamp(ts: int) -> str:
    """Render a unix timestamp as ISO-8601 UTC with millisecond precision."""
    dt = datetime.fromtimestamp(ts, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{dt.microsecond // 1000:03d}Z"


def assemble_attestation(
    *,
    ref: TransactionRef,
    call: RawCall,
    payload: DecodedPayload,
    subject: str,
    block_timestamp: int,
) -> Attestation:
    """Build the final record from already-validated parts."""
    schema_id = call.attestation_payload.schema_id
    if len(schema_id) != 32:
        raise ValueError(f"schemaId must be a 32-byte word, got {len(schema_id)} bytes")
    if ref.block_number < 0:
        raise ValueError(f"block number must be non-negative, got {ref.block_number}")
    if not (subject.startswith("0x") and len(subject) == 42):
        raise ValueError(f"subject must be a normalized address, got {subject!r}")

    return Attestation(
        tx_hash=ref.tx_hash,
        block_number=ref.block_number,
        schema_id="0x" + schema_id.hex(),
        subject=subject,
        is_positive=payload.is_positive,
        article_page=payload.article_page,
        submitter=payload.submitter,
        timestamp=format_block_timestamp(block_timestamp),
    )
