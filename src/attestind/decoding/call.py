"""Outer call decoder for `attest(AttestationPayload, bytes[])`.

Translates a transaction's raw input into a `RawCall`. Transactions that are
not calls to the target contract are "not applicable" and yield None; call
data that claims to be an `attest` call but is malformed raises
`CallDecodeError`.
"""

from __future__ import annotations

from attestind.core.errors import CallDecodeError
from attestind.core.models import AttestationPayload, ChainTransaction, RawCall
from attestind.decoding.specs import ATTEST_SELECTOR, ATTESTATION_PAYLOAD_HEAD_WORDS
from attestind.decoding.utils import (
    WORD,
    parse_uint,
    read_bytes,
    read_bytes_array,
    read_offset,
    word_at,
)


def _decode_payload_tuple(args: bytes, pos: int) -> AttestationPayload:
    """Decode the dynamic AttestationPayload tuple whose head starts at `pos`."""
    if pos + WORD * ATTESTATION_PAYLOAD_HEAD_WORDS > len(args):
        raise ValueError("AttestationPayload head truncated")
    schema_id = word_at(args, 0, base=pos)
    expiration = parse_uint(word_at(args, 1, base=pos), 64)
    subject = read_bytes(args, read_offset(args, 2, base=pos))
    attestation_data = read_bytes(args, read_offset(args, 3, base=pos))
    return AttestationPayload(
        schema_id=schema_id,
        expiration_date=expiration,
        subject=subject,
        attestation_data=attestation_data,
    )


def decode_attest_call(tx: ChainTransaction, contract: str) -> RawCall | None:
    """Decode `tx.input` against the `attest` signature.

    Returns None when the transaction is not addressed to `contract` or carries
    no call data. Raises `CallDecodeError` on selector mismatch or a malformed
    head/tail layout.
    """
    if not tx.to or tx.to.lower() != contract.lower():
        return None
    if not tx.input:
        return None

    selector, args = tx.input[:4], tx.input[4:]
    if selector != ATTEST_SELECTOR:
        raise CallDecodeError(f"selector 0x{selector.hex()} is not attest (0x{ATTEST_SELECTOR.hex()})")

    try:
        payload = _decode_payload_tuple(args, read_offset(args, 0))
        validation_payloads = read_bytes_array(args, read_offset(args, 1))
    except ValueError as e:
        raise CallDecodeError(f"malformed attest call data: {e}") from e

    return RawCall(attestation_payload=payload, validation_payloads=validation_payloads)
