"""Inner payload decoder for `attestationData`.

The payload is a standalone ABI-encoded tuple `(bool, string, address)`:

    word 0   isPositive      (nonzero = true)
    word 1   offset → articlePage (length word + UTF-8 bytes, padded)
    word 2   submitter       (low 20 bytes, upper 12 zero)

An empty payload is "no data" and decodes to None.
"""

from __future__ import annotations

from eth_utils import to_checksum_address

from attestind.core.errors import PayloadDecodeError
from attestind.core.models import DecodedPayload
from attestind.decoding.specs import PAYLOAD_HEAD_WORDS
from attestind.decoding.utils import (
    WORD,
    padded_len,
    parse_address,
    parse_bool,
    read_bytes,
    read_offset,
    word_at,
)


def decode_attestation_data(data: bytes) -> DecodedPayload | None:
    """Decode `attestationData` or return None for an empty payload."""
    if not data:
        return None
    if len(data) < WORD * PAYLOAD_HEAD_WORDS:
        raise PayloadDecodeError(f"payload has {len(data)} bytes, need at least {WORD * PAYLOAD_HEAD_WORDS}")

    try:
        is_positive = parse_bool(word_at(data, 0))
        raw_page = read_bytes(data, read_offset(data, 1))
        submitter = parse_address(word_at(data, 2))
        article_page = raw_page.decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        raise PayloadDecodeError(f"malformed attestation data: {e}") from e

    return DecodedPayload(
        is_positive=is_positive,
        article_page=article_page,
        submitter=to_checksum_address(submitter),
    )


def encode_attestation_data(payload: DecodedPayload) -> bytes:
    """Encode a `DecodedPayload` with the same fixed tuple layout."""
    page = payload.article_page.encode("utf-8")
    submitter = bytes.fromhex(payload.submitter.removeprefix("0x"))
    if len(submitter) != 20:
        raise ValueError(f"submitter must be 20 bytes, got {len(submitter)}")

    head = (
        int(payload.is_positive).to_bytes(WORD, "big")
        + (WORD * PAYLOAD_HEAD_WORDS).to_bytes(WORD, "big")
        + submitter.rjust(WORD, b"\x00")
    )
    tail = len(page).to_bytes(WORD, "big") + page.ljust(padded_len(len(page)), b"\x00")
    return head + tail
