from __future__ import annotations

from eth_utils import to_checksum_address

from attestind.core.errors import SubjectError

ADDRESS_LEN = 20
PADDED_LEN = 32


def normalize_subject(subject: bytes) -> str:
    """Canonicalize an attestation subject into a checksummed address.

    A 20-byte subject is taken literally; a 32-byte subject is a left-padded
    word and only its low-order 20 bytes are kept. Any other length raises
    `SubjectError`.
    """
    if len(subject) == ADDRESS_LEN:
        raw = subject
    elif len(subject) == PADDED_LEN:
        raw = subject[-ADDRESS_LEN:]
    else:
        raise SubjectError(f"subject has {len(subject)} bytes, expected {ADDRESS_LEN} or {PADDED_LEN}")
    return to_checksum_address(raw)
