"""Attestation decoding.

This package provides:
- Outer call decoding against the fixed `attest` signature
- Inner payload decoding against the fixed `(bool, string, address)` tuple
- Subject normalization to checksummed addresses
"""

from attestind.decoding.call import decode_attest_call
from attestind.decoding.payload import decode_attestation_data, encode_attestation_data
from attestind.decoding.specs import ATTEST_SELECTOR, ATTEST_SIGNATURE
from attestind.decoding.subject import normalize_subject

__all__ = [
    "decode_attest_call",
    "decode_attestation_data",
    "encode_attestation_data",
    "normalize_subject",
    "ATTEST_SELECTOR",
    "ATTEST_SIGNATURE",
]
