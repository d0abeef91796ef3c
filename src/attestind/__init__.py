from __future__ import annotations

from .core.models import Attestation, DecodedPayload, RawCall, TransactionRef
from .core.schemas import SchemaVersion
from .decoding import decode_attest_call, decode_attestation_data, normalize_subject
from .storage.sink import AttestationSink

__all__ = [
    "decode_attest_call",
    "decode_attestation_data",
    "normalize_subject",
    "Attestation",
    "DecodedPayload",
    "RawCall",
    "TransactionRef",
    "SchemaVersion",
    "AttestationSink",
]
