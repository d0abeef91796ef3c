"""Core data models for the attestation pipeline.

This module defines:
- `TransactionRef`: a (hash, block) pointer produced by a transaction source.
- `ChainTransaction`: the subset of an RPC transaction the decoder needs.
- `AttestationPayload` / `RawCall`: the decoded `attest(...)` call arguments.
- `DecodedPayload`: the decoded inner `(bool, string, address)` tuple.
- `Attestation`: the final, immutable record handed to the sink.

Design notes
------------
- Hashes and addresses coming from RPC are lowercased 0x-hex strings.
- Addresses that leave the decoder (subject, submitter) are checksummed.
- Raw byte fields stay `bytes` until the assembler renders them.
"""

from __future__ import annotations

from dataclasses import dataclass


# === Source records ===


@dataclass(slots=True, frozen=True)
class TransactionRef:
    """Pointer to a transaction addressed to the target contract."""

    tx_hash: str  # lowercased 0x...
    block_number: int


@dataclass(slots=True, frozen=True)
class ChainTransaction:
    """Transaction as fetched from RPC, minimally normalized."""

    tx_hash: str  # lowercased 0x...
    to: str | None  # lowercased 0x..., None for contract creation
    input: bytes
    block_number: int | None = None


# === Decoded call ===


@dataclass(slots=True, frozen=True)
class AttestationPayload:
    """First argument of `attest(AttestationPayload, bytes[])`."""

    schema_id: bytes  # 32 bytes
    expiration_date: int  # uint64
    subject: bytes
    attestation_data: bytes


@dataclass(slots=True, frozen=True)
class RawCall:
    """Fully decoded `attest` call. Only lives during decoding."""

    attestation_payload: AttestationPayload
    validation_payloads: tuple[bytes, ...]


@dataclass(slots=True, frozen=True)
class DecodedPayload:
    """Inner attestation data decoded against `(bool, string, address)`."""

    is_positive: bool
    article_page: str
    submitter: str  # checksum address


# === Final record ===


@dataclass(slots=True, frozen=True)
class Attestation:
    """One indexed attestation, written exactly once to the sink."""

    tx_hash: str
    block_number: int
    schema_id: str  # 0x + 64 hex chars
    subject: str  # checksum address
    is_positive: bool
    article_page: str
    submitter: str  # checksum address
    timestamp: str  # ISO-8601 UTC, e.g. 2024-05-01T12:00:00.000Z
