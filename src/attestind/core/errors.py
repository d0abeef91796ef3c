"""Error taxonomy for the indexer.

- `SkipError` subclasses are per-transaction: logged, counted, the transaction
  is dropped and the run continues.
- `ExplorerError` aborts the current fetch cycle (the whole explorer batch).
- Anything else reaching the worker loop is a bug and stops the run.
"""

from __future__ import annotations


class AttestindError(Exception):
    """Base class for all indexer errors."""


class SkipError(AttestindError):
    """A single transaction cannot be indexed; drop it and continue."""


class CallDecodeError(SkipError):
    """Call data does not match the `attest` signature or its ABI layout."""


class PayloadDecodeError(SkipError):
    """`attestationData` does not decode against `(bool, string, address)`."""


class SubjectError(SkipError):
    """Subject bytes cannot be normalized to a 20-byte address."""


class TransactionNotFound(SkipError):
    """The chain provider has no transaction for the requested hash."""


class RPCError(AttestindError):
    """JSON-RPC endpoint returned an error object."""

    def __init__(self, code: int | None, message: str) -> None:
        super().__init__(f"RPC error: {code} {message}")
        self.code = code
        self.message = message


class ExplorerError(AttestindError):
    """Explorer API returned a non-success status or could not be reached."""
