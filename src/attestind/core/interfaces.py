from __future__ import annotations

from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

from attestind.core.models import Attestation, ChainTransaction, TransactionRef


# ---------------------------------------------------------------------------
# IChainProvider
# ---------------------------------------------------------------------------

@runtime_checkable
class IChainProvider(Protocol):
    """
    Abstract read access to the chain.

    Domain expectations:
    - Returned objects are already mapped into internal domain models.
    - It hides the underlying RPC technology.
    """

    async def get_transaction(self, tx_hash: str) -> ChainTransaction | None:
        """Return the transaction for `tx_hash`, or None if unknown."""
        ...

    async def get_block_timestamp(self, block_number: int) -> int:
        """Return the unix timestamp (seconds) of a block."""
        ...


# ---------------------------------------------------------------------------
# ITransactionSource
# ---------------------------------------------------------------------------

@runtime_checkable
class ITransactionSource(Protocol):
    """
    Producer of transaction references addressed to the target contract.

    Implementations:
    - Explorer page (one-shot historical scan)
    - Live block poller (runs until externally stopped)
    - In-memory list for testing
    """

    def transactions(self) -> AsyncIterator[TransactionRef]:
        ...


# ---------------------------------------------------------------------------
# IAttestationSink
# ---------------------------------------------------------------------------

@runtime_checkable
class IAttestationSink(Protocol):
    """
    Append-only sink for assembled attestations.

    Domain expectations:
    - `reset` discards prior contents; called once at process start.
    - `append` is the only mutation and must be safe to call from many
      workers (implementations serialize writes).
    """

    async def reset(self) -> None:
        ...

    async def append(self, attestation: Attestation) -> None:
        ...
