from unittest.mock import AsyncMock

import pytest
from eth_abi import encode
from eth_utils import to_checksum_address

from attestind.core.models import ChainTransaction
from attestind.decoding.specs import ATTEST_SELECTOR

CONTRACT = "0x00000000000000000000000000000000000c0de1"
SUBMITTER = to_checksum_address("0x" + "aa" * 20)
SCHEMA_ID = bytes.fromhex("11" * 32)
BLOCK_TS = 1_714_564_800  # 2024-05-01T12:00:00Z


class StaticSource:
    """Fixed list of references, in order."""

    def __init__(self, refs) -> None:
        self._refs = list(refs)

    async def transactions(self):
        for ref in self._refs:
            yield ref


@pytest.fixture
def encode_payload():
    """Encode `(bool, string, address)` with a reference ABI encoder."""

    def _encode(is_positive: bool = True, page: str = "page-3", submitter: str = SUBMITTER) -> bytes:
        return encode(["bool", "string", "address"], [is_positive, page, submitter])

    return _encode


@pytest.fixture
def encode_call():
    """Encode full `attest(...)` call data (selector + arguments)."""

    def _encode(
        *,
        subject: bytes,
        data: bytes,
        schema_id: bytes = SCHEMA_ID,
        expiration: int = 0,
        validation: tuple[bytes, ...] = (),
    ) -> bytes:
        args = encode(
            ["(bytes32,uint64,bytes,bytes)", "bytes[]"],
            [(schema_id, expiration, subject, data), list(validation)],
        )
        return ATTEST_SELECTOR + args

    return _encode


@pytest.fixture
def make_tx():
    def _make(tx_hash: str, input: bytes, to: str | None = CONTRACT, block_number: int = 100) -> ChainTransaction:
        return ChainTransaction(tx_hash=tx_hash, to=to, input=input, block_number=block_number)

    return _make


@pytest.fixture
def mock_rpc():
    rpc = AsyncMock()
    rpc.get_transaction = AsyncMock(return_value=None)
    rpc.get_block_timestamp = AsyncMock(return_value=BLOCK_TS)
    rpc.latest_block = AsyncMock(return_value=100)
    rpc.aclose = AsyncMock()
    return rpc
