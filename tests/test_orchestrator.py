import asyncio
import csv
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from attestind.clients.explorer import ExplorerTx
from attestind.core.config import IndexerConfig
from attestind.core.errors import ExplorerError
from attestind.core.schemas import SchemaVersion
from attestind.orchestration.orchestrator import index_history, live_config_after, watch_blocks

from conftest import CONTRACT, SUBMITTER


def _mock_explorer(items: list[ExplorerTx] | Exception) -> MagicMock:
    explorer = MagicMock()
    if isinstance(items, Exception):
        explorer.txlist = AsyncMock(side_effect=items)
    else:
        explorer.txlist = AsyncMock(return_value=items)
    explorer.aclose = AsyncMock()
    return explorer


@pytest.mark.asyncio
async def test_index_history_writes_both_artifacts(tmp_path: Path, mock_rpc, make_tx, encode_call, encode_payload) -> None:
    good = encode_call(subject=b"\x00" * 12 + b"\xab" * 20, data=encode_payload(True, "page-3"))
    mock_rpc.get_transaction = AsyncMock(side_effect=lambda h: make_tx(h, good))
    explorer = _mock_explorer([
        ExplorerTx(hash="0x01", to=CONTRACT, blockNumber=10),
        ExplorerTx(hash="0x02", to="0x" + "12" * 20, blockNumber=11),
        ExplorerTx(hash="0x03", to=CONTRACT, blockNumber=12),
    ])
    config = IndexerConfig(
        rpc_url="http://localhost:8545",
        contract=CONTRACT,
        explorer_url="http://explorer/api",
        out_dir=tmp_path,
        schema_version=SchemaVersion.FEEDBACK,
        workers=2,
    )

    with (
        patch("attestind.orchestration.orchestrator.RPC", return_value=mock_rpc),
        patch("attestind.orchestration.orchestrator.Explorer", return_value=explorer),
    ):
        out = await index_history(config)

    assert out.stats.seen == 2
    assert out.stats.indexed == 2
    with open(out.csv_path, newline="") as f:
        rows = list(csv.reader(f))
    assert len(rows) == 3
    assert rows[0] == SchemaVersion.FEEDBACK.columns
    assert {r[2] for r in rows[1:]} == {SUBMITTER}
    assert len(out.json_path.read_text().splitlines()) == 2
    # newest block addressed to the contract; the 0x02 entry goes elsewhere
    assert out.last_block == 12
    assert live_config_after(config, out).live_start_block == 13
    mock_rpc.aclose.assert_awaited_once()
    explorer.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_index_history_explorer_error_leaves_fresh_artifacts(tmp_path: Path, mock_rpc) -> None:
    (tmp_path / "attestations.attestation.jsonl").write_text('{"stale": true}\n')
    config = IndexerConfig(
        rpc_url="http://localhost:8545",
        contract=CONTRACT,
        explorer_url="http://explorer/api",
        out_dir=tmp_path,
    )

    with (
        patch("attestind.orchestration.orchestrator.RPC", return_value=mock_rpc),
        patch("attestind.orchestration.orchestrator.Explorer", return_value=_mock_explorer(ExplorerError("NOTOK"))),
    ):
        with pytest.raises(ExplorerError):
            await index_history(config)

    assert (tmp_path / "attestations.attestation.jsonl").read_text() == ""
    mock_rpc.get_transaction.assert_not_called()


@pytest.mark.asyncio
async def test_index_history_requires_explorer_url(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        await index_history(IndexerConfig(rpc_url="http://x", contract=CONTRACT, out_dir=tmp_path))


@pytest.mark.asyncio
async def test_watch_blocks_returns_after_stop(tmp_path: Path, mock_rpc) -> None:
    stop = asyncio.Event()
    stop.set()
    mock_rpc.get_block_transactions = AsyncMock(return_value=[])
    config = IndexerConfig(rpc_url="http://localhost:8545", contract=CONTRACT, out_dir=tmp_path, poll_interval_s=0.01)

    with patch("attestind.orchestration.orchestrator.RPC", return_value=mock_rpc):
        out = await asyncio.wait_for(watch_blocks(config, stop), timeout=5)

    assert out.stats.seen == 0
    assert out.csv_path.read_text().count("\n") == 1
    mock_rpc.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_scan_then_watch_resumes_after_last_explorer_block(tmp_path: Path, mock_rpc) -> None:
    # the head moved on while the explorer page was being indexed
    mock_rpc.latest_block = AsyncMock(return_value=15)
    scanned: list[int] = []
    stop = asyncio.Event()

    async def get_block_transactions(block_number: int):
        scanned.append(block_number)
        if block_number == 15:
            stop.set()
        return []

    mock_rpc.get_block_transactions = AsyncMock(side_effect=get_block_transactions)
    explorer = _mock_explorer([
        ExplorerTx(hash="0x01", to=CONTRACT, blockNumber=10),
        ExplorerTx(hash="0x02", to=CONTRACT, blockNumber=12),
    ])
    config = IndexerConfig(
        rpc_url="http://localhost:8545",
        contract=CONTRACT,
        explorer_url="http://explorer/api",
        out_dir=tmp_path,
        poll_interval_s=0.01,
    )

    with (
        patch("attestind.orchestration.orchestrator.RPC", return_value=mock_rpc),
        patch("attestind.orchestration.orchestrator.Explorer", return_value=explorer),
    ):
        history = await index_history(config)
        await asyncio.wait_for(watch_blocks(live_config_after(config, history), stop, reset=False), timeout=5)

    assert scanned == [13, 14, 15]


def test_live_config_after_empty_history_keeps_head_start(tmp_path: Path) -> None:
    config = IndexerConfig(rpc_url="http://x", contract=CONTRACT, out_dir=tmp_path)
    history = MagicMock(last_block=None)

    assert live_config_after(config, history) is config
