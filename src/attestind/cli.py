import asyncio
import logging
import signal
import time
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler

from attestind.core.config import ExplorerQuery, IndexerConfig
from attestind.core.errors import ExplorerError
from attestind.core.schemas import SchemaVersion
from attestind.orchestration.orchestrator import IndexOutput, index_history, live_config_after, watch_blocks

console = Console()


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.WARNING)


def _print_summary(out: IndexOutput, elapsed: float) -> None:
    s = out.stats
    console.print(f"[bold]done[/]: {s.indexed} attestations • {elapsed:.2f}s")
    console.print(
        f"[bold]summary[/]: "
        f"[green]indexed[/]={s.indexed}  "
        f"[red]failed[/]={s.failed}  "
        f"[yellow]skipped[/]={s.skipped}  "
        f"(seen={s.seen})"
    )
    console.print(f"[bold]outputs[/]: {out.json_path}  {out.csv_path}")


def _install_stop_handlers(stop: asyncio.Event) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # not available on Windows event loops
            pass


@click.group()
@click.option("--log-level", default="INFO", show_default=True, envvar="ATTESTIND_LOG_LEVEL")
def cli(log_level: str) -> None:
    """attestind: index attestations sent to an attestation registry."""
    _setup_logging(log_level)


def _common_options(f):
    options = [
        click.option("--rpc", "rpc_url", required=True, envvar="ATTESTIND_RPC_URL", help="JSON-RPC endpoint URL"),
        click.option("--contract", required=True, envvar="ATTESTIND_CONTRACT", help="Attestation registry address"),
        click.option(
            "--out-dir",
            type=click.Path(file_okay=False, path_type=Path),
            default=Path("./data"),
            show_default=True,
            help="Directory for the JSONL and CSV artifacts",
        ),
        click.option(
            "--schema-version",
            type=click.Choice([v.value for v in SchemaVersion]),
            default=SchemaVersion.ATTESTATION.value,
            show_default=True,
            help="Output column set",
        ),
        click.option("--workers", type=int, default=8, show_default=True, help="Decode workers"),
        click.option("--queue-size", type=int, default=64, show_default=True, help="Pending transaction bound"),
        click.option("--timeout", "timeout_s", type=int, default=20, show_default=True, help="HTTP timeout (s)"),
        click.option("--poll-interval", type=float, default=4.0, show_default=True, help="Live head poll interval (s)"),
    ]
    for opt in reversed(options):
        f = opt(f)
    return f


@cli.command("scan")
@_common_options
@click.option("--explorer-url", required=True, envvar="ATTESTIND_EXPLORER_URL", help="Etherscan-compatible API URL")
@click.option("--api-key", default="", envvar="ATTESTIND_EXPLORER_API_KEY", help="Explorer API key")
@click.option("--start-block", type=int, default=0, show_default=True)
@click.option("--end-block", type=int, default=99_999_999, show_default=True)
@click.option("--page", type=int, default=1, show_default=True)
@click.option("--offset", type=int, default=100, show_default=True, help="Transactions per page")
@click.option("--watch/--no-watch", default=False, show_default=True, help="Keep indexing new blocks afterwards")
def scan_cmd(
    rpc_url: str,
    contract: str,
    out_dir: Path,
    schema_version: str,
    workers: int,
    queue_size: int,
    timeout_s: int,
    poll_interval: float,
    explorer_url: str,
    api_key: str,
    start_block: int,
    end_block: int,
    page: int,
    offset: int,
    watch: bool,
) -> None:
    """Index historical attestations from one explorer page (optionally then watch)."""
    config = IndexerConfig(
        rpc_url=rpc_url,
        contract=contract,
        explorer_url=explorer_url,
        explorer_api_key=api_key,
        explorer_query=ExplorerQuery(start_block=start_block, end_block=end_block, page=page, offset=offset),
        out_dir=out_dir,
        schema_version=SchemaVersion(schema_version),
        workers=workers,
        queue_size=queue_size,
        timeout_s=timeout_s,
        poll_interval_s=poll_interval,
    )

    async def run() -> None:
        t0 = time.time()
        out = await index_history(config)
        _print_summary(out, time.time() - t0)
        if watch:
            stop = asyncio.Event()
            _install_stop_handlers(stop)
            t1 = time.time()
            out = await watch_blocks(live_config_after(config, out), stop, reset=False)
            _print_summary(out, time.time() - t1)

    try:
        asyncio.run(run())
    except ExplorerError as e:
        raise click.ClickException(str(e)) from e


@cli.command("watch")
@_common_options
@click.option("--from-block", type=int, default=None, help="First block to scan (default: next block)")
def watch_cmd(
    rpc_url: str,
    contract: str,
    out_dir: Path,
    schema_version: str,
    workers: int,
    queue_size: int,
    timeout_s: int,
    poll_interval: float,
    from_block: int | None,
) -> None:
    """Index attestations from new blocks until interrupted."""
    config = IndexerConfig(
        rpc_url=rpc_url,
        contract=contract,
        out_dir=out_dir,
        schema_version=SchemaVersion(schema_version),
        workers=workers,
        queue_size=queue_size,
        timeout_s=timeout_s,
        poll_interval_s=poll_interval,
        live_start_block=from_block,
    )

    async def run() -> None:
        stop = asyncio.Event()
        _install_stop_handlers(stop)
        t0 = time.time()
        out = await watch_blocks(config, stop)
        _print_summary(out, time.time() - t0)

    asyncio.run(run())


if __name__ == "__main__":
    cli()
