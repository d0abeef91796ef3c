from __future__ import annotations

import asyncio
import io
import json
import logging
import os
from pathlib import Path

import pyarrow as pa
import pyarrow.csv as pacsv

from attestind.core.models import Attestation
from attestind.core.schemas import SchemaVersion

logger = logging.getLogger(__name__)


class AttestationSink:
    """Append-only JSONL + CSV writer for assembled attestations.

    Both artifacts carry the same column set, chosen by `schema_version`.
    Appends are serialized through one lock so concurrent workers never
    interleave partial writes.
    """

    def __init__(self, out_dir: Path, schema_version: SchemaVersion = SchemaVersion.ATTESTATION) -> None:
        """Initialize the sink under `out_dir`.

        Args:
            out_dir: Directory holding both artifacts (created if missing)
            schema_version: Output column set for this run
        """
        self.schema_version = schema_version
        out_dir.mkdir(parents=True, exist_ok=True)
        self.json_path = out_dir / f"attestations.{schema_version.value}.jsonl"
        self.csv_path = out_dir / f"attestations.{schema_version.value}.csv"
        self._lock = asyncio.Lock()

    async def reset(self) -> None:
        """Discard prior contents; leave an empty JSONL and a header-only CSV."""
        async with self._lock:
            await asyncio.to_thread(self._reset_files)
        logger.info("initialized %s and %s", self.json_path, self.csv_path)

    async def append(self, attestation: Attestation) -> None:
        """Append one record to both artifacts atomically w.r.t. other appends."""
        row = self.schema_version.project(attestation)
        json_line = self._json_line(row)
        csv_chunk = self._csv_row(row)
        async with self._lock:
            await asyncio.to_thread(self._write, self.json_path, json_line)
            await asyncio.to_thread(self._write, self.csv_path, csv_chunk)

    # ---------- encoding ----------

    def _json_line(self, row: dict) -> bytes:
        rec = {"schemaVersion": self.schema_version.value, **row}
        return (json.dumps(rec, separators=(",", ":"), ensure_ascii=False) + "\n").encode("utf-8")

    def _csv_bytes(self, table: pa.Table, *, header: bool) -> bytes:
        buf = io.BytesIO()
        pacsv.write_csv(table, buf, write_options=pacsv.WriteOptions(include_header=header))
        return buf.getvalue()

    def _csv_row(self, row: dict) -> bytes:
        schema = self.schema_version.arrow_schema
        table = pa.Table.from_pylist([row], schema=schema)
        return self._csv_bytes(table, header=False)

    def _csv_header(self) -> bytes:
        schema = self.schema_version.arrow_schema
        return self._csv_bytes(schema.empty_table(), header=True)

    # ---------- file I/O (runs in a worker thread) ----------

    def _reset_files(self) -> None:
        header = self._csv_header()
        with open(self.json_path, "wb") as f:
            f.flush()
            os.fsync(f.fileno())
        with open(self.csv_path, "wb") as f:
            f.write(header)
            f.flush()
            os.fsync(f.fileno())

    @staticmethod
    def _write(path: Path, chunk: bytes) -> None:
        """Append bytes with immediate flush and sync."""
        with open(path, "ab") as f:
            f.write(chunk)
            f.flush()
            os.fsync(f.fileno())
