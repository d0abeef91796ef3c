"""Block-explorer client (Etherscan-compatible `txlist` API).

Responses are validated with pydantic models. A non-"1" status or any
transport failure raises `ExplorerError`, which aborts the whole batch.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx
from pydantic import BaseModel, ValidationError

from attestind.core.config import ExplorerQuery
from attestind.core.errors import ExplorerError

logger = logging.getLogger(__name__)


class ExplorerTx(BaseModel):
    hash: str
    to: str | None = None
    blockNumber: int


class ExplorerResponse(BaseModel):
    status: str
    message: str = ""
    result: list[ExplorerTx]


class Explorer:
    """Minimal async explorer client for one contract's transaction list."""

    def __init__(
        self,
        url: str,
        *,
        api_key: str = "",
        timeout_s: int = 20,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.url = url
        self.api_key = api_key
        self.client = httpx.AsyncClient(timeout=timeout_s, transport=transport)

    def _params(self, address: str, query: ExplorerQuery) -> dict[str, Any]:
        return {
            "module": "account",
            "action": "txlist",
            "address": address.lower(),
            "startblock": query.start_block,
            "endblock": query.end_block,
            "sort": query.sort,
            "page": query.page,
            "offset": query.offset,
            "apikey": self.api_key,
        }

    async def txlist(self, address: str, query: ExplorerQuery) -> list[ExplorerTx]:
        """Fetch one page of transactions for `address`."""
        try:
            r = await self.client.get(self.url, params=self._params(address, query))
            r.raise_for_status()
            body = r.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ExplorerError(f"explorer request failed: {e}") from e

        if not isinstance(body, dict) or str(body.get("status")) != "1":
            msg = body.get("message") if isinstance(body, dict) else body
            detail = body.get("result") if isinstance(body, dict) else None
            raise ExplorerError(f"explorer returned an error: {msg} {detail or ''}".strip())

        try:
            resp = ExplorerResponse.model_validate(body)
        except ValidationError as e:
            raise ExplorerError(f"unexpected explorer payload: {e}") from e

        logger.info("explorer returned %d transactions for %s", len(resp.result), address)
        return resp.result

    async def aclose(self) -> None:
        await self.client.aclose()
