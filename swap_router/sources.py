"""External collaborators: where pool state and gas prices come from.

The engine only depends on the two protocols below. The HTTP-backed
sources map every transport or decoding failure to DataUnavailable; they
never retry.
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx
import structlog
from pydantic import ValidationError

from swap_router.errors import DataUnavailable
from swap_router.models.types import normalize_address
from swap_router.pools.graph import PoolSnapshot
from swap_router.pools.parsing import parse_snapshot

logger = structlog.get_logger()

DEFAULT_HTTP_TIMEOUT = 10.0


class PoolStateSource(Protocol):
    """Provides a consistent snapshot of pool state."""

    def fetch_pools(self, token_a: str, token_b: str | None = None) -> PoolSnapshot:
        """Snapshot of the pools relevant to trading ``token_a`` (for ``token_b``).

        Raises:
            DataUnavailable: If the snapshot cannot be obtained
        """
        ...


class GasPriceSource(Protocol):
    """Provides the current native gas price in wei."""

    def current_gas_price(self) -> int:
        """Raises DataUnavailable if the price cannot be obtained."""
        ...


class StaticPoolSource:
    """Serves one fixed snapshot, e.g. loaded from a file or a request body."""

    def __init__(self, snapshot: PoolSnapshot) -> None:
        self.snapshot = snapshot

    @classmethod
    def from_json(cls, data: dict[str, Any]) -> StaticPoolSource:
        """Build from a snapshot document.

        Raises:
            DataUnavailable: If the snapshot header is malformed
        """
        try:
            return cls(parse_snapshot(data))
        except ValidationError as err:
            raise DataUnavailable(
                "Malformed pool snapshot", errors=err.error_count()
            ) from err

    def fetch_pools(self, token_a: str, token_b: str | None = None) -> PoolSnapshot:
        return self.snapshot


class HttpPoolSource:
    """Fetches a JSON pool snapshot from an indexer over HTTP.

    The indexer is asked for pools touching the requested tokens via the
    ``tokenA``/``tokenB`` query parameters; it is free to return more.

    Args:
        url: Snapshot endpoint
        client: httpx client to use; one is created if None
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        url: str,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self.url = url
        self._client = client if client is not None else httpx.Client(timeout=timeout)

    def fetch_pools(self, token_a: str, token_b: str | None = None) -> PoolSnapshot:
        params = {"tokenA": normalize_address(token_a)}
        if token_b is not None:
            params["tokenB"] = normalize_address(token_b)

        try:
            response = self._client.get(self.url, params=params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as err:
            logger.warning(
                "pool_source_http_error", url=self.url, status=err.response.status_code
            )
            raise DataUnavailable(
                "Pool source returned an error status",
                url=self.url,
                status=err.response.status_code,
            ) from err
        except httpx.HTTPError as err:
            logger.warning("pool_source_unreachable", url=self.url, error=str(err))
            raise DataUnavailable("Pool source unreachable", url=self.url) from err
        except ValueError as err:
            raise DataUnavailable("Pool source returned invalid JSON", url=self.url) from err

        if not isinstance(data, dict):
            raise DataUnavailable("Pool source returned a non-object document", url=self.url)
        try:
            return parse_snapshot(data)
        except ValidationError as err:
            raise DataUnavailable(
                "Malformed pool snapshot", url=self.url, errors=err.error_count()
            ) from err

    def close(self) -> None:
        self._client.close()


class FixedGasPriceSource:
    """Always reports the same gas price."""

    def __init__(self, gas_price_wei: int) -> None:
        if gas_price_wei < 0:
            raise ValueError(f"Gas price cannot be negative: {gas_price_wei}")
        self.gas_price_wei = gas_price_wei

    def current_gas_price(self) -> int:
        return self.gas_price_wei


class JsonRpcGasPriceSource:
    """Reads ``eth_gasPrice`` from a JSON-RPC node."""

    def __init__(
        self,
        rpc_url: str,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self.rpc_url = rpc_url
        self._client = client if client is not None else httpx.Client(timeout=timeout)
        self._request_id = 0

    def current_gas_price(self) -> int:
        self._request_id += 1
        payload = {"jsonrpc": "2.0", "id": self._request_id, "method": "eth_gasPrice", "params": []}

        try:
            response = self._client.post(self.rpc_url, json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPError as err:
            logger.warning("gas_price_rpc_failed", error=str(err))
            raise DataUnavailable("Gas price RPC request failed", url=self.rpc_url) from err
        except ValueError as err:
            raise DataUnavailable("Gas price RPC returned invalid JSON", url=self.rpc_url) from err

        if not isinstance(body, dict):
            raise DataUnavailable("Gas price RPC returned a non-object response", url=self.rpc_url)
        if "error" in body:
            raise DataUnavailable(
                "Gas price RPC returned an error", url=self.rpc_url, rpc_error=str(body["error"])
            )
        result = body.get("result")
        if not isinstance(result, str) or not result.startswith("0x"):
            raise DataUnavailable("Gas price RPC returned no result", url=self.rpc_url)
        try:
            return int(result, 16)
        except ValueError as err:
            raise DataUnavailable(
                "Gas price RPC returned a malformed quantity", result=result
            ) from err

    def close(self) -> None:
        self._client.close()


__all__ = [
    "FixedGasPriceSource",
    "GasPriceSource",
    "HttpPoolSource",
    "JsonRpcGasPriceSource",
    "PoolStateSource",
    "StaticPoolSource",
]
