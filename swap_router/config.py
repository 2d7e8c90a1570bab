"""Router configuration.

One immutable configuration object is passed into the engine at
construction. Nothing reads global state during a routing computation.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from fractions import Fraction

from swap_router.constants import MAINNET_BASE_TOKENS, MAINNET_CHAIN_ID, WETH
from swap_router.models.request import parse_fraction
from swap_router.models.types import normalize_address
from swap_router.routing.quoter import GasModel


@dataclass(frozen=True)
class RouterConfig:
    """Centralized configuration for route search and planning.

    Attributes:
        max_hops: Maximum pools per route
        max_candidates: Maximum candidate routes kept after enumeration
        base_tokens: Allowed intermediates for multi-hop routes; None allows any
        top_k: Single routes considered for splitting
        buckets: Number of equal slices a split divides the amount into
        max_splits: Maximum routes in one allocation
        snapshot_timeout: Seconds to wait for the pool snapshot
        max_workers: Thread pool size for quoting
        gas_model: Gas estimate model
        native_token: Wrapped native token used to price gas
        chain_id: Chain the router operates on
        default_slippage: Slippage tolerance when a request gives none
        default_deadline_offset: Deadline offset (seconds) when a request gives none
    """

    max_hops: int = 3
    max_candidates: int = 10
    base_tokens: frozenset[str] | None = MAINNET_BASE_TOKENS
    top_k: int = 4
    buckets: int = 20
    max_splits: int = 3
    snapshot_timeout: float = 5.0
    max_workers: int = 4
    gas_model: GasModel = field(default_factory=GasModel)
    native_token: str = WETH
    chain_id: int = MAINNET_CHAIN_ID
    default_slippage: Fraction = Fraction(1, 200)
    default_deadline_offset: int = 1800

    def __post_init__(self) -> None:
        for name in ("max_hops", "max_candidates", "top_k", "buckets", "max_splits", "max_workers"):
            if getattr(self, name) < 1:
                raise ValueError(f"{name} must be at least 1, got {getattr(self, name)}")
        if self.snapshot_timeout <= 0:
            raise ValueError(f"snapshot_timeout must be positive, got {self.snapshot_timeout}")
        if self.default_deadline_offset <= 0:
            raise ValueError("default_deadline_offset must be positive")
        if not 0 <= self.default_slippage < 1:
            raise ValueError("default_slippage must be in [0, 1)")
        object.__setattr__(self, "native_token", normalize_address(self.native_token, validate=True))
        if self.base_tokens is not None:
            object.__setattr__(
                self,
                "base_tokens",
                frozenset(normalize_address(t, validate=True) for t in self.base_tokens),
            )

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> RouterConfig:
        """Build a configuration from ``ROUTER_*`` environment variables.

        Unset variables keep their defaults. ``ROUTER_BASE_TOKENS`` is a
        comma separated address list; the value ``*`` allows any token.

        Raises:
            ValueError: If a variable is malformed
        """
        env = os.environ if environ is None else environ
        kwargs: dict[str, object] = {}

        int_fields = {
            "ROUTER_MAX_HOPS": "max_hops",
            "ROUTER_MAX_CANDIDATES": "max_candidates",
            "ROUTER_TOP_K": "top_k",
            "ROUTER_BUCKETS": "buckets",
            "ROUTER_MAX_SPLITS": "max_splits",
            "ROUTER_MAX_WORKERS": "max_workers",
            "ROUTER_CHAIN_ID": "chain_id",
            "ROUTER_DEFAULT_DEADLINE": "default_deadline_offset",
        }
        for var, name in int_fields.items():
            if var in env:
                try:
                    kwargs[name] = int(env[var])
                except ValueError:
                    raise ValueError(f"{var} must be an integer: '{env[var]}'") from None

        if "ROUTER_SNAPSHOT_TIMEOUT" in env:
            try:
                kwargs["snapshot_timeout"] = float(env["ROUTER_SNAPSHOT_TIMEOUT"])
            except ValueError:
                raise ValueError(
                    f"ROUTER_SNAPSHOT_TIMEOUT must be a number: '{env['ROUTER_SNAPSHOT_TIMEOUT']}'"
                ) from None

        if "ROUTER_DEFAULT_SLIPPAGE" in env:
            kwargs["default_slippage"] = parse_fraction(env["ROUTER_DEFAULT_SLIPPAGE"])

        if "ROUTER_BASE_TOKENS" in env:
            raw = env["ROUTER_BASE_TOKENS"].strip()
            if raw == "*":
                kwargs["base_tokens"] = None
            else:
                kwargs["base_tokens"] = frozenset(t.strip() for t in raw.split(",") if t.strip())

        if "ROUTER_NATIVE_TOKEN" in env:
            kwargs["native_token"] = env["ROUTER_NATIVE_TOKEN"]

        return cls(**kwargs)  # type: ignore[arg-type]


# Default configuration instance
DEFAULT_ROUTER_CONFIG = RouterConfig()
