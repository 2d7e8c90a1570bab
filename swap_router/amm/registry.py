"""Registry mapping pool types to their simulators.

Routing code never branches on pool classes; it asks the registry. Adding a
pool family means registering its pool type and simulator here.

Registries are plain objects built per engine (see ``build_default_registry``),
so there is no process-wide mutable state.
"""

from __future__ import annotations

from dataclasses import dataclass

from swap_router.amm.base import PairPool, SwapResult, SwapSimulator
from swap_router.amm.concentrated import ConcentratedLiquidityAMM, ConcentratedLiquidityPool
from swap_router.amm.constant_product import ConstantProductAMM, ConstantProductPool


@dataclass(frozen=True)
class _Registration:
    simulator: SwapSimulator
    type_name: str


class SimulatorRegistry:
    """Registry for pool-type specific simulators.

    Usage:
        registry = SimulatorRegistry()
        registry.register(ConstantProductPool, ConstantProductAMM(), "constant_product")

        result = registry.simulate_swap(pool, token_in, amount_in)
    """

    def __init__(self) -> None:
        self._registrations: dict[type, _Registration] = {}

    def register(
        self,
        pool_type: type,
        simulator: SwapSimulator,
        type_name: str | None = None,
    ) -> None:
        """Register a simulator for a pool type.

        Args:
            pool_type: The pool class to register (e.g., ConstantProductPool)
            simulator: Object implementing exact input and exact output simulation
            type_name: Key into the gas model's per-hop table; defaults to
                the pool class's ``kind``
        """
        name = type_name or getattr(pool_type, "kind", pool_type.__name__)
        self._registrations[pool_type] = _Registration(simulator=simulator, type_name=name)

    def _lookup(self, pool: PairPool) -> _Registration:
        registration = self._registrations.get(type(pool))
        if registration is None:
            raise TypeError(f"No simulator registered for {type(pool).__name__}")
        return registration

    def simulate_swap(self, pool: PairPool, token_in: str, amount_in: int) -> SwapResult:
        """Exact input simulation through the registered simulator.

        Raises:
            InsufficientLiquidity: Propagated from the simulator
            TypeError: If the pool type is not registered
        """
        return self._lookup(pool).simulator.simulate_swap(pool, token_in, amount_in)

    def simulate_swap_exact_output(
        self, pool: PairPool, token_in: str, amount_out: int
    ) -> SwapResult:
        """Exact output simulation through the registered simulator.

        Raises:
            InsufficientLiquidity: Propagated from the simulator
            TypeError: If the pool type is not registered
        """
        return self._lookup(pool).simulator.simulate_swap_exact_output(pool, token_in, amount_out)

    def get_type_name(self, pool: PairPool) -> str:
        """Registered type name, or "unknown" for unregistered pools."""
        registration = self._registrations.get(type(pool))
        return registration.type_name if registration else "unknown"

    def is_registered(self, pool: PairPool) -> bool:
        return type(pool) in self._registrations


def build_default_registry() -> SimulatorRegistry:
    """Registry with both supported pool families."""
    registry = SimulatorRegistry()
    registry.register(ConstantProductPool, ConstantProductAMM())
    registry.register(ConcentratedLiquidityPool, ConcentratedLiquidityAMM())
    return registry


__all__ = ["SimulatorRegistry", "build_default_registry"]
