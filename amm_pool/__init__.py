"""Constant product liquidity pool with an invariant fuzzing harness."""

from amm_pool.core.config import PoolConfig
from amm_pool.core.pool import Direction, Pool
from amm_pool.core.registry import PoolRegistry
from amm_pool.harness.checker import PropertyChecker

__all__ = [
    "Direction",
    "Pool",
    "PoolConfig",
    "PoolRegistry",
    "PropertyChecker",
]
