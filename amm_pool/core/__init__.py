"""Core pool components."""

from amm_pool.core.assets import FeeOnTransferAsset, FungibleAsset
from amm_pool.core.clock import ManualClock
from amm_pool.core.config import DEFAULT_POOL_CONFIG, PoolConfig
from amm_pool.core.errors import (
    AlreadySeeded,
    AssetError,
    BelowMinimumSeed,
    DeadlineExpired,
    InsufficientLiquidity,
    NotSeeded,
    PoolError,
    PoolExists,
    ReserveExhausted,
    SlippageExceeded,
    ZeroAmount,
)
from amm_pool.core.ledger import ReserveLedger
from amm_pool.core.pool import Direction, ExactSide, Pool, SwapRequest, SwapResult
from amm_pool.core.registry import PoolRegistry

__all__ = [
    "AlreadySeeded",
    "AssetError",
    "BelowMinimumSeed",
    "DEFAULT_POOL_CONFIG",
    "DeadlineExpired",
    "Direction",
    "ExactSide",
    "FeeOnTransferAsset",
    "FungibleAsset",
    "InsufficientLiquidity",
    "ManualClock",
    "NotSeeded",
    "Pool",
    "PoolConfig",
    "PoolError",
    "PoolExists",
    "PoolRegistry",
    "ReserveExhausted",
    "ReserveLedger",
    "SlippageExceeded",
    "SwapRequest",
    "SwapResult",
    "ZeroAmount",
]
