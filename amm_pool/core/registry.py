"""Registry that creates and indexes pools by asset."""

import logging
from typing import Callable, Optional

from amm_pool.core.assets import FungibleAsset
from amm_pool.core.clock import system_clock
from amm_pool.core.config import DEFAULT_POOL_CONFIG, PoolConfig
from amm_pool.core.errors import PoolExists
from amm_pool.core.pool import Pool

logger = logging.getLogger(__name__)


class PoolRegistry:
    """Creates one pool per asset, each paired against a shared anchor asset.

    In every pool the registered asset is side A and the anchor is side B.
    Assets are indexed by identity, so two assets sharing a symbol get
    separate pools with distinct addresses.
    """

    def __init__(
        self,
        anchor: FungibleAsset,
        *,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        clock: Callable[[], int] = system_clock,
    ):
        self.anchor = anchor
        self.config = config
        self._clock = clock
        self._pools: dict[FungibleAsset, Pool] = {}
        self._assets: dict[Pool, FungibleAsset] = {}

    def __len__(self) -> int:
        return len(self._pools)

    def create_pool(self, asset: FungibleAsset) -> Pool:
        if asset is self.anchor:
            raise ValueError(f"cannot pair {asset.symbol} with itself")
        if asset in self._pools:
            raise PoolExists(asset.symbol)

        pool = Pool(
            asset,
            self.anchor,
            config=self.config,
            clock=self._clock,
            address=f"pool:{len(self._pools)}:{asset.symbol}/{self.anchor.symbol}",
            liquidity_name=f"T-Swap {asset.name}",
            liquidity_symbol=f"ts{asset.symbol}",
        )
        self._pools[asset] = pool
        self._assets[pool] = asset
        logger.info("PoolCreated asset=%s pool=%s", asset.symbol, pool.address)
        return pool

    def get_pool(self, asset: FungibleAsset) -> Optional[Pool]:
        return self._pools.get(asset)

    def get_asset(self, pool: Pool) -> Optional[FungibleAsset]:
        return self._assets.get(pool)
