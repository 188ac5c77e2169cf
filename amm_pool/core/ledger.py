"""Reserve and liquidity bookkeeping for a single pool."""

from dataclasses import dataclass

from amm_pool.core.assets import AssetSnapshot, FungibleAsset


@dataclass(frozen=True)
class LedgerSnapshot:
    """Everything a pool operation can change, captured before it runs."""
    asset_a: AssetSnapshot
    asset_b: AssetSnapshot
    liquidity: AssetSnapshot
    swap_count: int


@dataclass
class ReserveLedger:
    """State container for one pool.

    Reserves are not stored separately: they are the pool holder's
    balances in the two asset accounts. The liquidity supply is the
    total supply of the pool's liquidity token.
    """
    asset_a: FungibleAsset
    asset_b: FungibleAsset
    liquidity: FungibleAsset
    holder: str
    swap_count: int = 0

    @property
    def reserve_a(self) -> int:
        return self.asset_a.balance_of(self.holder)

    @property
    def reserve_b(self) -> int:
        return self.asset_b.balance_of(self.holder)

    @property
    def liquidity_supply(self) -> int:
        return self.liquidity.total_supply

    @property
    def is_seeded(self) -> bool:
        return self.liquidity_supply > 0

    def reserves(self) -> tuple[int, int]:
        return self.reserve_a, self.reserve_b

    def snapshot(self) -> LedgerSnapshot:
        return LedgerSnapshot(
            asset_a=self.asset_a.snapshot(),
            asset_b=self.asset_b.snapshot(),
            liquidity=self.liquidity.snapshot(),
            swap_count=self.swap_count,
        )

    def restore(self, snapshot: LedgerSnapshot) -> None:
        self.asset_a.restore(snapshot.asset_a)
        self.asset_b.restore(snapshot.asset_b)
        self.liquidity.restore(snapshot.liquidity)
        self.swap_count = snapshot.swap_count
