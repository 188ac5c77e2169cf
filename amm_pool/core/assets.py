"""In-process fungible asset accounts.

The pool only consumes these through ``balance_of``, ``transfer``,
``transfer_from`` and ``approve``. Holders are plain string identifiers.
"""

from dataclasses import dataclass, field
from typing import Callable, Optional

from amm_pool.core.errors import AssetError

TransferHook = Callable[["FungibleAsset", str, str, int], None]


@dataclass(frozen=True)
class AssetSnapshot:
    """Copy of an asset's account state, used for rollback."""
    balances: dict[str, int] = field(default_factory=dict)
    allowances: dict[tuple[str, str], int] = field(default_factory=dict)
    total_supply: int = 0


class FungibleAsset:
    """A fungible token ledger with balances, allowances and a supply counter.

    ``on_transfer`` is called after every completed transfer with
    ``(asset, sender, recipient, amount)``. A hook may call back into
    the pool, which is how re-entrancy is exercised in tests.
    """

    def __init__(
        self,
        name: str,
        symbol: str,
        decimals: int = 18,
        on_transfer: Optional[TransferHook] = None,
    ):
        self.name = name
        self.symbol = symbol
        self.decimals = decimals
        self.on_transfer = on_transfer
        self._balances: dict[str, int] = {}
        self._allowances: dict[tuple[str, str], int] = {}
        self._total_supply = 0

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.symbol}, supply={self._total_supply})"

    @property
    def unit(self) -> int:
        """One whole token in smallest units."""
        return 10**self.decimals

    @property
    def total_supply(self) -> int:
        return self._total_supply

    def balance_of(self, holder: str) -> int:
        return self._balances.get(holder, 0)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get((owner, spender), 0)

    def mint(self, holder: str, amount: int) -> None:
        if amount < 0:
            raise AssetError(f"{self.symbol}: cannot mint negative amount {amount}")
        self._balances[holder] = self.balance_of(holder) + amount
        self._total_supply += amount

    def burn(self, holder: str, amount: int) -> None:
        balance = self.balance_of(holder)
        if amount < 0 or amount > balance:
            raise AssetError(
                f"{self.symbol}: cannot burn {amount} from {holder} (balance {balance})"
            )
        self._balances[holder] = balance - amount
        self._total_supply -= amount

    def approve(self, owner: str, spender: str, amount: int) -> bool:
        if amount < 0:
            raise AssetError(f"{self.symbol}: cannot approve negative amount {amount}")
        self._allowances[(owner, spender)] = amount
        return True

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        self._move(sender, recipient, amount)
        return True

    def transfer_from(self, spender: str, owner: str, recipient: str, amount: int) -> bool:
        allowed = self.allowance(owner, spender)
        if amount > allowed:
            raise AssetError(
                f"{self.symbol}: {spender} may move {allowed} from {owner}, asked for {amount}"
            )
        self._allowances[(owner, spender)] = allowed - amount
        self._move(owner, recipient, amount)
        return True

    def snapshot(self) -> AssetSnapshot:
        return AssetSnapshot(
            balances=dict(self._balances),
            allowances=dict(self._allowances),
            total_supply=self._total_supply,
        )

    def restore(self, snapshot: AssetSnapshot) -> None:
        self._balances = dict(snapshot.balances)
        self._allowances = dict(snapshot.allowances)
        self._total_supply = snapshot.total_supply

    def _credit(self, sender: str, recipient: str, amount: int) -> None:
        self._balances[recipient] = self.balance_of(recipient) + amount

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if amount < 0:
            raise AssetError(f"{self.symbol}: cannot transfer negative amount {amount}")
        balance = self.balance_of(sender)
        if amount > balance:
            raise AssetError(
                f"{self.symbol}: {sender} holds {balance}, cannot transfer {amount}"
            )
        self._balances[sender] = balance - amount
        self._credit(sender, recipient, amount)
        if self.on_transfer is not None:
            self.on_transfer(self, sender, recipient, amount)


class FeeOnTransferAsset(FungibleAsset):
    """Asset that burns ``fee_bps`` basis points of every transfer.

    The recipient is credited less than the sender is debited, so a pool
    holding this asset receives less than the amount it priced.
    """

    def __init__(self, name: str, symbol: str, fee_bps: int = 100, decimals: int = 18):
        if not 0 <= fee_bps < 10_000:
            raise ValueError(f"fee_bps must be in [0, 10000), got {fee_bps}")
        super().__init__(name, symbol, decimals)
        self.fee_bps = fee_bps

    def _credit(self, sender: str, recipient: str, amount: int) -> None:
        fee = amount * self.fee_bps // 10_000
        self._balances[recipient] = self.balance_of(recipient) + amount - fee
        self._total_supply -= fee
