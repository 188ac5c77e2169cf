"""Two-asset constant product pool."""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Callable, Iterator, Optional

from amm_pool.core import swap_math
from amm_pool.core.assets import FungibleAsset
from amm_pool.core.clock import system_clock
from amm_pool.core.config import DEFAULT_POOL_CONFIG, PoolConfig
from amm_pool.core.errors import (
    AlreadySeeded,
    BelowMinimumSeed,
    DeadlineExpired,
    InsufficientLiquidity,
    NotSeeded,
    ReserveExhausted,
    SlippageExceeded,
    ZeroAmount,
)
from amm_pool.core.ledger import ReserveLedger

logger = logging.getLogger(__name__)


class Direction(Enum):
    """Which asset the trader pays in."""
    A_TO_B = "a_to_b"  # Trader pays A, receives B
    B_TO_A = "b_to_a"  # Trader pays B, receives A


class ExactSide(Enum):
    """Which side of a swap the trader fixes."""
    INPUT = "input"
    OUTPUT = "output"


@dataclass(frozen=True)
class SwapRequest:
    """A swap as submitted by a trader.

    ``limit`` is the minimum output for exact-input swaps and the
    maximum input for exact-output swaps.
    """
    direction: Direction
    exact_side: ExactSide
    amount: int
    limit: int
    deadline: int


@dataclass(frozen=True)
class SwapResult:
    """Outcome of an executed swap."""
    direction: Direction
    amount_in: int
    amount_out: int
    bonus_paid: int
    reserve_a: int  # Post-swap reserves
    reserve_b: int


class Pool:
    """Constant product pool over two fungible assets.

    Reserves live in the asset accounts under ``address``; liquidity
    units are a separate fungible asset minted on deposit and burned on
    withdrawal. Every public operation is atomic: if any guard or
    asset transfer fails, the asset accounts, the liquidity supply and
    the swap counter are restored before the exception propagates.

    Every ``config.bonus_interval`` swaps the pool pays the trader
    ``config.bonus_amount`` of the output asset on top of the priced
    amount. This payout is not part of the pricing formula and lowers
    the reserve product over time; it can be switched off with
    ``PoolConfig.without_bonus()``.
    """

    def __init__(
        self,
        asset_a: FungibleAsset,
        asset_b: FungibleAsset,
        *,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        clock: Callable[[], int] = system_clock,
        address: Optional[str] = None,
        liquidity_name: Optional[str] = None,
        liquidity_symbol: Optional[str] = None,
    ):
        if asset_a is asset_b:
            raise ValueError("a pool needs two distinct assets")
        self.config = config
        self.address = address or f"pool:{asset_a.symbol}/{asset_b.symbol}"
        liquidity = FungibleAsset(
            liquidity_name or f"{asset_a.name}/{asset_b.name} liquidity",
            liquidity_symbol or f"lp{asset_a.symbol}{asset_b.symbol}",
        )
        self.ledger = ReserveLedger(
            asset_a=asset_a,
            asset_b=asset_b,
            liquidity=liquidity,
            holder=self.address,
        )
        self._clock = clock

    def __repr__(self) -> str:
        return (
            f"Pool({self.address}, reserve_a={self.reserve_a}, "
            f"reserve_b={self.reserve_b}, liquidity={self.liquidity_supply})"
        )

    # ------------------------------------------------------------------
    # Read-only state
    # ------------------------------------------------------------------

    @property
    def asset_a(self) -> FungibleAsset:
        return self.ledger.asset_a

    @property
    def asset_b(self) -> FungibleAsset:
        return self.ledger.asset_b

    @property
    def liquidity_token(self) -> FungibleAsset:
        return self.ledger.liquidity

    @property
    def reserve_a(self) -> int:
        return self.ledger.reserve_a

    @property
    def reserve_b(self) -> int:
        return self.ledger.reserve_b

    @property
    def liquidity_supply(self) -> int:
        return self.ledger.liquidity_supply

    @property
    def swap_count(self) -> int:
        return self.ledger.swap_count

    @property
    def k(self) -> int:
        """The constant product of the reserves."""
        return self.reserve_a * self.reserve_b

    @property
    def spot_price(self) -> Decimal:
        """Current spot price (B per A) before fees."""
        if self.reserve_a == 0:
            return Decimal("0")
        return Decimal(self.reserve_b) / Decimal(self.reserve_a)

    def liquidity_of(self, holder: str) -> int:
        return self.ledger.liquidity.balance_of(holder)

    def now(self) -> int:
        return self._clock()

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    def quote_output(self, direction: Direction, input_amount: int) -> int:
        """Output the pool would pay for an exact input, at current reserves."""
        input_reserve, output_reserve = self._reserves_for(direction)
        return swap_math.output_for_input(
            input_amount,
            input_reserve,
            output_reserve,
            self.config.fee_numerator,
            self.config.fee_denominator,
        )

    def quote_input(self, direction: Direction, output_amount: int) -> int:
        """Input the pool would charge for an exact output, at current reserves."""
        input_reserve, output_reserve = self._reserves_for(direction)
        return swap_math.input_for_output(
            output_amount,
            input_reserve,
            output_reserve,
            self.config.fee_numerator,
            self.config.fee_denominator,
        )

    def required_a_for_b(self, desired_b: int) -> int:
        """A side of a deposit of ``desired_b`` at the current ratio."""
        if not self.ledger.is_seeded:
            raise NotSeeded("required_a_for_b")
        self._ensure_reserves(desired_b)
        return swap_math.counterpart_amount(desired_b, self.reserve_a, self.reserve_b)

    def price_of_one_a_in_b(self) -> int:
        """B received for selling one whole unit of A."""
        return self.quote_output(Direction.A_TO_B, self.asset_a.unit)

    def price_of_one_b_in_a(self) -> int:
        """A received for selling one whole unit of B."""
        return self.quote_output(Direction.B_TO_A, self.asset_b.unit)

    # ------------------------------------------------------------------
    # Liquidity
    # ------------------------------------------------------------------

    def seed(self, caller: str, amount_a: int, amount_b: int, deadline: int) -> int:
        """Provide the first liquidity and fix the initial price ratio.

        Liquidity units are minted 1:1 with ``amount_a``.

        Returns:
            Liquidity units minted to ``caller``.
        """
        with self._atomic():
            self._ensure_deadline(deadline)
            if self.ledger.is_seeded:
                raise AlreadySeeded(self.liquidity_supply)
            _ensure_positive(amount_a=amount_a, amount_b=amount_b)
            if amount_a < self.config.minimum_seed_deposit:
                raise BelowMinimumSeed(amount_a, self.config.minimum_seed_deposit)

            liquidity_minted = amount_a
            self.ledger.liquidity.mint(caller, liquidity_minted)

            self._pull(self.asset_a, caller, amount_a)
            self._pull(self.asset_b, caller, amount_b)

            logger.debug(
                "LiquidityAdded provider=%s liquidity=%d a=%d b=%d (seed)",
                caller, liquidity_minted, amount_a, amount_b,
            )
            return liquidity_minted

    def deposit(
        self,
        caller: str,
        desired_b: int,
        min_liquidity_out: int,
        max_a_in: int,
        deadline: int,
    ) -> int:
        """Add liquidity to a seeded pool at the current reserve ratio.

        The A side is derived from ``desired_b``:
        ``required_a = reserve_a * desired_b // reserve_b``.

        Returns:
            Liquidity units minted to ``caller``.
        """
        with self._atomic():
            self._ensure_deadline(deadline)
            _ensure_positive(desired_b=desired_b)
            if not self.ledger.is_seeded:
                raise NotSeeded("deposit")
            self._ensure_reserves(desired_b)

            reserve_a, reserve_b = self.ledger.reserves()
            required_a = swap_math.counterpart_amount(desired_b, reserve_a, reserve_b)
            if required_a > max_a_in:
                raise SlippageExceeded("required_a", required_a, max_a_in)

            liquidity_minted = swap_math.proportional_share(
                desired_b, reserve_b, self.liquidity_supply
            )
            if liquidity_minted < min_liquidity_out:
                raise SlippageExceeded("liquidity_minted", liquidity_minted, min_liquidity_out)
            if liquidity_minted == 0:
                raise ZeroAmount("liquidity_minted")

            # Supply is updated before any asset leaves the caller so a
            # transfer hook re-entering the pool sees committed state.
            self.ledger.liquidity.mint(caller, liquidity_minted)

            self._pull(self.asset_a, caller, required_a)
            self._pull(self.asset_b, caller, desired_b)

            logger.debug(
                "LiquidityAdded provider=%s liquidity=%d a=%d b=%d",
                caller, liquidity_minted, required_a, desired_b,
            )
            return liquidity_minted

    def withdraw(
        self,
        caller: str,
        liquidity: int,
        min_a_out: int,
        min_b_out: int,
        deadline: int,
    ) -> tuple[int, int]:
        """Burn liquidity units for a proportional share of both reserves.

        Returns:
            Tuple of (amount_a, amount_b) paid to ``caller``.
        """
        with self._atomic():
            self._ensure_deadline(deadline)
            _ensure_positive(liquidity=liquidity, min_a_out=min_a_out, min_b_out=min_b_out)
            if not self.ledger.is_seeded:
                raise NotSeeded("withdraw")
            held = self.liquidity_of(caller)
            if liquidity > held:
                raise InsufficientLiquidity(liquidity, held)

            supply = self.liquidity_supply
            reserve_a, reserve_b = self.ledger.reserves()
            amount_a = swap_math.proportional_share(liquidity, supply, reserve_a)
            amount_b = swap_math.proportional_share(liquidity, supply, reserve_b)
            if amount_a < min_a_out:
                raise SlippageExceeded("amount_a", amount_a, min_a_out)
            if amount_b < min_b_out:
                raise SlippageExceeded("amount_b", amount_b, min_b_out)

            self.ledger.liquidity.burn(caller, liquidity)

            self._push(self.asset_a, caller, amount_a)
            self._push(self.asset_b, caller, amount_b)

            logger.debug(
                "LiquidityRemoved provider=%s liquidity=%d a=%d b=%d",
                caller, liquidity, amount_a, amount_b,
            )
            return amount_a, amount_b

    # ------------------------------------------------------------------
    # Swaps
    # ------------------------------------------------------------------

    def swap_exact_input(
        self,
        caller: str,
        direction: Direction,
        input_amount: int,
        min_output: int,
        deadline: int,
    ) -> int:
        """Sell exactly ``input_amount``; returns the output paid by the pool."""
        request = SwapRequest(
            direction=direction,
            exact_side=ExactSide.INPUT,
            amount=input_amount,
            limit=min_output,
            deadline=deadline,
        )
        return self.execute(caller, request).amount_out

    def swap_exact_output(
        self,
        caller: str,
        direction: Direction,
        output_amount: int,
        max_input: int,
        deadline: int,
    ) -> int:
        """Buy exactly ``output_amount``; returns the input charged by the pool."""
        request = SwapRequest(
            direction=direction,
            exact_side=ExactSide.OUTPUT,
            amount=output_amount,
            limit=max_input,
            deadline=deadline,
        )
        return self.execute(caller, request).amount_in

    def sell_a(self, caller: str, amount_a: int, min_b_out: int, deadline: int) -> int:
        """Sell an exact amount of A for B."""
        return self.swap_exact_input(caller, Direction.A_TO_B, amount_a, min_b_out, deadline)

    def execute(self, caller: str, request: SwapRequest) -> SwapResult:
        """Price, validate and settle a swap request."""
        with self._atomic():
            self._ensure_deadline(request.deadline)
            if request.exact_side is ExactSide.INPUT:
                _ensure_positive(input_amount=request.amount)
            else:
                _ensure_positive(output_amount=request.amount)
            if not self.ledger.is_seeded:
                raise NotSeeded("swap")

            if request.exact_side is ExactSide.INPUT:
                amount_in = request.amount
                amount_out = self.quote_output(request.direction, amount_in)
                if amount_out < request.limit:
                    raise SlippageExceeded("output_amount", amount_out, request.limit)
                if amount_out == 0:
                    raise ZeroAmount("output_amount")
            else:
                amount_out = request.amount
                amount_in = self.quote_input(request.direction, amount_out)
                if amount_in > request.limit:
                    raise SlippageExceeded("input_amount", amount_in, request.limit)
                if amount_in == 0:
                    raise ZeroAmount("input_amount")

            input_asset, output_asset = self._assets_for(request.direction)
            self._pull(input_asset, caller, amount_in)
            self._push(output_asset, caller, amount_out)

            bonus_paid = self._after_swap(caller, output_asset)

            result = SwapResult(
                direction=request.direction,
                amount_in=amount_in,
                amount_out=amount_out,
                bonus_paid=bonus_paid,
                reserve_a=self.reserve_a,
                reserve_b=self.reserve_b,
            )
            logger.debug(
                "Swap trader=%s %s in=%d out=%d bonus=%d",
                caller, request.direction.value, amount_in, amount_out, bonus_paid,
            )
            return result

    def _after_swap(self, caller: str, output_asset: FungibleAsset) -> int:
        """Post-swap hook: count the swap and pay the periodic bonus.

        Runs after the priced transfers have settled. The bonus is a
        fault-injection path: it moves reserves outside the pricing
        formula, which the invariant harness is expected to detect.
        """
        self.ledger.swap_count += 1
        if self.ledger.swap_count < self.config.bonus_interval:
            return 0

        self.ledger.swap_count = 0
        if not self.config.bonus_enabled or self.config.bonus_amount == 0:
            return 0

        self._push(output_asset, caller, self.config.bonus_amount)
        logger.debug(
            "BonusPaid trader=%s asset=%s amount=%d",
            caller, output_asset.symbol, self.config.bonus_amount,
        )
        return self.config.bonus_amount

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _atomic(self) -> Iterator[None]:
        snapshot = self.ledger.snapshot()
        try:
            yield
        except Exception:
            self.ledger.restore(snapshot)
            raise

    def _ensure_deadline(self, deadline: int) -> None:
        now = self.now()
        if deadline < now:
            raise DeadlineExpired(deadline, now)

    def _ensure_reserves(self, desired_b: int) -> None:
        # The bonus can pay out the last of reserve B while liquidity remains
        if self.reserve_a == 0 or self.reserve_b == 0:
            raise ReserveExhausted(desired_b, self.reserve_b)

    def _reserves_for(self, direction: Direction) -> tuple[int, int]:
        if direction is Direction.A_TO_B:
            return self.reserve_a, self.reserve_b
        return self.reserve_b, self.reserve_a

    def _assets_for(self, direction: Direction) -> tuple[FungibleAsset, FungibleAsset]:
        if direction is Direction.A_TO_B:
            return self.asset_a, self.asset_b
        return self.asset_b, self.asset_a

    def _pull(self, asset: FungibleAsset, owner: str, amount: int) -> None:
        asset.transfer_from(self.address, owner, self.address, amount)

    def _push(self, asset: FungibleAsset, recipient: str, amount: int) -> None:
        asset.transfer(self.address, recipient, amount)


def _ensure_positive(**amounts: int) -> None:
    for name, amount in amounts.items():
        if amount <= 0:
            raise ZeroAmount(name)
