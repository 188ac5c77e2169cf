"""Bounded action driver for invariant fuzzing.

The driver turns an unconstrained random input (an action plus a raw
integer) into a call the pool should accept: every action has an
explicit clamp for its parameter, and the acting party is funded and
approved for exactly what the oracle says the call needs. Calls that
cannot be made well-formed are skipped rather than sent.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional

import numpy as np

from amm_pool.core.assets import FungibleAsset
from amm_pool.core.clock import ManualClock
from amm_pool.core.config import DEFAULT_POOL_CONFIG, PoolConfig
from amm_pool.core.pool import Direction, Pool
from amm_pool.core.registry import PoolRegistry
from amm_pool.harness.config import DEFAULT_HARNESS_SETTINGS, MAX_UINT64, HarnessSettings
from amm_pool.harness.oracle import GhostState, InvariantOracle

SEEDER = "seeder"
LIQUIDITY_PROVIDER = "liquidityProvider"
SWAPPER = "swapper"


class Action(Enum):
    """The closed set of calls the driver may make."""
    DEPOSIT = "deposit"
    SWAP_A_FOR_EXACT_B = "swap_a_for_exact_b"
    SWAP_EXACT_A_FOR_B = "swap_exact_a_for_b"


ACTIONS = tuple(Action)


@dataclass(frozen=True)
class CallRecord:
    """One replayable step: an action and its unclamped parameter."""
    action: Action
    raw_amount: int

    def __str__(self) -> str:
        return f"{self.action.value}({self.raw_amount})"


@dataclass(frozen=True)
class StepOutcome:
    """Result of driving one call."""
    call: CallRecord
    amount: Optional[int]  # Clamped parameter, None if no valid value exists
    ghost: Optional[GhostState]  # None when the call was skipped

    @property
    def executed(self) -> bool:
        return self.ghost is not None


def bound(value: int, low: int, high: int) -> int:
    """Map ``value`` into ``[low, high]``, leaving in-range values untouched."""
    if low > high:
        raise ValueError(f"empty range [{low}, {high}]")
    if low <= value <= high:
        return value
    return low + value % (high - low + 1)


def clamp_deposit(raw: int, minimum: int, maximum: int) -> int:
    return bound(raw, minimum, max(minimum, maximum))


def clamp_swap_output(raw: int, output_reserve: int) -> Optional[int]:
    """Clamp an exact output to ``[1, output_reserve - 1]``.

    Returns None when no output leaves the reserve non-empty.
    """
    if output_reserve < 2:
        return None
    return bound(raw, 1, output_reserve - 1)


def clamp_swap_input(raw: int, maximum: int) -> int:
    return bound(raw, 1, max(1, maximum))


def random_call(rng: np.random.Generator) -> CallRecord:
    """Draw an action and a raw parameter uniformly."""
    action = ACTIONS[int(rng.integers(len(ACTIONS)))]
    raw_amount = int(rng.integers(0, MAX_UINT64, endpoint=True, dtype=np.uint64))
    return CallRecord(action=action, raw_amount=raw_amount)


class ActionDriver:
    """Drives a pool with clamped calls and records ghost state for each.

    The driver reads reserves through the pool's public accessors and
    changes them only through the pool's public operations.
    """

    def __init__(
        self,
        pool: Pool,
        settings: HarnessSettings = DEFAULT_HARNESS_SETTINGS,
        oracle: Optional[InvariantOracle] = None,
    ):
        self.pool = pool
        self.settings = settings
        self.oracle = oracle or InvariantOracle(
            pool.config.fee_numerator, pool.config.fee_denominator
        )
        self.history: list[StepOutcome] = []
        self._handlers: dict[Action, Callable[[CallRecord], StepOutcome]] = {
            Action.DEPOSIT: self._deposit,
            Action.SWAP_A_FOR_EXACT_B: self._swap_a_for_exact_b,
            Action.SWAP_EXACT_A_FOR_B: self._swap_exact_a_for_b,
        }

    @classmethod
    def for_new_pool(
        cls,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        settings: HarnessSettings = DEFAULT_HARNESS_SETTINGS,
        clock: Optional[ManualClock] = None,
        asset_a: Optional[FungibleAsset] = None,
        asset_b: Optional[FungibleAsset] = None,
    ) -> "ActionDriver":
        """Create a fresh pool through a registry, seed it, and wrap it."""
        clock = clock or ManualClock()
        anchor = asset_b or FungibleAsset("Wrapped Ether", "WETH")
        token = asset_a or FungibleAsset("Pool Token", "PT")
        registry = PoolRegistry(anchor, config=config, clock=clock)
        pool = registry.create_pool(token)

        _fund(pool, pool.asset_a, SEEDER, settings.starting_a)
        _fund(pool, pool.asset_b, SEEDER, settings.starting_b)
        pool.seed(SEEDER, settings.starting_a, settings.starting_b, clock())
        return cls(
            pool,
            settings,
            InvariantOracle(config.fee_numerator, config.fee_denominator),
        )

    @property
    def last_ghost(self) -> Optional[GhostState]:
        for outcome in reversed(self.history):
            if outcome.executed:
                return outcome.ghost
        return None

    def step(self, call: CallRecord) -> StepOutcome:
        outcome = self._handlers[call.action](call)
        self.history.append(outcome)
        return outcome

    def run(self, calls: list[CallRecord]) -> list[StepOutcome]:
        return [self.step(call) for call in calls]

    def deposit(self, raw_amount: int) -> StepOutcome:
        return self.step(CallRecord(Action.DEPOSIT, raw_amount))

    def swap_a_for_exact_b(self, raw_amount: int) -> StepOutcome:
        return self.step(CallRecord(Action.SWAP_A_FOR_EXACT_B, raw_amount))

    def swap_exact_a_for_b(self, raw_amount: int) -> StepOutcome:
        return self.step(CallRecord(Action.SWAP_EXACT_A_FOR_B, raw_amount))

    # -- handlers -------------------------------------------------------

    def _deposit(self, call: CallRecord) -> StepOutcome:
        desired_b = clamp_deposit(
            call.raw_amount, self.pool.config.minimum_seed_deposit, self.settings.max_deposit
        )
        if self.pool.reserve_a == 0 or self.pool.reserve_b == 0:
            return StepOutcome(call, desired_b, None)

        ghost = self.oracle.expect_deposit(self._open(), desired_b)
        required_a = ghost.expected_delta_a
        liquidity = self.oracle.liquidity_for_deposit(ghost, self.pool.liquidity_supply, desired_b)
        if required_a == 0 or liquidity == 0:
            return StepOutcome(call, desired_b, None)

        _fund(self.pool, self.pool.asset_a, LIQUIDITY_PROVIDER, required_a)
        _fund(self.pool, self.pool.asset_b, LIQUIDITY_PROVIDER, desired_b)
        self.pool.deposit(LIQUIDITY_PROVIDER, desired_b, 0, required_a, self.pool.now())
        return StepOutcome(call, desired_b, self._close(ghost))

    def _swap_a_for_exact_b(self, call: CallRecord) -> StepOutcome:
        output_b = clamp_swap_output(call.raw_amount, self.pool.reserve_b)
        if output_b is None:
            return StepOutcome(call, None, None)

        ghost = self.oracle.expect_swap_exact_output(self._open(), Direction.A_TO_B, output_b)
        input_a = ghost.expected_delta_a
        if input_a == 0:
            return StepOutcome(call, output_b, None)

        _fund(self.pool, self.pool.asset_a, SWAPPER, input_a)
        self.pool.swap_exact_output(SWAPPER, Direction.A_TO_B, output_b, input_a, self.pool.now())
        return StepOutcome(call, output_b, self._close(ghost))

    def _swap_exact_a_for_b(self, call: CallRecord) -> StepOutcome:
        input_a = clamp_swap_input(call.raw_amount, self.settings.max_swap_input)
        ghost = self.oracle.expect_swap_exact_input(self._open(), Direction.A_TO_B, input_a)
        output_b = -ghost.expected_delta_b
        if output_b == 0:
            return StepOutcome(call, input_a, None)

        _fund(self.pool, self.pool.asset_a, SWAPPER, input_a)
        self.pool.swap_exact_input(SWAPPER, Direction.A_TO_B, input_a, output_b, self.pool.now())
        return StepOutcome(call, input_a, self._close(ghost))

    def _open(self) -> GhostState:
        return self.oracle.open(self.pool.reserve_a, self.pool.reserve_b)

    def _close(self, ghost: GhostState) -> GhostState:
        return self.oracle.close(ghost, self.pool.reserve_a, self.pool.reserve_b)


def _fund(pool: Pool, asset: FungibleAsset, holder: str, amount: int) -> None:
    """Mint ``amount`` to ``holder`` and approve the pool to pull exactly that."""
    asset.mint(holder, amount)
    asset.approve(holder, pool.address, amount)
