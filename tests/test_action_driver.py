"""Action driver tests: clamping, funding, skipping and ghost recording."""

import numpy as np
import pytest

from amm_pool.core.config import DEFAULT_POOL_CONFIG
from amm_pool.core.pool import Direction
from amm_pool.harness.config import MAX_UINT64
from amm_pool.harness.driver import (
    ACTIONS,
    LIQUIDITY_PROVIDER,
    SEEDER,
    SWAPPER,
    Action,
    ActionDriver,
    CallRecord,
    bound,
    clamp_deposit,
    clamp_swap_input,
    clamp_swap_output,
    random_call,
)
from tests.fixtures.pool_fixtures import (
    ONE,
    STARTING_A,
    STARTING_B,
    TRADER,
    create_seeded_pool,
    fund,
)
from tests.utils.reserve_verification import verify_ghost_matches


class TestClamping:
    """Raw inputs are mapped into each action's valid range."""

    @pytest.mark.parametrize("value,low,high,expected", [
        (5, 1, 10, 5),
        (1, 1, 10, 1),
        (10, 1, 10, 10),
        (0, 1, 10, 1),
        (11, 1, 10, 2),
        (MAX_UINT64, 0, MAX_UINT64, MAX_UINT64),
        (7, 3, 3, 3),
    ])
    def test_bound(self, value, low, high, expected):
        assert bound(value, low, high) == expected

    def test_bound_empty_range(self):
        with pytest.raises(ValueError):
            bound(1, 5, 4)

    def test_deposit_floor_is_minimum(self):
        minimum = DEFAULT_POOL_CONFIG.minimum_seed_deposit
        assert clamp_deposit(0, minimum, MAX_UINT64) == minimum
        assert clamp_deposit(12345, minimum, minimum - 1) == minimum

    def test_swap_output_keeps_reserve_nonempty(self):
        assert clamp_swap_output(STARTING_B, STARTING_B) == 1 + STARTING_B % (STARTING_B - 1)
        assert clamp_swap_output(STARTING_B - 1, STARTING_B) == STARTING_B - 1
        assert clamp_swap_output(0, 2) == 1

    @pytest.mark.parametrize("reserve", [0, 1])
    def test_swap_output_without_room(self, reserve):
        assert clamp_swap_output(ONE, reserve) is None

    def test_swap_input_at_least_one(self):
        assert clamp_swap_input(0, MAX_UINT64) == 1
        assert clamp_swap_input(ONE, 0) == 1

    def test_random_call_in_range(self):
        rng = np.random.default_rng(42)
        calls = [random_call(rng) for _ in range(200)]

        assert {call.action for call in calls} == set(ACTIONS)
        assert all(isinstance(call.raw_amount, int) for call in calls)
        assert all(0 <= call.raw_amount <= MAX_UINT64 for call in calls)


class TestDriverSetup:
    def test_for_new_pool_seeds(self, fast_settings):
        driver = ActionDriver.for_new_pool(settings=fast_settings)

        pool = driver.pool
        assert (pool.reserve_a, pool.reserve_b) == (STARTING_A, STARTING_B)
        assert pool.liquidity_of(SEEDER) == STARTING_A
        assert pool.liquidity_token.symbol == "tsPT"
        assert driver.history == []
        assert driver.last_ghost is None

    def test_call_record_str(self):
        assert str(CallRecord(Action.DEPOSIT, 123)) == "deposit(123)"


class TestDrivenCalls:
    """Each handler funds exactly what the oracle predicts."""

    @pytest.fixture
    def driver(self, no_bonus_config):
        return ActionDriver.for_new_pool(config=no_bonus_config)

    def test_deposit(self, driver):
        outcome = driver.deposit(10 * ONE)

        assert outcome.executed
        assert outcome.amount == 10 * ONE
        is_valid, error = verify_ghost_matches(outcome.ghost)
        assert is_valid, error
        assert outcome.ghost.expected_delta_a == 20 * ONE
        assert driver.pool.liquidity_of(LIQUIDITY_PROVIDER) == 20 * ONE
        assert driver.pool.asset_a.balance_of(LIQUIDITY_PROVIDER) == 0

    def test_swap_a_for_exact_b(self, driver):
        outcome = driver.swap_a_for_exact_b(ONE)

        assert outcome.executed
        assert outcome.ghost.matches
        assert outcome.ghost.expected_delta_b == -ONE
        assert driver.pool.asset_a.balance_of(SWAPPER) == 0
        assert driver.pool.asset_b.balance_of(SWAPPER) == ONE

    def test_swap_exact_a_for_b(self, driver):
        outcome = driver.swap_exact_a_for_b(ONE)

        assert outcome.executed
        assert outcome.ghost.matches
        assert outcome.ghost.expected_delta_a == ONE
        assert driver.pool.asset_b.balance_of(SWAPPER) == -outcome.ghost.expected_delta_b

    def test_raw_zero_output_becomes_one_unit(self, driver):
        outcome = driver.swap_a_for_exact_b(0)
        assert outcome.amount == 1
        assert outcome.executed

    def test_dust_exact_input_skipped(self, driver):
        before = (driver.pool.reserve_a, driver.pool.reserve_b)

        outcome = driver.swap_exact_a_for_b(1)

        assert not outcome.executed
        assert outcome.amount == 1
        assert (driver.pool.reserve_a, driver.pool.reserve_b) == before
        assert driver.history == [outcome]
        assert driver.last_ghost is None

    def test_drained_reserve_skips_exact_output(self):
        pool = create_seeded_pool(10**9, 1, config=DEFAULT_POOL_CONFIG.without_bonus())
        driver = ActionDriver(pool)

        outcome = driver.swap_a_for_exact_b(ONE)

        assert outcome.amount is None
        assert not outcome.executed
        assert pool.swap_count == 0

    def test_deposit_skipped_on_empty_reserve(self):
        pool = create_seeded_pool()
        fund(pool, TRADER, 10**6 * ONE, 0)
        for _ in range(9):
            pool.swap_exact_output(TRADER, Direction.A_TO_B, ONE // 10, ONE, pool.now())
        pool.swap_exact_output(
            TRADER, Direction.A_TO_B, pool.reserve_b - pool.config.bonus_amount, 10**6 * ONE, pool.now()
        )
        driver = ActionDriver(pool)

        outcome = driver.deposit(ONE)

        assert not outcome.executed
        assert pool.reserve_b == 0

    def test_last_ghost_skips_unexecuted(self, driver):
        executed = driver.deposit(ONE)
        driver.swap_exact_a_for_b(1)
        assert driver.last_ghost == executed.ghost

    def test_run_returns_outcomes_in_order(self, driver):
        calls = [
            CallRecord(Action.DEPOSIT, ONE),
            CallRecord(Action.SWAP_EXACT_A_FOR_B, ONE),
            CallRecord(Action.SWAP_A_FOR_EXACT_B, ONE),
        ]
        outcomes = driver.run(calls)
        assert [outcome.call for outcome in outcomes] == calls
        assert all(outcome.ghost.matches for outcome in outcomes)


class TestBonusDrift:
    """With the bonus enabled, the tenth swap moves reserve B off-formula."""

    def test_tenth_swap_drifts_by_bonus(self):
        driver = ActionDriver.for_new_pool()
        bonus = driver.pool.config.bonus_amount

        outcomes = [driver.swap_a_for_exact_b(ONE // 10) for _ in range(10)]

        assert all(outcome.ghost.matches for outcome in outcomes[:9])
        last = outcomes[9].ghost
        assert last.drift_a == 0
        assert last.drift_b == -bonus
