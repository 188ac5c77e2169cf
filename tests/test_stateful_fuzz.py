"""Hypothesis state machines driving a pool through the action driver.

Each rule is one driven call; after every executed call the reserve
deltas are compared with the oracle's, and pool-wide accounting is
checked as an invariant between steps.
"""

import pytest
from hypothesis import HealthCheck, settings
from hypothesis.stateful import RuleBasedStateMachine, invariant, rule, run_state_machine_as_test
from hypothesis.strategies import integers

from amm_pool.core.config import DEFAULT_POOL_CONFIG, PoolConfig
from amm_pool.harness.checker import PropertyChecker
from amm_pool.harness.config import MAX_UINT64
from amm_pool.harness.driver import LIQUIDITY_PROVIDER, SEEDER, ActionDriver

raw_amounts = integers(min_value=0, max_value=MAX_UINT64)


@settings(
    max_examples=50,
    stateful_step_count=40,
    deadline=None,
    database=None,
    suppress_health_check=[HealthCheck.too_slow],
)
class PoolStateMachine(RuleBasedStateMachine):
    config = DEFAULT_POOL_CONFIG.without_bonus()

    def __init__(self):
        super().__init__()
        self.driver = ActionDriver.for_new_pool(config=self.config)
        self.pool = self.driver.pool
        self.last_k = self.pool.k

    def _record(self, outcome):
        step = len(self.driver.history) - 1
        for violation in PropertyChecker.check(outcome, step):
            raise AssertionError(str(violation))

    @rule(raw=raw_amounts)
    def deposit(self, raw):
        self._record(self.driver.deposit(raw))

    @rule(raw=raw_amounts)
    def swap_a_for_exact_b(self, raw):
        self._record(self.driver.swap_a_for_exact_b(raw))

    @rule(raw=raw_amounts)
    def swap_exact_a_for_b(self, raw):
        self._record(self.driver.swap_exact_a_for_b(raw))

    @invariant()
    def reserves_positive(self):
        assert self.pool.reserve_a > 0
        assert self.pool.reserve_b > 0

    @invariant()
    def liquidity_fully_held(self):
        held = self.pool.liquidity_of(SEEDER) + self.pool.liquidity_of(LIQUIDITY_PROVIDER)
        assert held == self.pool.liquidity_supply


class ConstantProductMachine(PoolStateMachine):
    """Without the bonus, no driven call lowers k."""

    @invariant()
    def k_never_decreases(self):
        assert self.pool.k >= self.last_k
        self.last_k = self.pool.k


class BonusPoolStateMachine(PoolStateMachine):
    """Bonus every second swap, small enough never to drain the reserve."""
    config = PoolConfig(bonus_interval=2, bonus_amount=1)


TestPoolStateMachine = PoolStateMachine.TestCase
TestConstantProductMachine = ConstantProductMachine.TestCase


def test_bonus_drift_found_by_state_machine():
    with pytest.raises(AssertionError, match="delta_b"):
        run_state_machine_as_test(
            BonusPoolStateMachine,
            settings=settings(
                max_examples=200,
                stateful_step_count=20,
                deadline=None,
                database=None,
                suppress_health_check=[HealthCheck.too_slow],
            ),
        )
