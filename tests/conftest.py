"""Pytest configuration and shared fixtures for pool tests.

This module provides:
- Pytest markers for test categorization
- Shared fixtures for clocks, pools and funded traders
- Custom assertions for reserve properties
"""

import pytest

from amm_pool.core.clock import ManualClock
from amm_pool.core.config import DEFAULT_POOL_CONFIG, PoolConfig
from amm_pool.core.pool import Pool
from amm_pool.harness.config import DEFAULT_HARNESS_SETTINGS, HarnessSettings
from tests.fixtures.pool_fixtures import (
    ONE,
    STARTING_A,
    STARTING_B,
    TRADER,
    PoolStateSnapshot,
    create_pool,
    create_seeded_pool,
    fund,
)


# ============================================================================
# Pytest Hooks
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "economic: Pricing and reserve accounting properties"
    )
    config.addinivalue_line(
        "markers", "edge_case: Edge case tests with extreme or boundary inputs"
    )
    config.addinivalue_line(
        "markers", "integration: Tests spanning the pool and the harness"
    )
    config.addinivalue_line(
        "markers", "fuzz: Randomized or property-based call sequences"
    )
    config.addinivalue_line(
        "markers", "slow: Tests taking more than 5 seconds to run"
    )


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on location and name."""
    for item in items:
        if "edge_case" in item.nodeid or "edge_case" in item.name:
            item.add_marker(pytest.mark.edge_case)

        if any(keyword in item.nodeid for keyword in ["stateful", "property_checker", "drift"]):
            item.add_marker(pytest.mark.fuzz)
            item.add_marker(pytest.mark.integration)

        if any(keyword in item.nodeid for keyword in ["swap_math", "ratio", "swaps"]):
            item.add_marker(pytest.mark.economic)


# ============================================================================
# Pool Fixtures
# ============================================================================


@pytest.fixture
def clock() -> ManualClock:
    """Manual clock starting at a fixed timestamp."""
    return ManualClock()


@pytest.fixture
def no_bonus_config() -> PoolConfig:
    """Default pool parameters with the periodic bonus switched off."""
    return DEFAULT_POOL_CONFIG.without_bonus()


@pytest.fixture
def empty_pool(clock) -> Pool:
    """Unseeded pool over fresh PT/WETH assets."""
    return create_pool(clock=clock)


@pytest.fixture
def pool(clock) -> Pool:
    """Pool seeded with (100, 50) whole units and the bonus enabled."""
    return create_seeded_pool(STARTING_A, STARTING_B, clock=clock)


@pytest.fixture
def no_bonus_pool(clock, no_bonus_config) -> Pool:
    """Pool seeded with (100, 50) whole units and the bonus disabled."""
    return create_seeded_pool(STARTING_A, STARTING_B, config=no_bonus_config, clock=clock)


@pytest.fixture
def funded_trader(pool) -> str:
    """Trader holding and approving 1000 units of each asset for ``pool``."""
    fund(pool, TRADER, 1000 * ONE, 1000 * ONE)
    return TRADER


@pytest.fixture
def fast_settings() -> HarnessSettings:
    """Harness settings small enough for unit tests."""
    return DEFAULT_HARNESS_SETTINGS.with_overrides(n_sessions=4, n_steps=25, seed=1234)


# ============================================================================
# Custom Assertions
# ============================================================================


class ReserveAssertions:
    """Custom assertion helpers for reserve properties.

    Provides domain-specific assertions with clear error messages.
    """

    @staticmethod
    def assert_reserves(pool: Pool, reserve_a: int, reserve_b: int) -> None:
        assert (pool.reserve_a, pool.reserve_b) == (reserve_a, reserve_b), (
            f"Reserves mismatch: expected ({reserve_a}, {reserve_b}), "
            f"got ({pool.reserve_a}, {pool.reserve_b})"
        )

    @staticmethod
    def assert_unchanged(before: PoolStateSnapshot, after: PoolStateSnapshot) -> None:
        """Assert a failed call left the pool exactly as it was."""
        assert before == after, f"Pool state changed by a failed call: {before} -> {after}"

    @staticmethod
    def assert_within_units(actual: int, expected: int, units: int = 1, name: str = "value") -> None:
        diff = abs(actual - expected)
        assert diff <= units, (
            f"{name} mismatch: expected {expected}, got {actual}, "
            f"diff {diff} exceeds {units} unit(s)"
        )


@pytest.fixture
def reserve_assert() -> ReserveAssertions:
    """Fixture providing custom reserve assertions."""
    return ReserveAssertions()
