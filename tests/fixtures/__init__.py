"""Test fixtures for pool and harness testing."""

from tests.fixtures.pool_fixtures import (
    ONE,
    PROVIDER,
    SEEDER,
    STARTING_A,
    STARTING_B,
    TRADER,
    PoolStateSnapshot,
    ReserveProfile,
    create_pool,
    create_profile_pool,
    create_seeded_pool,
    fund,
    get_reserves,
    snapshot_pool_state,
)

__all__ = [
    "ONE",
    "PROVIDER",
    "SEEDER",
    "STARTING_A",
    "STARTING_B",
    "TRADER",
    "PoolStateSnapshot",
    "ReserveProfile",
    "create_pool",
    "create_profile_pool",
    "create_seeded_pool",
    "fund",
    "get_reserves",
    "snapshot_pool_state",
]
