"""Invariant verification harness."""

from amm_pool.harness.checker import (
    CheckerReport,
    Counterexample,
    PropertyChecker,
    SessionResult,
    Violation,
    calls_from_regression,
)
from amm_pool.harness.config import DEFAULT_HARNESS_SETTINGS, HarnessSettings
from amm_pool.harness.driver import Action, ActionDriver, CallRecord, StepOutcome
from amm_pool.harness.oracle import GhostState, InvariantOracle

__all__ = [
    "Action",
    "ActionDriver",
    "CallRecord",
    "CheckerReport",
    "Counterexample",
    "DEFAULT_HARNESS_SETTINGS",
    "GhostState",
    "HarnessSettings",
    "InvariantOracle",
    "PropertyChecker",
    "SessionResult",
    "StepOutcome",
    "Violation",
    "calls_from_regression",
]
