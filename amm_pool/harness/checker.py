"""Property checking, shrinking and replay for driven call sequences.

After every driven call the checker asserts that the pool's observed
reserve deltas equal the oracle's expected deltas. A sequence that
breaks either assertion (or makes a well-formed call revert) is a
counterexample; it is minimized by delta debugging and can be replayed
deterministically from a fresh pool.
"""

import logging
import time
from dataclasses import dataclass, field, replace
from typing import Iterator, Optional

import numpy as np

from amm_pool.core.config import DEFAULT_POOL_CONFIG, PoolConfig
from amm_pool.core.errors import AssetError, PoolError
from amm_pool.harness.config import DEFAULT_HARNESS_SETTINGS, HarnessSettings
from amm_pool.harness.driver import Action, ActionDriver, CallRecord, StepOutcome, random_call

logger = logging.getLogger(__name__)

DELTA_A = "delta_a"
DELTA_B = "delta_b"
REVERT = "revert"


@dataclass(frozen=True)
class Violation:
    """A failed property at one step of a sequence."""
    step: int
    call: CallRecord
    property_name: str
    expected: Optional[int] = None
    actual: Optional[int] = None
    detail: str = ""

    @property
    def difference(self) -> Optional[int]:
        """Actual minus expected, for delta violations."""
        if self.expected is None or self.actual is None:
            return None
        return self.actual - self.expected

    def __str__(self) -> str:
        if self.property_name == REVERT:
            return f"step {self.step} {self.call}: reverted ({self.detail})"
        return (
            f"step {self.step} {self.call}: {self.property_name} expected "
            f"{self.expected}, got {self.actual} (diff {self.difference})"
        )


@dataclass
class SessionResult:
    """One independent fuzzing session."""
    seed: int
    calls: list[CallRecord]
    executed: int
    skipped: int
    violation: Optional[Violation] = None


@dataclass
class Counterexample:
    """A failing sequence and its minimized reproduction."""
    seed: int
    original: list[CallRecord]
    minimized: list[CallRecord]
    violation: Violation

    def as_regression(self) -> list[tuple[str, int]]:
        """Minimized sequence as plain (action, raw_amount) pairs."""
        return [(call.action.value, call.raw_amount) for call in self.minimized]

    def describe(self) -> str:
        lines = [
            f"Counterexample (session seed {self.seed}): {self.violation}",
            f"  minimized {len(self.original)} -> {len(self.minimized)} calls:",
        ]
        lines.extend(f"    {i:3d}. {call}" for i, call in enumerate(self.minimized))
        return "\n".join(lines)


@dataclass
class CheckerReport:
    """Aggregate result of a fuzzing run."""
    sessions_run: int = 0
    total_calls: int = 0
    executed_calls: int = 0
    counterexamples: list[Counterexample] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def passed(self) -> bool:
        return not self.counterexamples


def calls_from_regression(pairs: list[tuple[str, int]]) -> list[CallRecord]:
    """Inverse of ``Counterexample.as_regression``."""
    return [CallRecord(Action(action), raw_amount) for action, raw_amount in pairs]


class PropertyChecker:
    """Runs independent sessions of random calls and checks reserve deltas."""

    def __init__(
        self,
        config: PoolConfig = DEFAULT_POOL_CONFIG,
        settings: HarnessSettings = DEFAULT_HARNESS_SETTINGS,
    ):
        self.config = config
        self.settings = settings

    def new_driver(self) -> ActionDriver:
        return ActionDriver.for_new_pool(self.config, self.settings)

    @staticmethod
    def check(outcome: StepOutcome, step: int) -> list[Violation]:
        """Evaluate both delta assertions for an executed call."""
        ghost = outcome.ghost
        if ghost is None:
            return []

        violations = []
        if ghost.actual_delta_a != ghost.expected_delta_a:
            violations.append(Violation(
                step=step,
                call=outcome.call,
                property_name=DELTA_A,
                expected=ghost.expected_delta_a,
                actual=ghost.actual_delta_a,
            ))
        if ghost.actual_delta_b != ghost.expected_delta_b:
            violations.append(Violation(
                step=step,
                call=outcome.call,
                property_name=DELTA_B,
                expected=ghost.expected_delta_b,
                actual=ghost.actual_delta_b,
            ))
        return violations

    def execute(self, calls: list[CallRecord]) -> tuple[Optional[Violation], ActionDriver]:
        """Run ``calls`` against a fresh pool, stopping at the first violation."""
        driver = self.new_driver()
        for step, call in enumerate(calls):
            try:
                outcome = driver.step(call)
            except (PoolError, AssetError) as exc:
                return Violation(
                    step=step,
                    call=call,
                    property_name=REVERT,
                    detail=f"{type(exc).__name__}: {exc}",
                ), driver
            violations = self.check(outcome, step)
            if violations:
                return violations[0], driver
        return None, driver

    def replay(self, calls: list[CallRecord]) -> Optional[Violation]:
        """Deterministically re-run a sequence; returns its first violation."""
        violation, _ = self.execute(calls)
        return violation

    def run_session(self, seed: int) -> SessionResult:
        rng = np.random.default_rng(seed)
        calls = [random_call(rng) for _ in range(self.settings.n_steps)]
        violation, driver = self.execute(calls)
        if violation is not None:
            calls = calls[: violation.step + 1]

        executed = sum(1 for outcome in driver.history if outcome.executed)
        return SessionResult(
            seed=seed,
            calls=calls,
            executed=executed,
            skipped=len(driver.history) - executed,
            violation=violation,
        )

    def run(
        self,
        n_sessions: Optional[int] = None,
        seed: Optional[int] = None,
        shrink: bool = True,
        stop_on_failure: bool = False,
    ) -> CheckerReport:
        """Run independent sessions with seeds ``seed, seed + 1, ...``."""
        n_sessions = self.settings.n_sessions if n_sessions is None else n_sessions
        base_seed = self.settings.seed if seed is None else seed
        report = CheckerReport()
        start_time = time.monotonic()

        logger.info(
            "Invariant run: %d sessions x %d steps (seed %d, bonus %s)",
            n_sessions, self.settings.n_steps, base_seed,
            "on" if self.config.bonus_enabled else "off",
        )

        for i in range(n_sessions):
            session = self.run_session(base_seed + i)
            report.sessions_run += 1
            report.total_calls += len(session.calls)
            report.executed_calls += session.executed

            if session.violation is None:
                continue

            minimized = (
                self.shrink(session.calls, session.violation) if shrink else session.calls
            )
            violation = self.replay(minimized) or session.violation
            report.counterexamples.append(Counterexample(
                seed=session.seed,
                original=session.calls,
                minimized=minimized,
                violation=violation,
            ))
            if stop_on_failure:
                break

        report.duration_seconds = time.monotonic() - start_time
        logger.info(
            "Invariant run complete: %d sessions, %d calls (%d executed), "
            "%d counterexamples in %.2fs",
            report.sessions_run, report.total_calls, report.executed_calls,
            len(report.counterexamples), report.duration_seconds,
        )
        return report

    # -- shrinking ------------------------------------------------------

    def shrink(self, calls: list[CallRecord], violation: Violation) -> list[CallRecord]:
        """Minimize a failing sequence while the same property keeps failing.

        First removes chunks of calls (halving the chunk size each pass),
        then lowers each remaining raw amount.
        """
        def reproduces(candidate: list[CallRecord]) -> bool:
            found = self.replay(candidate)
            return found is not None and found.property_name == violation.property_name

        transitions = list(calls)
        chunk_size = len(transitions) // 2
        while chunk_size >= 1:
            i = 0
            while i < len(transitions):
                candidate = transitions[:i] + transitions[i + chunk_size:]
                if candidate and reproduces(candidate):
                    transitions = candidate
                else:
                    i += chunk_size
            chunk_size //= 2

        for i, call in enumerate(transitions):
            for smaller in _smaller_amounts(call.raw_amount):
                candidate = list(transitions)
                candidate[i] = replace(call, raw_amount=smaller)
                if reproduces(candidate):
                    transitions = candidate
                    break

        logger.info(
            "Minimized %s counterexample: %d -> %d calls",
            violation.property_name, len(calls), len(transitions),
        )
        return transitions


def _smaller_amounts(raw: int) -> Iterator[int]:
    """Candidate replacements for ``raw``, smallest first."""
    seen = set()
    for shift in (None, 48, 32, 16, 8, 4, 2, 1):
        candidate = 0 if shift is None else raw >> shift
        if candidate < raw and candidate not in seen:
            seen.add(candidate)
            yield candidate
