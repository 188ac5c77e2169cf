"""Shared settings for invariant fuzzing sessions."""

from dataclasses import dataclass, replace
import os

ONE = 10**18
MAX_UINT64 = 2**64 - 1


@dataclass(frozen=True)
class HarnessSettings:
    n_sessions: int
    n_steps: int
    seed: int
    starting_a: int
    starting_b: int
    max_deposit: int
    max_swap_input: int

    def __post_init__(self) -> None:
        if self.n_sessions < 0:
            raise ValueError(f"n_sessions must be >= 0, got {self.n_sessions}")
        if self.n_steps < 0:
            raise ValueError(f"n_steps must be >= 0, got {self.n_steps}")
        if self.starting_a <= 0 or self.starting_b <= 0:
            raise ValueError(
                f"starting reserves must be > 0, got ({self.starting_a}, {self.starting_b})"
            )

    def with_overrides(self, **changes) -> "HarnessSettings":
        """Copy with the non-None entries of ``changes`` applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


DEFAULT_HARNESS_SETTINGS = HarnessSettings(
    n_sessions=32,
    n_steps=50,
    seed=0,
    starting_a=100 * ONE,
    starting_b=50 * ONE,
    max_deposit=MAX_UINT64,
    max_swap_input=MAX_UINT64,
)


def resolve_n_sessions() -> int:
    """Resolve session count from environment or the default settings."""
    return int(os.environ.get("AMM_POOL_SESSIONS", str(DEFAULT_HARNESS_SETTINGS.n_sessions)))


def resolve_seed() -> int:
    """Resolve the base random seed from environment or the default settings."""
    return int(os.environ.get("AMM_POOL_SEED", str(DEFAULT_HARNESS_SETTINGS.seed)))
