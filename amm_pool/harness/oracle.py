"""Ghost-state oracle for reserve deltas.

The oracle predicts how a single call should move the pool's reserves,
using only the reserves observed before the call and the parameters
the driver passed in. It keeps its own copy of the pricing formulas
and never calls into the pool, so a pricing bug in the pool cannot be
reproduced here and cancel out in the comparison.
"""

from dataclasses import dataclass, replace

from amm_pool.core.pool import Direction


@dataclass(frozen=True)
class GhostState:
    """Expected and observed reserve movement for one driven call."""
    starting_a: int
    starting_b: int
    expected_delta_a: int = 0
    expected_delta_b: int = 0
    actual_delta_a: int = 0
    actual_delta_b: int = 0

    @property
    def matches(self) -> bool:
        return (
            self.actual_delta_a == self.expected_delta_a
            and self.actual_delta_b == self.expected_delta_b
        )

    @property
    def drift_a(self) -> int:
        """Observed minus expected movement of reserve A."""
        return self.actual_delta_a - self.expected_delta_a

    @property
    def drift_b(self) -> int:
        """Observed minus expected movement of reserve B."""
        return self.actual_delta_b - self.expected_delta_b


class InvariantOracle:
    """Side-effect-free predictor of reserve deltas.

    Each method takes a ``GhostState`` and returns a new one; the oracle
    itself only holds the fee constants it was built with.
    """

    def __init__(self, fee_numerator: int = 997, fee_denominator: int = 1000):
        self.fee_numerator = fee_numerator
        self.fee_denominator = fee_denominator

    def open(self, reserve_a: int, reserve_b: int) -> GhostState:
        """Start a ghost record from the pre-call reserves."""
        return GhostState(starting_a=reserve_a, starting_b=reserve_b)

    def close(self, ghost: GhostState, reserve_a: int, reserve_b: int) -> GhostState:
        """Record the post-call reserves as observed deltas."""
        return replace(
            ghost,
            actual_delta_a=reserve_a - ghost.starting_a,
            actual_delta_b=reserve_b - ghost.starting_b,
        )

    # -- expectations ---------------------------------------------------

    def expect_deposit(self, ghost: GhostState, desired_b: int) -> GhostState:
        return replace(
            ghost,
            expected_delta_a=self.deposit_counterpart(ghost, desired_b),
            expected_delta_b=desired_b,
        )

    def expect_swap_exact_output(
        self, ghost: GhostState, direction: Direction, output_amount: int
    ) -> GhostState:
        amount_in = self.input_for_output(ghost, direction, output_amount)
        return self._expect_swap(ghost, direction, amount_in, output_amount)

    def expect_swap_exact_input(
        self, ghost: GhostState, direction: Direction, input_amount: int
    ) -> GhostState:
        amount_out = self.output_for_input(ghost, direction, input_amount)
        return self._expect_swap(ghost, direction, input_amount, amount_out)

    @staticmethod
    def _expect_swap(
        ghost: GhostState, direction: Direction, amount_in: int, amount_out: int
    ) -> GhostState:
        if direction is Direction.A_TO_B:
            return replace(ghost, expected_delta_a=amount_in, expected_delta_b=-amount_out)
        return replace(ghost, expected_delta_a=-amount_out, expected_delta_b=amount_in)

    # -- formulas -------------------------------------------------------

    def deposit_counterpart(self, ghost: GhostState, desired_b: int) -> int:
        return ghost.starting_a * desired_b // ghost.starting_b

    @staticmethod
    def liquidity_for_deposit(ghost: GhostState, liquidity_supply: int, desired_b: int) -> int:
        return liquidity_supply * desired_b // ghost.starting_b

    def input_for_output(self, ghost: GhostState, direction: Direction, output_amount: int) -> int:
        input_reserve, output_reserve = _oriented(ghost, direction)
        return (input_reserve * output_amount * self.fee_denominator) // (
            (output_reserve - output_amount) * self.fee_numerator
        )

    def output_for_input(self, ghost: GhostState, direction: Direction, input_amount: int) -> int:
        input_reserve, output_reserve = _oriented(ghost, direction)
        scaled_input = input_amount * self.fee_numerator
        return (scaled_input * output_reserve) // (
            input_reserve * self.fee_denominator + scaled_input
        )


def _oriented(ghost: GhostState, direction: Direction) -> tuple[int, int]:
    if direction is Direction.A_TO_B:
        return ghost.starting_a, ghost.starting_b
    return ghost.starting_b, ghost.starting_a
