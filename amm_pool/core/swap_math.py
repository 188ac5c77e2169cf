"""Fee-adjusted constant product pricing.

All amounts are unsigned integers in the asset's smallest unit. Integer
division truncates, so every result is rounded in the pool's favor on
the output side.

The fee is applied by scaling the input side by ``fee_numerator`` and
the reserve side by ``fee_denominator``. With the defaults (997, 1000):

    output = input*997*out_reserve / (in_reserve*1000 + input*997)
    input  = in_reserve*output*1000 / ((out_reserve - output)*997)

Putting a different scale on either side (e.g. 10000 instead of 1000)
multiplies the effective fee, so the constants are passed explicitly.
"""

from amm_pool.core.errors import ReserveExhausted, ZeroAmount

FEE_NUMERATOR = 997
FEE_DENOMINATOR = 1000


def output_for_input(
    input_amount: int,
    input_reserve: int,
    output_reserve: int,
    fee_numerator: int = FEE_NUMERATOR,
    fee_denominator: int = FEE_DENOMINATOR,
) -> int:
    """Amount of the output asset received for an exact input.

    Raises:
        ZeroAmount: If ``input_amount`` is zero.
    """
    if input_amount <= 0:
        raise ZeroAmount("input_amount")

    input_with_fee = input_amount * fee_numerator
    numerator = input_with_fee * output_reserve
    denominator = input_reserve * fee_denominator + input_with_fee
    return numerator // denominator


def input_for_output(
    output_amount: int,
    input_reserve: int,
    output_reserve: int,
    fee_numerator: int = FEE_NUMERATOR,
    fee_denominator: int = FEE_DENOMINATOR,
) -> int:
    """Amount of the input asset required for an exact output.

    Raises:
        ZeroAmount: If ``output_amount`` or ``output_reserve`` is zero.
        ReserveExhausted: If ``output_amount`` is at or above ``output_reserve``.
    """
    if output_amount <= 0:
        raise ZeroAmount("output_amount")
    if output_reserve <= 0:
        raise ZeroAmount("output_reserve")
    if output_amount >= output_reserve:
        raise ReserveExhausted(output_amount, output_reserve)

    numerator = input_reserve * output_amount * fee_denominator
    denominator = (output_reserve - output_amount) * fee_numerator
    return numerator // denominator


def counterpart_amount(amount: int, reserve_of_counterpart: int, reserve_of_amount: int) -> int:
    """Amount of the other asset that keeps the reserve ratio unchanged.

    For a deposit of ``desired_b`` the A side is
    ``counterpart_amount(desired_b, reserve_a, reserve_b)``.
    """
    return reserve_of_counterpart * amount // reserve_of_amount


def proportional_share(units: int, total_units: int, reserve: int) -> int:
    """``units``/``total_units`` of ``reserve``, rounded down."""
    return units * reserve // total_units
