"""Immutable pool parameters."""

from dataclasses import dataclass, replace


@dataclass(frozen=True)
class PoolConfig:
    """Pricing and bonus parameters fixed at pool construction.

    The fee is expressed as a ratio: 997/1000 keeps 99.7% of every input,
    i.e. a 0.3% fee. The bonus fields describe the periodic payout made
    after every ``bonus_interval`` swaps, outside the pricing formula.
    """
    fee_numerator: int = 997
    fee_denominator: int = 1000
    minimum_seed_deposit: int = 1_000_000_000
    bonus_interval: int = 10
    bonus_amount: int = 10**18
    bonus_enabled: bool = True

    def __post_init__(self) -> None:
        if self.fee_denominator <= 0:
            raise ValueError(f"fee_denominator must be > 0, got {self.fee_denominator}")
        if not 0 < self.fee_numerator <= self.fee_denominator:
            raise ValueError(
                f"fee_numerator must be in (0, {self.fee_denominator}], "
                f"got {self.fee_numerator}"
            )
        if self.minimum_seed_deposit < 0:
            raise ValueError(
                f"minimum_seed_deposit must be >= 0, got {self.minimum_seed_deposit}"
            )
        if self.bonus_interval <= 0:
            raise ValueError(f"bonus_interval must be > 0, got {self.bonus_interval}")
        if self.bonus_amount < 0:
            raise ValueError(f"bonus_amount must be >= 0, got {self.bonus_amount}")

    @property
    def fee_rate(self) -> float:
        """Fee as a fraction of input (0.003 for 997/1000)."""
        return 1 - self.fee_numerator / self.fee_denominator

    def without_bonus(self) -> "PoolConfig":
        """Copy of this config with the periodic bonus switched off."""
        return replace(self, bonus_enabled=False)


DEFAULT_POOL_CONFIG = PoolConfig()
