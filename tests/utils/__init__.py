"""Verification utilities for pool testing.

Functions here check reserve properties (ratio preservation, the
constant product, oracle agreement) and return ``(is_valid, message)``.
"""

from tests.utils.reserve_verification import (
    verify_ghost_matches,
    verify_k_not_decreased,
    verify_ratio_preserved,
)

__all__ = [
    "verify_ghost_matches",
    "verify_k_not_decreased",
    "verify_ratio_preserved",
]
