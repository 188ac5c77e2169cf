"""Failure taxonomy for pool operations.

Every guard in the pool raises one of these instead of returning a
zero or no-op result. All of them abort the triggering call; the pool
restores its state before the exception leaves the call.
"""


class PoolError(Exception):
    """Base class for failures raised by a pool operation."""


class ZeroAmount(PoolError):
    """An amount that must be positive was zero."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"{name} must be greater than zero")


class BelowMinimumSeed(PoolError):
    """Initial deposit is under the pool's seeding floor."""

    def __init__(self, amount: int, minimum: int):
        self.amount = amount
        self.minimum = minimum
        super().__init__(f"seed deposit {amount} is below the minimum of {minimum}")


class SlippageExceeded(PoolError):
    """A computed amount violates the caller-supplied bound."""

    def __init__(self, name: str, actual: int, bound: int):
        self.name = name
        self.actual = actual
        self.bound = bound
        super().__init__(f"{name} {actual} violates caller bound {bound}")


class ReserveExhausted(PoolError):
    """Requested output is at or above the available reserve."""

    def __init__(self, requested: int, reserve: int):
        self.requested = requested
        self.reserve = reserve
        super().__init__(f"requested output {requested} would exhaust reserve {reserve}")


class DeadlineExpired(PoolError):
    """Current time is past the caller's deadline."""

    def __init__(self, deadline: int, now: int):
        self.deadline = deadline
        self.now = now
        super().__init__(f"deadline {deadline} has passed (now {now})")


class AlreadySeeded(PoolError):
    """Seed was called on a pool that already has liquidity."""

    def __init__(self, liquidity_supply: int):
        self.liquidity_supply = liquidity_supply
        super().__init__(f"pool is already seeded (liquidity supply {liquidity_supply})")


class NotSeeded(PoolError):
    """Operation requires a seeded pool."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(f"{operation} requires a seeded pool")


class InsufficientLiquidity(PoolError):
    """Holder tried to burn more liquidity units than it owns."""

    def __init__(self, requested: int, held: int):
        self.requested = requested
        self.held = held
        super().__init__(f"cannot burn {requested} liquidity units, holder owns {held}")


class AssetError(Exception):
    """A fungible-asset account rejected a mint, burn or transfer."""


class PoolExists(Exception):
    """The registry already holds a pool for this asset."""

    def __init__(self, symbol: str):
        self.symbol = symbol
        super().__init__(f"a pool already exists for {symbol}")
