"""
Errors raised by the scheduling engine.

Nothing here is transient: the same inputs always fail the same way,
so callers should never retry.
"""


class SchedulingError(Exception):
    """Base class for all engine errors."""


class InvalidInput(SchedulingError, ValueError):
    """Malformed grade, out-of-order timestamp, or bad parameters."""


class InvalidParameters(InvalidInput):
    """A parameter set failed validation."""


class NumericFailure(SchedulingError, ArithmeticError):
    """A memory model formula produced a non-finite value."""

    def __init__(self, quantity: str, value: float):
        super().__init__(f"{quantity} is not finite: {value!r}")
        self.quantity = quantity
        self.value = value


class CardNotFound(SchedulingError, LookupError):
    """The store has no card with the requested identifier."""

    def __init__(self, card_id):
        super().__init__(f"Card not found: {card_id!r}")
        self.card_id = card_id
