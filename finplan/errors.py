"""Exceptions raised by the finance engines."""

from __future__ import annotations

from typing import Iterable, List


class ConfigurationError(ValueError):
    """Raised when inputs fail validation before a simulation starts.

    All violations are collected so callers can report them at once.
    """

    def __init__(self, errors: Iterable[str]) -> None:
        self.errors: List[str] = list(errors)
        super().__init__("Invalid configuration: " + ", ".join(self.errors))


class PaymentTooLowError(ValueError):
    """The payment does not cover the interest, so the loan never amortizes."""

    def __init__(self, payment: float, interest_only: float) -> None:
        self.payment = payment
        self.interest_only = interest_only
        super().__init__(
            f"EMI is too low to repay the loan at this rate "
            f"(payment {payment:.2f} <= interest-only {interest_only:.2f})"
        )
