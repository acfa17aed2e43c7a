"""Numeric prefix argument accumulated by digit and sign commands."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(slots=True)
class PrefixArgument:
    digits: str = ""
    negative: bool = False
    universal: int = 0

    @property
    def active(self) -> bool:
        return bool(self.digits or self.negative or self.universal)

    @property
    def value(self) -> Optional[int]:
        if not self.active:
            return None
        if self.digits:
            count = int(self.digits)
        elif self.universal:
            count = 4**self.universal
        else:
            count = 1
        return -count if self.negative else count

    def add_digit(self, digit: str) -> None:
        if not digit.isdigit():
            raise ValueError(f"'{digit}' is not a digit")
        self.digits += digit

    def negate(self) -> None:
        self.negative = not self.negative

    def multiply(self) -> None:
        if self.digits:
            # C-u after digits ends the argument in Emacs; keep the digits.
            return
        self.universal += 1

    def reset(self) -> None:
        self.digits = ""
        self.negative = False
        self.universal = 0

    def describe(self) -> str:
        parts = ["C-u"] * self.universal
        if self.negative:
            parts.append("-")
        if self.digits:
            parts.append(self.digits)
        return " ".join(parts)


def direction_of(arg: Optional[int]) -> int:
    """``arg / |arg|``, defaulting to +1 for no argument or zero."""

    if not arg:
        return 1
    return arg // abs(arg)


__all__ = ["PrefixArgument", "direction_of"]
