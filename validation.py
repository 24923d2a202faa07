"""Precondition checks returning tagged results."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Optional

from schemas import Product


@dataclass(frozen=True)
class Check:
    ok: bool
    error: Optional[str] = None

    @classmethod
    def passed(cls) -> "Check":
        return cls(ok=True)

    @classmethod
    def failed(cls, error: str) -> "Check":
        return cls(ok=False, error=error)


def check_quantity(quantity: Any) -> Check:
    # bool is an int subclass; True must not pass as 1
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        return Check.failed("Quantity must be a positive integer")
    if quantity < 1:
        return Check.failed("Quantity must be a positive integer")
    return Check.passed()


def check_code_available(
    code: str,
    holder: Optional[Product],
    product_id: Optional[str] = None,
) -> Check:
    """``holder`` is whichever product currently owns ``code``, if any.

    When updating, ``product_id`` is the product being updated; it may keep
    its own code.
    """
    if holder is None or holder.id == product_id:
        return Check.passed()
    return Check.failed(f"Product code '{code}' already exists")
