"""
Haven amount helpers.
Converts display amounts to atomic units and shapes transfer destinations.
"""

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_DOWN
from typing import Any, Dict, List, Mapping, Union

from . import config


class InvalidAmountError(ValueError):
    """Amount cannot be converted to atomic units."""
    pass


Amount = Union[int, float, str, Decimal]


@dataclass(frozen=True)
class Destination:
    """Payment target: address plus amount in XHV."""
    address: str
    amount: Amount

    def to_dict(self) -> Dict[str, Any]:
        return {'address': self.address, 'amount': self.amount}


def to_atomic_units(amount: Amount) -> int:
    """
    Convert a decimal XHV amount to atomic units.

    Sub-atomic precision is truncated toward zero.

    Args:
        amount: Amount as number or decimal string

    Returns:
        Amount in atomic units

    Raises:
        InvalidAmountError: amount is not a finite, non-negative number
    """
    if isinstance(amount, bool):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")

    try:
        value = Decimal(str(amount).strip())
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(f"Invalid amount: {amount!r}")

    if not value.is_finite():
        raise InvalidAmountError(f"Invalid amount: {amount!r}")
    if value < 0:
        raise InvalidAmountError(f"Negative amount: {amount!r}")

    atomic = (value * config.COIN_UNIT).to_integral_value(rounding=ROUND_DOWN)
    return int(atomic)


def from_atomic_units(atomic: int) -> Decimal:
    """Convert atomic units back to XHV."""
    return Decimal(int(atomic)) / Decimal(config.COIN_UNIT)


def _destination_dict(destination) -> Dict[str, Any]:
    if isinstance(destination, Destination):
        return destination.to_dict()
    if isinstance(destination, Mapping):
        return dict(destination)
    raise TypeError(f"Unsupported destination: {destination!r}")


def normalize_destinations(destinations) -> List[Dict[str, Any]]:
    """
    Build the destinations list sent with a transfer.

    A single destination is wrapped into a one-element list. Amounts are
    converted to atomic units; the caller's objects are left untouched.

    Args:
        destinations: Destination, mapping, or a sequence of either

    Returns:
        List of destination dicts
    """
    if isinstance(destinations, (Destination, Mapping)):
        destinations = [destinations]

    result = []
    for destination in destinations:
        entry = _destination_dict(destination)
        entry['amount'] = to_atomic_units(entry.get('amount'))
        result.append(entry)
    return result
