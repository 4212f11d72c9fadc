"""Server-authoritative package catalog.

Prices live here only; clients send a package key and never a price.
"""
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Union

CENTS = Decimal("0.01")
DEPOSIT_RATE = Decimal("0.5")


@dataclass(frozen=True)
class Package:
    key: str
    name: str
    description: str
    price: Decimal


PACKAGES: Dict[str, Package] = {
    "core": Package(
        key="core",
        name="Core System Package",
        description="Core web + booking + analytics foundation",
        price=Decimal("5000"),
    ),
    "growth": Package(
        key="growth",
        name="Growth Accelerator Package",
        description="Adds learning hub, resources, community, automation",
        price=Decimal("7500"),
    ),
    "full": Package(
        key="full",
        name="Full Ecosystem Package",
        description="Complete system with dashboard, portal, workflows, advanced analytics",
        price=Decimal("10000"),
    ),
}


class UnknownPackageError(ValueError):
    pass


def get_package(key: str) -> Package:
    try:
        return PACKAGES[key]
    except (KeyError, TypeError):
        raise UnknownPackageError(f"Unknown package key: {key!r}")


def deposit_for(price: Union[Decimal, int, str]) -> Decimal:
    """Half of ``price``, rounded half-up to whole cents."""
    return (Decimal(str(price)) * DEPOSIT_RATE).quantize(CENTS, rounding=ROUND_HALF_UP)


def format_amount(amount: Decimal) -> str:
    """Decimal string accepted by Wave's ``unitPrice`` inputs."""
    return str(amount.quantize(CENTS, rounding=ROUND_HALF_UP))
