"""Price computation for jobs.

price = base_rate(service_type) x hours x multiplier(complexity)

Two fixed lookup tables, no side effects. The result keeps full float
precision; round only for display (`display_price`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, List, NamedTuple

from core.exceptions import ValidationError


class ServiceType(NamedTuple):
    name: str
    base_rate: float


# Hourly base rates by service key
SERVICE_CATALOG: Dict[str, ServiceType] = {
    "web": ServiceType("Web Development", 50.0),
    "design": ServiceType("Graphic Design", 40.0),
    "content": ServiceType("Content Writing", 30.0),
}

# Any unrecognized service key prices at this rate
DEFAULT_SERVICE = ServiceType("General Service", 20.0)

# Complexity multipliers, ordered low < medium < high
COMPLEXITY_MULTIPLIERS: Dict[str, float] = {
    "low": 1.0,      # Standard rate
    "medium": 1.5,   # 50% markup
    "high": 2.5,     # 150% markup for difficult tasks
}


@dataclass(frozen=True)
class PriceQuote:
    """Ephemeral price breakdown. Not persisted."""

    service_type: str
    service_name: str
    complexity: str
    hours: float
    base_rate: float
    multiplier: float
    price: float

    @property
    def display_price(self) -> float:
        return display_price(self.price)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "service_type": self.service_type,
            "service_name": self.service_name,
            "complexity": self.complexity,
            "hours": self.hours,
            "base_rate": self.base_rate,
            "multiplier": self.multiplier,
            "price": self.price,
            "display_price": self.display_price,
        }


def normalize_key(value: Any) -> str:
    """Lowercase, strip whitespace. Non-strings become ''."""
    return value.strip().lower() if isinstance(value, str) else ""


def service_for(service_type: Any) -> ServiceType:
    """Look up a service, falling back to the default rate."""
    return SERVICE_CATALOG.get(normalize_key(service_type), DEFAULT_SERVICE)


def base_rate(service_type: Any) -> float:
    return service_for(service_type).base_rate


def multiplier(complexity: Any) -> float:
    """
    Look up the complexity multiplier.

    Raises:
        ValidationError: If the complexity is not low, medium or high
    """
    key = normalize_key(complexity)
    if key not in COMPLEXITY_MULTIPLIERS:
        raise ValidationError(
            f"Unknown complexity {complexity!r}; expected one of "
            f"{', '.join(COMPLEXITY_MULTIPLIERS)}",
            field="complexity",
        )
    return COMPLEXITY_MULTIPLIERS[key]


def validate_hours(hours: Any) -> float:
    """
    Check hours is a finite number greater than zero.

    Raises:
        ValidationError: For non-numbers (bool included), NaN/inf and hours <= 0
    """
    if isinstance(hours, bool) or not isinstance(hours, Real):
        raise ValidationError("Hours must be a number", field="hours")
    value = float(hours)
    if not math.isfinite(value) or value <= 0:
        raise ValidationError("Hours must be greater than zero", field="hours")
    return value


def quote(service_type: Any, complexity: Any, hours: Any) -> float:
    """
    Compute a job price at full precision.

    Strictly increasing in hours and in complexity rank for a fixed service.

    Raises:
        ValidationError: For invalid hours or unknown complexity
    """
    return base_rate(service_type) * validate_hours(hours) * multiplier(complexity)


def build_quote(service_type: Any, complexity: Any, hours: Any) -> PriceQuote:
    """Compute a price along with the inputs that produced it."""
    service = service_for(service_type)
    factor = multiplier(complexity)
    hours_value = validate_hours(hours)

    return PriceQuote(
        service_type=normalize_key(service_type),
        service_name=service.name,
        complexity=normalize_key(complexity),
        hours=hours_value,
        base_rate=service.base_rate,
        multiplier=factor,
        price=service.base_rate * hours_value * factor,
    )


def display_price(price: float) -> float:
    """Round to cents for display."""
    return round(price, 2)


def list_services() -> List[Dict[str, Any]]:
    """Service catalog for pricing forms."""
    services = [
        {"key": key, "name": svc.name, "base_rate": svc.base_rate}
        for key, svc in SERVICE_CATALOG.items()
    ]
    services.append(
        {"key": "other", "name": DEFAULT_SERVICE.name, "base_rate": DEFAULT_SERVICE.base_rate}
    )
    return services


def list_complexities() -> List[Dict[str, Any]]:
    return [
        {"key": key, "multiplier": factor}
        for key, factor in COMPLEXITY_MULTIPLIERS.items()
    ]
