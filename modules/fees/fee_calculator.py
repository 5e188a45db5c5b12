"""
Local handling fee.

Weight brackets: up to 1500 g is tier 1, then one more tier for every started
1000 g (1501-2500 g is tier 2, 2501-3500 g tier 3, ...). Each tier costs
10.000 IDR, US destinations pay a flat 10.000 IDR surcharge on top.
Amounts are IDR minor units.
"""

import math
import os
from dataclasses import dataclass, field
from typing import Dict, Optional

from utils.string import format_idr


@dataclass(frozen=True)
class FeeSchedule:
    first_bracket_grams: int = 1500
    step_grams: int = 1000
    tier_fee_minor: int = 10000
    country_surcharges: Dict[str, int] = field(default_factory=lambda: {"US": 10000})
    max_tier: Optional[int] = None

    def surcharge_for(self, country_code: str) -> int:
        return self.country_surcharges.get((country_code or "").strip().upper(), 0)


def _as_weight(weight) -> float:
    # bools are ints in python, never a weight
    if isinstance(weight, bool):
        return 0
    try:
        weight = float(weight)
    except (TypeError, ValueError):
        return 0
    if not math.isfinite(weight) or weight <= 0:
        return 0
    return weight


def tier_for_weight(weight_grams, schedule: FeeSchedule) -> int:
    weight = _as_weight(weight_grams)
    if weight <= schedule.first_bracket_grams:
        tier = 1
    else:
        tier = 1 + math.ceil((weight - schedule.first_bracket_grams) / schedule.step_grams)

    if schedule.max_tier is not None:
        tier = min(tier, schedule.max_tier)
    return tier


def calculate_fee(weight_grams, country_code: str, schedule: FeeSchedule = None) -> int:
    schedule = schedule or DEFAULT_FEE_SCHEDULE
    tier = tier_for_weight(weight_grams, schedule)
    return tier * schedule.tier_fee_minor + schedule.surcharge_for(country_code)


def format_fee(fee_minor) -> str:
    if fee_minor is None:
        return "-"
    return format_idr(fee_minor)


def _env_int(name: str, default: Optional[int]) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return default
    return int(value)


def load_fee_schedule() -> FeeSchedule:
    """Read the schedule from LOCAL_FEE_* environment variables."""
    return FeeSchedule(
        first_bracket_grams=_env_int("LOCAL_FEE_FIRST_BRACKET_GRAMS", 1500),
        step_grams=_env_int("LOCAL_FEE_STEP_GRAMS", 1000),
        tier_fee_minor=_env_int("LOCAL_FEE_TIER_MINOR", 10000),
        country_surcharges={"US": _env_int("LOCAL_FEE_US_SURCHARGE_MINOR", 10000)},
        max_tier=_env_int("LOCAL_FEE_MAX_TIER", None),
    )


DEFAULT_FEE_SCHEDULE = load_fee_schedule()


# fastapi dependency
def get_fee_schedule() -> FeeSchedule:
    return DEFAULT_FEE_SCHEDULE
