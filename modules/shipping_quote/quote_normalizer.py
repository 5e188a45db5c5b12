"""
Turns the carrier calculator answer into service quote lines.

The catalog always has the same four services. A service is available when
its block is present and carries a numeric amount. Equal totals are ordered
by service code so the cheapest pick never depends on sort stability.
"""

from dataclasses import asdict, dataclass
from typing import List, Optional

from data.service_mapping import SERVICE_CATALOG
from shipping_partner.kurasi.kurasi_schema import RawQuoteResponse


@dataclass(frozen=True)
class ServiceQuoteLine:
    service_code: str
    title: str
    carrier_fee_minor: Optional[int]
    local_fee_minor: Optional[int]
    total_fee_minor: Optional[int]
    max_weight_label: Optional[str]
    display_amount: Optional[str]
    available: bool

    def to_dict(self) -> dict:
        return asdict(self)


def _price_order(line: ServiceQuoteLine):
    return (line.total_fee_minor, line.service_code)


def _to_minor(amount: float) -> int:
    return int(round(amount))


def normalize(raw: RawQuoteResponse, local_fee_minor: int = 0) -> List[ServiceQuoteLine]:
    """Exactly one line per catalog service, available lines first by price."""
    available, unavailable = [], []

    for block_key, code, title in SERVICE_CATALOG:
        block = raw.block(block_key)

        if block is None or block.doubleAmount is None:
            unavailable.append(
                ServiceQuoteLine(
                    service_code=code,
                    title=title,
                    carrier_fee_minor=None,
                    local_fee_minor=None,
                    total_fee_minor=None,
                    max_weight_label=block.maxWeight if block else None,
                    display_amount=None,
                    available=False,
                )
            )
            continue

        carrier_fee = _to_minor(block.doubleAmount)
        available.append(
            ServiceQuoteLine(
                service_code=code,
                title=title,
                carrier_fee_minor=carrier_fee,
                local_fee_minor=local_fee_minor,
                total_fee_minor=carrier_fee + local_fee_minor,
                max_weight_label=block.maxWeight,
                display_amount=block.amount or str(carrier_fee),
                available=True,
            )
        )

    return sorted(available, key=_price_order) + unavailable


def cheapest(lines: List[ServiceQuoteLine]) -> Optional[ServiceQuoteLine]:
    candidates = [line for line in lines if line.available]
    if not candidates:
        return None
    return min(candidates, key=_price_order)


def combine(raw: RawQuoteResponse, local_fee_minor: int) -> List[ServiceQuoteLine]:
    """Available services only, each priced carrier fee + local fee."""
    return [line for line in normalize(raw, local_fee_minor) if line.available]
