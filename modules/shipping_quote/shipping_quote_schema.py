from typing import List, Optional

from pydantic import BaseModel


class QuotedService(BaseModel):
    code: str
    title: str
    totalFee: int
    maxWeight: Optional[str] = None


class ShippingQuoteMeta(BaseModel):
    currency: str = "IDR"
    chargeableWeight: Optional[float] = None
    volumetricWeight: Optional[float] = None


class ShippingQuoteResponse(BaseModel):
    status: str = "SUCCESS"
    meta: ShippingQuoteMeta
    services: List[QuotedService]


class QuoteFailureResponse(BaseModel):
    status: str
    errorMessage: str
