"""
Order Pydantic Schemas

An order is created together with its package. Updates are partial: only the
fields present in the request body are applied.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

# schema
from schema.base import DBBaseModel
from modules.customer.customer_schema import CustomerModel
from modules.buyer.buyer_schema import BuyerModel

# models
from models.order import DeliveryStatus, LocalStatus

# utils
from utils.string import clean_text


# ============================================
# PACKAGE
# ============================================


class PackageDetailModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    weight_grams: Optional[int] = None
    length_cm: Optional[float] = None
    width_cm: Optional[float] = None
    height_cm: Optional[float] = None
    total_value: Optional[float] = None
    description: Optional[str] = None
    service: str
    currency: str = "USD"
    sku: Optional[str] = None
    hs_code: Optional[str] = None
    country_of_origin: Optional[str] = None


class PackageFieldsMixin(BaseModel):
    weight_grams: Optional[int] = None
    length_cm: Optional[float] = None
    width_cm: Optional[float] = None
    height_cm: Optional[float] = None
    total_value: Optional[float] = None
    package_description: Optional[str] = None
    sku: Optional[str] = None
    hs_code: Optional[str] = None
    country_of_origin: Optional[str] = None

    @field_validator("weight_grams")
    @classmethod
    def non_negative_weight(cls, v):
        if v is not None and v < 0:
            raise ValueError("Weight cannot be negative")
        return v

    @field_validator("length_cm", "width_cm", "height_cm", "total_value")
    @classmethod
    def non_negative_number(cls, v):
        if v is not None and v < 0:
            raise ValueError("Value cannot be negative")
        return v

    @field_validator("country_of_origin")
    @classmethod
    def upper_country(cls, v):
        v = clean_text(v).upper()
        return v or None


# ============================================
# REQUESTS
# ============================================


class OrderInsertModel(PackageFieldsMixin):
    customer_id: int
    buyer_id: int
    service: str
    srn_id: Optional[int] = None
    notes: Optional[str] = None
    quoted_amount_minor: Optional[int] = None
    shipping_price_minor: Optional[int] = None
    currency: Optional[str] = "USD"
    pricing_source: Optional[str] = None
    payment_method: Optional[str] = "qris"
    sale_channel: Optional[str] = None
    external_ref: Optional[str] = None

    @field_validator("service")
    @classmethod
    def require_service(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("Service is required")
        return v


class OrderUpdateModel(PackageFieldsMixin):
    service: Optional[str] = None
    currency: Optional[str] = None
    notes: Optional[str] = None
    local_status: Optional[LocalStatus] = None
    delivery_status: Optional[DeliveryStatus] = None
    payment_method: Optional[str] = None
    external_ref: Optional[str] = None
    label_id: Optional[str] = None
    tracking_link: Optional[str] = None
    srn_id: Optional[int] = None


class OrderFilters(BaseModel):
    page: int = 1
    page_size: int = 10
    status: Optional[str] = None


# ============================================
# RESPONSES
# ============================================


class OrderModel(DBBaseModel):
    placed_at: Optional[datetime] = None
    notes: Optional[str] = None

    customer_id: int
    buyer_id: int
    package_id: int
    srn_id: Optional[int] = None

    quoted_amount_minor: Optional[int] = None
    shipping_price_minor: Optional[int] = None
    fee_minor: Optional[int] = None
    currency: Optional[str] = None
    pricing_source: Optional[str] = None

    local_status: str
    delivery_status: str
    payment_method: str

    external_ref: Optional[str] = None
    sale_channel: Optional[str] = None
    label_id: Optional[str] = None
    tracking_link: Optional[str] = None
    krs_tracking_number: Optional[str] = None

    customer: Optional[CustomerModel] = None
    buyer: Optional[BuyerModel] = None
    package: Optional[PackageDetailModel] = None
