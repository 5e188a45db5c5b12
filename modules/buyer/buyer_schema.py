from pydantic import BaseModel, ConfigDict, field_validator
from typing import List, Optional

# schema
from schema.base import DBBaseModel

# utils
from utils.string import clean_email, clean_text


class BuyerBaseModel(BaseModel):
    full_name: str
    address1: str
    address2: Optional[str] = ""
    city: str
    state: Optional[str] = ""
    zip: str
    country: str
    email: Optional[str] = ""
    phone: str

    @field_validator("full_name", "address1", "city", "zip", "country", "phone")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("address2", "state")
    @classmethod
    def sanitize_optional(cls, v: Optional[str]) -> str:
        return clean_text(v)

    @field_validator("email")
    @classmethod
    def sanitize_email(cls, v: Optional[str]) -> str:
        return clean_email(v)


class BuyerInsertModel(BuyerBaseModel):
    """Create-or-update by (country, phone), optionally attaching an SRN"""

    phone_code: Optional[str] = None
    sale_record_number: Optional[int] = None

    @field_validator("sale_record_number")
    @classmethod
    def positive_srn(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("must be a positive number")
        return v


class BuyerUpdateModel(BuyerBaseModel):
    pass


class BuyerSRNModel(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    sale_record_number: int
    kurasi_shipment_id: Optional[str] = None
    tracking_number: Optional[str] = None
    tracking_slug: Optional[str] = None


class BuyerModel(DBBaseModel):
    full_name: str
    address1: str
    address2: str = ""
    city: str
    state: str = ""
    zip: str
    country: str
    email: str = ""
    phone: str
    srns: List[BuyerSRNModel] = []


class BuyerResponseModel(BuyerModel):
    order_count: int = 0
