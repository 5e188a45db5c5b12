from pydantic import BaseModel, field_validator
from typing import Optional

# schema
from schema.base import DBBaseModel

# utils
from utils.string import clean_text


class CustomerInsertModel(BaseModel):
    """Model for creating or replacing a customer"""

    name: str
    phone: str
    phone_code: Optional[str] = None
    shopee_name: Optional[str] = None

    @field_validator("name", "phone")
    @classmethod
    def require_text(cls, v: str) -> str:
        v = clean_text(v)
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("shopee_name", "phone_code")
    @classmethod
    def sanitize_optional(cls, v: Optional[str]) -> Optional[str]:
        v = clean_text(v)
        return v or None


class CustomerModel(DBBaseModel):
    name: str
    phone: str
    phone_code: str
    shopee_name: Optional[str] = None


class CustomerResponseModel(CustomerModel):
    order_count: int = 0
