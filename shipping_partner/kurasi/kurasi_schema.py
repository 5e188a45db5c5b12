from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ============================================
# CALCULATOR
# ============================================


class QuoteRequest(BaseModel):
    country: str  # display name, the calculator does not take iso codes
    actual_weight: Union[int, float, str]
    actual_length: Union[int, float, str] = 0
    actual_width: Union[int, float, str] = 0
    actual_height: Union[int, float, str] = 0
    currency_type: str = "IDR"
    supported_country_code: str = "ID"


class ServiceBlock(BaseModel):
    model_config = ConfigDict(extra="ignore")

    doubleAmount: Optional[float] = None
    amount: Optional[str] = None
    maxWeight: Optional[str] = None
    type: Optional[str] = None
    shippingFee: Optional[str] = None
    additionalCharges: Optional[Dict[str, Any]] = None


class RawQuoteResponse(BaseModel):
    """
    The calculator's `data` block.

    A missing tier (None), a tier with a null doubleAmount and a tier priced
    at 0 are three different answers.
    """

    model_config = ConfigDict(extra="ignore")

    esr: Optional[ServiceBlock] = None
    epr: Optional[ServiceBlock] = None
    err: Optional[ServiceBlock] = None
    ppr: Optional[ServiceBlock] = None
    currencyType: Optional[str] = None
    currencySymbol: Optional[str] = None
    chargeableWeight: Optional[float] = None
    volumetricWeight: Optional[float] = None

    def block(self, block_key: str) -> Optional[ServiceBlock]:
        return getattr(self, block_key, None)


# ============================================
# CALL RESULTS
# ============================================


class CarrierQuoteResult(BaseModel):
    status: str  # SUCCESS | FAIL | ERROR
    http_status: int
    message: Optional[str] = None
    quote: Optional[RawQuoteResponse] = None

    @property
    def ok(self) -> bool:
        return self.status == "SUCCESS"


class CarrierCallResult(BaseModel):
    status: str  # SUCCESS | FAIL | ERROR
    http_status: int
    message: Optional[str] = None
    data: Any = None
    # parsed json body, or raw bytes for binary answers
    content: Any = None
    content_type: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.status == "SUCCESS"


# ============================================
# SHIPMENT LISTING
# ============================================


class ShipmentListQuery(BaseModel):
    startDate: str
    endDate: str
    clientCode: str = ""
    sortType: str = "ASC"
    flagText: str = "All"
    saleRecordNumber: str = ""
    kurasiShipmentId: str = ""
    country: List[str] = Field(default_factory=list)
    serviceName: List[str] = Field(default_factory=list)
    saleChannel: List[str] = Field(default_factory=list)
    index: int = 0
    limit: int = 500


class TempShipmentQuery(BaseModel):
    """Body of the draft (not yet submitted) shipment listing."""

    startDate: str
    endDate: str
    clientCode: str = ""
    sortType: str = "ASC"
    shipmentStatus: str = "All"
    saleRecordNumber: str = ""
    kurasiShipmentId: str = ""
    country: List[str] = Field(default_factory=list)
    serviceName: List[str] = Field(default_factory=list)
    countryList: List[str] = Field(default_factory=list)
    saleChannel: List[str] = Field(default_factory=list)
    branchIdList: List[str] = Field(default_factory=list)


class KurasiShipmentInput(BaseModel):
    kurasi_shipment_id: str
    sale_record_number: str = ""
    flag_id: Optional[str] = None
    buyer_full_name: str = ""
    buyer_country: str = ""
    buyer_city: Optional[str] = None
    buyer_state: Optional[str] = None
    buyer_zip: Optional[str] = None
    buyer_phone: Optional[str] = None
    service_name: Optional[str] = None
    carrier: Optional[str] = None
    shipping_fee: Optional[str] = None
    shipping_fee_minor: Optional[int] = None
    chargeable_weight: Optional[int] = None
    actual_weight: Optional[int] = None
    tracking_number: Optional[str] = None
    awb: Optional[str] = None
    box_id: Optional[str] = None
    shipment_received_at: Optional[datetime] = None
    label_created_at: Optional[datetime] = None
    shipped_at: Optional[datetime] = None


class KurasiBuyerInput(BaseModel):
    sale_record_number: int
    full_name: str
    address1: str
    address2: str
    city: str
    state: str
    zip: str
    country: str
    email: str
    phone: str


# ============================================
# PROXY REQUEST BODIES
# ============================================


class KurasiLoginRequest(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None


class KurasiQuoteRequest(BaseModel):
    country: Any = ""
    actualWeight: Any = ""
    actualLength: Any = ""
    actualWidth: Any = ""
    actualHeight: Any = ""
    currencyType: Any = ""
    supportedCountryCode: Any = ""


class OrderShipmentRequest(BaseModel):
    orderId: Optional[int] = None


class SyncBuyersRequest(BaseModel):
    startDate: Optional[str] = None
    endDate: Optional[str] = None
    fullSync: bool = False


class TempShipmentsRequest(BaseModel):
    startDate: Optional[str] = None
    endDate: Optional[str] = None


class ProxyResponse(BaseModel):
    """What a proxy endpoint answers: a status envelope, or a PDF to pass through."""

    status_code: int
    status: str = "SUCCESS"
    error_message: Optional[str] = None
    payload: Dict[str, Any] = Field(default_factory=dict)
    pdf: Optional[bytes] = None
    filename: Optional[str] = None
