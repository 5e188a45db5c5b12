from .customer import Customer
from .buyer import Buyer
from .buyer_srn import BuyerSRN
from .package_detail import PackageDetail
from .order import Order, LocalStatus, DeliveryStatus
from .kurasi_shipment import KurasiShipment
