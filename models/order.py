"""
Order Model

An order ties a customer (the sender at the counter) to a buyer (the
recipient abroad) and a package. Money fields are IDR minor units.

Two independent status tracks:
- local_status: the counter side (payment and handover)
- delivery_status: the carrier side (shipment, label, tracking)
"""

import enum

from sqlalchemy import (
    BigInteger,
    Column,
    ForeignKey,
    Integer,
    String,
    Text,
    TIMESTAMP,
)
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase, time_now


class LocalStatus(str, enum.Enum):
    in_progress = "in_progress"
    on_the_way = "on_the_way"
    pending_payment = "pending_payment"
    paid = "paid"


class DeliveryStatus(str, enum.Enum):
    not_yet_create_label = "not_yet_create_label"
    submitted_to_Kurasi = "submitted_to_Kurasi"
    label_confirmed = "label_confirmed"
    ready_to_send = "ready_to_send"
    tracking_received = "tracking_received"


class Order(DBBase, DBBaseClass):

    __tablename__ = "order"

    placed_at = Column(TIMESTAMP(timezone=True), nullable=False, default=time_now)
    notes = Column(Text, nullable=True)

    customer_id = Column(Integer, ForeignKey("customer.id"), nullable=False, index=True)
    buyer_id = Column(Integer, ForeignKey("buyer.id"), nullable=False, index=True)
    package_id = Column(Integer, ForeignKey("package_detail.id"), nullable=False)
    srn_id = Column(
        BigInteger, ForeignKey("buyer_srn.sale_record_number"), nullable=True
    )

    # ============================================
    # PRICING
    # ============================================

    quoted_amount_minor = Column(Integer, nullable=True)
    shipping_price_minor = Column(Integer, nullable=True)
    fee_minor = Column(Integer, nullable=True)  # local handling fee
    currency = Column(String(3), nullable=True, default="USD")
    pricing_source = Column(String(32), nullable=True)

    # ============================================
    # STATUS
    # ============================================

    local_status = Column(
        String(32), nullable=False, default=LocalStatus.in_progress.value, index=True
    )
    delivery_status = Column(
        String(32),
        nullable=False,
        default=DeliveryStatus.not_yet_create_label.value,
        index=True,
    )
    payment_method = Column(String(32), nullable=False, default="qris")

    # ============================================
    # CARRIER REFERENCES
    # ============================================

    external_ref = Column(String(64), nullable=True)
    sale_channel = Column(String(64), nullable=True)
    label_id = Column(String(64), nullable=True)
    tracking_link = Column(String(255), nullable=True)
    krs_tracking_number = Column(String(64), nullable=True, index=True)

    customer = relationship("Customer", back_populates="orders", lazy="joined")
    buyer = relationship("Buyer", back_populates="orders", lazy="joined")
    package = relationship("PackageDetail", lazy="joined")

    def to_model(self):
        from modules.orders.order_schema import OrderModel

        return OrderModel.model_validate(self)

    @staticmethod
    def create_db_entity(order_data: dict) -> "Order":
        return Order(**order_data)
