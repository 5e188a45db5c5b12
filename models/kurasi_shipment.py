"""
Kurasi Shipment Model

Local copy of a row from the Kurasi shipment listing, refreshed by the buyer
sync. Fees are IDR minor units; weights are grams.
"""

from sqlalchemy import Column, Integer, String, TIMESTAMP

from database import DBBaseClass, DBBase, time_now
from context_manager.context import get_db_session


class KurasiShipment(DBBase, DBBaseClass):

    __tablename__ = "kurasi_shipment"

    kurasi_shipment_id = Column(String(64), nullable=False, unique=True, index=True)
    sale_record_number = Column(String(64), nullable=False, default="")
    flag_id = Column(String(64), nullable=True)

    buyer_full_name = Column(String(255), nullable=False, default="")
    buyer_country = Column(String(64), nullable=False, default="", index=True)
    buyer_city = Column(String(255), nullable=True)
    buyer_state = Column(String(255), nullable=True)
    buyer_zip = Column(String(32), nullable=True)
    buyer_phone = Column(String(32), nullable=True)

    service_name = Column(String(64), nullable=True, index=True)
    carrier = Column(String(64), nullable=True)

    # display amount as sent by kurasi, e.g. "104,000"
    shipping_fee = Column(String(32), nullable=True)
    shipping_fee_minor = Column(Integer, nullable=True)
    local_fee_minor = Column(Integer, nullable=True)

    chargeable_weight = Column(Integer, nullable=True)
    actual_weight = Column(Integer, nullable=True)

    tracking_number = Column(String(64), nullable=True)
    awb = Column(String(64), nullable=True)
    box_id = Column(String(64), nullable=True)

    shipment_received_at = Column(TIMESTAMP(timezone=True), nullable=True)
    label_created_at = Column(TIMESTAMP(timezone=True), nullable=True)
    shipped_at = Column(TIMESTAMP(timezone=True), nullable=True)
    synced_at = Column(TIMESTAMP(timezone=True), nullable=False, default=time_now)

    @classmethod
    def get_by_shipment_id(cls, kurasi_shipment_id: str):
        db = get_db_session()
        return (
            db.query(cls).filter(cls.kurasi_shipment_id == kurasi_shipment_id).first()
        )

    def to_dict(self):
        return {
            "kurasi_shipment_id": self.kurasi_shipment_id,
            "sale_record_number": self.sale_record_number,
            "buyer_full_name": self.buyer_full_name,
            "buyer_country": self.buyer_country,
            "buyer_city": self.buyer_city,
            "service_name": self.service_name,
            "carrier": self.carrier,
            "shipping_fee_minor": self.shipping_fee_minor,
            "local_fee_minor": self.local_fee_minor,
            "chargeable_weight": self.chargeable_weight,
            "actual_weight": self.actual_weight,
            "tracking_number": self.tracking_number,
            "shipped_at": self.shipped_at.isoformat() if self.shipped_at else None,
            "synced_at": self.synced_at.isoformat() if self.synced_at else None,
        }
