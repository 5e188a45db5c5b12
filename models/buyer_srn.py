from sqlalchemy import BigInteger, Column, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase
from context_manager.context import get_db_session


class BuyerSRN(DBBase, DBBaseClass):
    """Sale record number attached to a buyer, with the carrier ids it led to."""

    __tablename__ = "buyer_srn"

    sale_record_number = Column(BigInteger, nullable=False, unique=True, index=True)
    buyer_id = Column(Integer, ForeignKey("buyer.id"), nullable=False, index=True)
    kurasi_shipment_id = Column(String(64), nullable=True, unique=True)
    tracking_number = Column(String(64), nullable=True)
    tracking_slug = Column(String(64), nullable=True)

    buyer = relationship("Buyer", back_populates="srns", lazy="noload")

    @classmethod
    def get_by_number(cls, sale_record_number: int):
        db = get_db_session()
        return (
            db.query(cls).filter(cls.sale_record_number == sale_record_number).first()
        )

    @classmethod
    def get_by_shipment_id(cls, kurasi_shipment_id: str):
        db = get_db_session()
        return (
            db.query(cls).filter(cls.kurasi_shipment_id == kurasi_shipment_id).first()
        )

    def to_dict(self):
        return {
            "sale_record_number": self.sale_record_number,
            "kurasi_shipment_id": self.kurasi_shipment_id,
            "tracking_number": self.tracking_number,
            "tracking_slug": self.tracking_slug,
        }
