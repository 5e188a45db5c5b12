from sqlalchemy import Column, String, UniqueConstraint
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase
from context_manager.context import get_db_session


class Buyer(DBBase, DBBaseClass):
    """Recipient of a shipment, one row per (country, phone)."""

    __tablename__ = "buyer"

    full_name = Column(String(150), nullable=False)
    address1 = Column(String(255), nullable=False)
    address2 = Column(String(255), nullable=False, default="")
    city = Column(String(100), nullable=False)
    state = Column(String(100), nullable=False, default="")
    zip = Column(String(20), nullable=False)
    country = Column(String(2), nullable=False, index=True)  # ISO-2
    email = Column(String(255), nullable=False, default="")
    phone = Column(String(20), nullable=False)  # E.164

    srns = relationship(
        "BuyerSRN",
        back_populates="buyer",
        lazy="selectin",
        order_by="BuyerSRN.sale_record_number",
    )
    orders = relationship("Order", back_populates="buyer", lazy="noload")

    __table_args__ = (
        UniqueConstraint("country", "phone", name="uq_buyer_country_phone"),
    )

    def to_model(self):
        from modules.buyer.buyer_schema import BuyerModel

        return BuyerModel.model_validate(self)

    @staticmethod
    def create_db_entity(buyer_data: dict) -> "Buyer":
        return Buyer(**buyer_data)

    @classmethod
    def get_by_country_phone(cls, country: str, phone: str):
        db = get_db_session()
        return (
            db.query(cls).filter(cls.country == country, cls.phone == phone).first()
        )
