from sqlalchemy import Column, String
from sqlalchemy.orm import relationship

from database import DBBaseClass, DBBase
from context_manager.context import get_db_session


class Customer(DBBase, DBBaseClass):

    __tablename__ = "customer"

    name = Column(String(150), nullable=False)
    phone = Column(String(20), nullable=False, unique=True, index=True)  # E.164
    phone_code = Column(String(6), nullable=False, default="+62")
    shopee_name = Column(String(150), nullable=True)

    orders = relationship("Order", back_populates="customer", lazy="noload")

    def to_model(self):
        from modules.customer.customer_schema import CustomerModel

        return CustomerModel.model_validate(self)

    @staticmethod
    def create_db_entity(customer_data: dict) -> "Customer":
        return Customer(**customer_data)

    @classmethod
    def get_by_phone(cls, phone: str):
        db = get_db_session()
        return db.query(cls).filter(cls.phone == phone).first()
