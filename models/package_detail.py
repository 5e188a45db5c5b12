from sqlalchemy import Column, Integer, Numeric, String

from database import DBBaseClass, DBBase


class PackageDetail(DBBase, DBBaseClass):

    __tablename__ = "package_detail"

    weight_grams = Column(Integer, nullable=True)
    length_cm = Column(Numeric(10, 2), nullable=True)
    width_cm = Column(Numeric(10, 2), nullable=True)
    height_cm = Column(Numeric(10, 2), nullable=True)
    total_value = Column(Numeric(10, 2), nullable=True)
    description = Column(String(255), nullable=True)
    service = Column(String(32), nullable=False)
    currency = Column(String(3), nullable=False, default="USD")
    sku = Column(String(64), nullable=True)
    hs_code = Column(String(16), nullable=True)
    country_of_origin = Column(String(2), nullable=True)

    @staticmethod
    def create_db_entity(package_data: dict) -> "PackageDetail":
        return PackageDetail(**package_data)
