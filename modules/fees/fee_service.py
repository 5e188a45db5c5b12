import http
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# models
from models import KurasiShipment, Order

# schema
from schema.base import GenericResponseModel

from .fee_calculator import FeeSchedule, calculate_fee, format_fee


class FeeService:

    @staticmethod
    def backfill_fees(fee_schedule: FeeSchedule) -> GenericResponseModel:
        """
        Compute the local fee for every order and every copied Kurasi shipment
        that has none yet.

        Shipments are charged on their chargeable weight, falling back to the
        actual weight.
        """
        db = get_db_session()
        try:
            orders = db.query(Order).filter(Order.fee_minor.is_(None)).all()

            orders_updated = 0
            fees_total = 0
            for order in orders:
                weight = order.package.weight_grams if order.package else 0
                country = order.buyer.country if order.buyer else ""
                order.fee_minor = calculate_fee(weight or 0, country, fee_schedule)

                orders_updated += 1
                fees_total += order.fee_minor

            shipments = (
                db.query(KurasiShipment)
                .filter(KurasiShipment.local_fee_minor.is_(None))
                .all()
            )

            shipments_updated = 0
            for shipment in shipments:
                weight = shipment.chargeable_weight or shipment.actual_weight or 0
                shipment.local_fee_minor = calculate_fee(
                    weight, shipment.buyer_country, fee_schedule
                )

                shipments_updated += 1
                fees_total += shipment.local_fee_minor

            db.flush()

            order_fees = db.query(func.coalesce(func.sum(Order.fee_minor), 0)).scalar()
            shipment_fees = db.query(
                func.coalesce(func.sum(KurasiShipment.local_fee_minor), 0)
            ).scalar()
            grand_total = order_fees + shipment_fees

            logger.info(
                extra=context_user_data.get(),
                msg=f"Backfilled local fees on {orders_updated} orders "
                f"and {shipments_updated} Kurasi shipments",
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message=f"Migrated {orders_updated} orders and {shipments_updated} Kurasi shipments",
                data={
                    "orders_updated": orders_updated,
                    "shipments_updated": shipments_updated,
                    "fees_total": fees_total,
                    "order_fees": order_fees,
                    "shipment_fees": shipment_fees,
                    "grand_total": grand_total,
                    "formatted": format_fee(grand_total),
                },
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error backfilling order fees: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Fee backfill failed",
            )
