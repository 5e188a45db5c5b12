import http
from sqlalchemy import case, func
from sqlalchemy.exc import SQLAlchemyError

from logger import logger
from context_manager.context import context_user_data, get_db_session

# models
from models import Buyer, Customer, Order
from models.order import LocalStatus


# schema
from schema.base import GenericResponseModel

RECENT_ORDERS_LIMIT = 5


class DashboardService:

    @staticmethod
    def get_overview() -> GenericResponseModel:
        db = get_db_session()
        try:
            # === Order stats ===
            order_stats = db.query(
                func.count(Order.id).label("total_orders"),
                func.sum(
                    case((Order.local_status == LocalStatus.in_progress.value, 1), else_=0)
                ).label("in_progress"),
                func.sum(
                    case(
                        (Order.local_status == LocalStatus.pending_payment.value, 1),
                        else_=0,
                    )
                ).label("pending_payment"),
                func.sum(
                    case((Order.local_status == LocalStatus.paid.value, 1), else_=0)
                ).label("paid"),
            ).one()

            recent_orders = (
                db.query(Order)
                .order_by(Order.placed_at.desc(), Order.id.desc())
                .limit(RECENT_ORDERS_LIMIT)
                .all()
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data={
                    "total_orders": order_stats.total_orders or 0,
                    "total_customers": db.query(func.count(Customer.id)).scalar(),
                    "total_buyers": db.query(func.count(Buyer.id)).scalar(),
                    "orders_in_progress": order_stats.in_progress or 0,
                    "orders_pending_payment": order_stats.pending_payment or 0,
                    "orders_paid": order_stats.paid or 0,
                    "recent_orders": [
                        order.to_model().model_dump() for order in recent_orders
                    ],
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching dashboard data: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to fetch dashboard data",
            )
