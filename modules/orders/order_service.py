import http
import math

from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# models
from models import Buyer, BuyerSRN, Customer, Order, PackageDetail
from models.order import DeliveryStatus, LocalStatus

# schema
from schema.base import GenericResponseModel, PaginationModel
from .order_schema import OrderFilters, OrderInsertModel, OrderUpdateModel

# fees
from modules.fees.fee_calculator import FeeSchedule, calculate_fee

MAX_PAGE_SIZE = 100

LOCAL_STATUSES = {status.value for status in LocalStatus}
DELIVERY_STATUSES = {status.value for status in DeliveryStatus}

# request field -> PackageDetail column
PACKAGE_FIELDS = {
    "weight_grams": "weight_grams",
    "length_cm": "length_cm",
    "width_cm": "width_cm",
    "height_cm": "height_cm",
    "total_value": "total_value",
    "package_description": "description",
    "service": "service",
    "currency": "currency",
    "sku": "sku",
    "hs_code": "hs_code",
    "country_of_origin": "country_of_origin",
}

ORDER_FIELDS = (
    "notes",
    "local_status",
    "delivery_status",
    "payment_method",
    "external_ref",
    "label_id",
    "tracking_link",
    "currency",
    "srn_id",
)


class OrderService:

    @staticmethod
    def list_orders(filters: OrderFilters) -> GenericResponseModel:
        """
        Orders newest first.

        `status` matches either track: a local status filters local_status, a
        delivery status filters delivery_status, anything else is ignored.
        """
        db = get_db_session()
        try:
            page = max(1, filters.page)
            page_size = min(MAX_PAGE_SIZE, max(1, filters.page_size))

            query = db.query(Order)
            if filters.status in LOCAL_STATUSES:
                query = query.filter(Order.local_status == filters.status)
            elif filters.status in DELIVERY_STATUSES:
                query = query.filter(Order.delivery_status == filters.status)

            total = query.count()
            orders = (
                query.order_by(Order.placed_at.desc(), Order.id.desc())
                .offset((page - 1) * page_size)
                .limit(page_size)
                .all()
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data={
                    "orders": [order.to_model().model_dump() for order in orders],
                    "pagination": PaginationModel(
                        page=page,
                        page_size=page_size,
                        total=total,
                        total_pages=math.ceil(total / page_size),
                    ).model_dump(),
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching orders: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to fetch orders",
            )

    @staticmethod
    def create_order(
        order_data: OrderInsertModel, fee_schedule: FeeSchedule
    ) -> GenericResponseModel:
        db = get_db_session()
        try:
            customer = Customer.get_by_id(order_data.customer_id)
            if customer is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Customer not found",
                )

            buyer = Buyer.get_by_id(order_data.buyer_id)
            if buyer is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Buyer not found",
                )

            if order_data.srn_id is not None and not BuyerSRN.get_by_number(
                order_data.srn_id
            ):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Unknown sale record number",
                )

            currency = order_data.currency or "USD"

            # package first, the order points at it
            package = PackageDetail.create_db_entity(
                {
                    "weight_grams": order_data.weight_grams,
                    "length_cm": order_data.length_cm,
                    "width_cm": order_data.width_cm,
                    "height_cm": order_data.height_cm,
                    "total_value": order_data.total_value,
                    "description": order_data.package_description or None,
                    "service": order_data.service,
                    "currency": currency,
                    "sku": order_data.sku or None,
                    "hs_code": order_data.hs_code or None,
                    "country_of_origin": order_data.country_of_origin,
                }
            )
            db.add(package)
            db.flush()

            order = Order.create_db_entity(
                {
                    "customer_id": customer.id,
                    "buyer_id": buyer.id,
                    "package_id": package.id,
                    "srn_id": order_data.srn_id,
                    "notes": order_data.notes or None,
                    "quoted_amount_minor": order_data.quoted_amount_minor,
                    "shipping_price_minor": order_data.shipping_price_minor,
                    "fee_minor": calculate_fee(
                        order_data.weight_grams or 0, buyer.country, fee_schedule
                    ),
                    "currency": currency,
                    "pricing_source": order_data.pricing_source or None,
                    "payment_method": order_data.payment_method or "qris",
                    "sale_channel": order_data.sale_channel or None,
                    "external_ref": order_data.external_ref or None,
                }
            )
            db.add(order)
            db.flush()
            db.refresh(order)

            logger.info(
                extra=context_user_data.get(),
                msg=f"Created order {order.id} for customer {customer.id}",
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.CREATED,
                status=True,
                message="Order created successfully",
                data=order.to_model().model_dump(),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error creating order: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to create order",
            )

    @staticmethod
    def get_order(order_id: int) -> GenericResponseModel:
        try:
            order = Order.get_by_id(order_id)
            if order is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Order not found",
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=order.to_model().model_dump(),
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching order {order_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to fetch order",
            )

    @staticmethod
    def update_order(
        order_id: int, order_data: OrderUpdateModel, fee_schedule: FeeSchedule
    ) -> GenericResponseModel:
        db = get_db_session()
        try:
            order = Order.get_by_id(order_id)
            if order is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Order not found",
                )

            changes = order_data.model_dump(exclude_unset=True)

            if changes.get("srn_id") is not None and not BuyerSRN.get_by_number(
                changes["srn_id"]
            ):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Unknown sale record number",
                )

            package = order.package
            for field, column in PACKAGE_FIELDS.items():
                if field not in changes:
                    continue
                value = changes[field]
                # service and currency cannot be blanked
                if field in ("service", "currency") and not value:
                    continue
                setattr(package, column, value if value != "" else None)

            for field in ORDER_FIELDS:
                if field not in changes:
                    continue
                value = changes[field]
                if field in ("local_status", "delivery_status", "payment_method"):
                    if not value:
                        continue
                    value = getattr(value, "value", value)
                setattr(order, field, value)

            if "weight_grams" in changes:
                order.fee_minor = calculate_fee(
                    package.weight_grams or 0, order.buyer.country, fee_schedule
                )

            db.flush()
            db.refresh(order)

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Order updated successfully",
                data=order.to_model().model_dump(),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error updating order {order_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to update order",
            )

    @staticmethod
    def delete_order(order_id: int) -> GenericResponseModel:
        """Delete an order together with its package."""
        db = get_db_session()
        try:
            order = Order.get_by_id(order_id)
            if order is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Order not found",
                )

            package = order.package
            db.delete(order)
            db.flush()
            if package is not None:
                db.delete(package)
                db.flush()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Order deleted successfully",
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error deleting order {order_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to delete order",
            )
