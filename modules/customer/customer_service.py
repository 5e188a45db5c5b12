import http
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# models
from models import Customer, Order

# schema
from schema.base import GenericResponseModel
from .customer_schema import CustomerInsertModel, CustomerResponseModel

# utils
from utils.phone import combine_with_phone_code, normalize_and_split_phone

DEFAULT_PHONE_CODE = "+62"


class CustomerService:
    """Counter customers, identified by their phone number."""

    @staticmethod
    def _order_count(db, customer_id: int) -> int:
        return (
            db.query(func.count(Order.id))
            .filter(Order.customer_id == customer_id)
            .scalar()
        )

    @staticmethod
    def _to_response(customer: Customer, order_count: int) -> dict:
        return CustomerResponseModel(
            **customer.to_model().model_dump(), order_count=order_count
        ).model_dump()

    @staticmethod
    def _normalized_phone(customer_data: CustomerInsertModel):
        phone = combine_with_phone_code(
            customer_data.phone, customer_data.phone_code or DEFAULT_PHONE_CODE
        )
        return normalize_and_split_phone(phone, "ID")

    @staticmethod
    def _phone_taken(db, phone: str, exclude_id: int = None) -> bool:
        query = db.query(Customer.id).filter(Customer.phone == phone)
        if exclude_id is not None:
            query = query.filter(Customer.id != exclude_id)
        return query.first() is not None

    @staticmethod
    def list_customers() -> GenericResponseModel:
        db = get_db_session()
        try:
            rows = (
                db.query(Customer, func.count(Order.id))
                .outerjoin(Order, Order.customer_id == Customer.id)
                .group_by(Customer.id)
                .order_by(Customer.created_at.desc(), Customer.id.desc())
                .all()
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Customers fetched successfully",
                data=[
                    CustomerService._to_response(customer, order_count)
                    for customer, order_count in rows
                ],
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching customers: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to fetch customers",
            )

    @staticmethod
    def create_customer(customer_data: CustomerInsertModel) -> GenericResponseModel:
        db = get_db_session()
        try:
            parts = CustomerService._normalized_phone(customer_data)
            if parts is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Invalid phone number",
                )

            if CustomerService._phone_taken(db, parts.e164):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.CONFLICT,
                    message="Customer with this phone number already exists",
                )

            customer = Customer.create_db_entity(
                {
                    "name": customer_data.name,
                    "phone": parts.e164,
                    "phone_code": parts.phone_code,
                    "shopee_name": customer_data.shopee_name,
                }
            )
            db.add(customer)
            db.flush()

            logger.info(
                extra=context_user_data.get(),
                msg=f"Created customer {customer.id}",
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.CREATED,
                status=True,
                message="Customer created successfully",
                data=CustomerService._to_response(customer, 0),
            )

        except IntegrityError:
            db.rollback()
            return GenericResponseModel(
                status_code=http.HTTPStatus.CONFLICT,
                message="Customer with this phone number already exists",
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error creating customer: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to create customer",
            )

    @staticmethod
    def get_customer(customer_id: int) -> GenericResponseModel:
        db = get_db_session()
        try:
            customer = Customer.get_by_id(customer_id)
            if customer is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Customer not found",
                )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=CustomerService._to_response(
                    customer, CustomerService._order_count(db, customer.id)
                ),
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching customer {customer_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to fetch customer",
            )

    @staticmethod
    def update_customer(
        customer_id: int, customer_data: CustomerInsertModel
    ) -> GenericResponseModel:
        db = get_db_session()
        try:
            customer = Customer.get_by_id(customer_id)
            if customer is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Customer not found",
                )

            parts = CustomerService._normalized_phone(customer_data)
            if parts is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.BAD_REQUEST,
                    message="Invalid phone number",
                )

            if CustomerService._phone_taken(db, parts.e164, exclude_id=customer.id):
                return GenericResponseModel(
                    status_code=http.HTTPStatus.CONFLICT,
                    message="Another customer already uses this phone",
                )

            customer.name = customer_data.name
            customer.phone = parts.e164
            customer.phone_code = parts.phone_code
            customer.shopee_name = customer_data.shopee_name
            db.flush()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Customer updated successfully",
                data=CustomerService._to_response(
                    customer, CustomerService._order_count(db, customer.id)
                ),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error updating customer {customer_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to update customer",
            )

    @staticmethod
    def delete_customer(customer_id: int) -> GenericResponseModel:
        db = get_db_session()
        try:
            customer = Customer.get_by_id(customer_id)
            if customer is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Customer not found",
                )

            if CustomerService._order_count(db, customer.id) > 0:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.CONFLICT,
                    message="Cannot delete customer with existing orders",
                )

            db.delete(customer)
            db.flush()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Customer deleted successfully",
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error deleting customer {customer_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to delete customer",
            )
