import http
import math
from typing import Dict, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# models
from models import Buyer, BuyerSRN, Order

# schema
from schema.base import GenericResponseModel
from .buyer_schema import BuyerInsertModel, BuyerResponseModel, BuyerUpdateModel

# data
from data.region_mapping import is_region_required, normalize_region

# utils
from utils.country import CountryTable
from utils.phone import combine_with_phone_code, normalize_and_split_phone

MAX_PAGE_SIZE = 100


class BuyerService:
    """Recipients abroad, unique by country and phone."""

    @staticmethod
    def _order_counts(db, buyer_ids: List[int]) -> Dict[int, int]:
        if not buyer_ids:
            return {}
        rows = (
            db.query(Order.buyer_id, func.count(Order.id))
            .filter(Order.buyer_id.in_(buyer_ids))
            .group_by(Order.buyer_id)
            .all()
        )
        return dict(rows)

    @staticmethod
    def _to_response(buyer: Buyer, order_count: int) -> dict:
        return BuyerResponseModel(
            **buyer.to_model().model_dump(), order_count=order_count
        ).model_dump()

    @staticmethod
    def _validate_address(buyer_data, country_table: CountryTable):
        """Returns (fields, error response)."""
        iso2 = country_table.normalize_code(buyer_data.country)
        if not iso2:
            return None, GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="Invalid country code",
                data={"hint": "Use ISO-2 like 'ID','US','GB'."},
            )

        state = normalize_region(iso2, buyer_data.state)
        if is_region_required(iso2) and not state:
            return None, GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="State/province is required for this country",
            )

        phone_code = getattr(buyer_data, "phone_code", None)
        # a locally written number takes the destination's dialing code
        phone = combine_with_phone_code(
            buyer_data.phone, phone_code or country_table.calling_code_for(iso2)
        )
        parts = normalize_and_split_phone(phone, iso2)
        if parts is None:
            return None, GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="Invalid phone number",
            )

        return {
            "full_name": buyer_data.full_name,
            "address1": buyer_data.address1,
            "address2": buyer_data.address2 or "",
            "city": buyer_data.city,
            "state": state,
            "zip": buyer_data.zip,
            "country": iso2,
            "email": buyer_data.email or "",
            "phone": parts.e164,
        }, None

    @staticmethod
    def attach_srn(db, buyer: Buyer, sale_record_number: int) -> BuyerSRN:
        srn = BuyerSRN.get_by_number(sale_record_number)
        if srn is None:
            srn = BuyerSRN(sale_record_number=sale_record_number, buyer_id=buyer.id)
            db.add(srn)
        else:
            srn.buyer_id = buyer.id
        db.flush()
        return srn

    @staticmethod
    def list_buyers(page: int = 1, page_size: int = 25, q: str = "") -> GenericResponseModel:
        db = get_db_session()
        try:
            page = max(1, page)
            page_size = min(MAX_PAGE_SIZE, max(1, page_size))
            q = (q or "").strip()

            query = db.query(Buyer)
            if q:
                pattern = f"%{q}%"
                srn_filters = [
                    BuyerSRN.kurasi_shipment_id.ilike(pattern),
                    BuyerSRN.tracking_number.ilike(pattern),
                    BuyerSRN.tracking_slug.ilike(pattern),
                ]
                if q.isdigit():
                    srn_filters.append(BuyerSRN.sale_record_number == int(q))

                query = query.filter(
                    or_(
                        Buyer.full_name.ilike(pattern),
                        Buyer.city.ilike(pattern),
                        Buyer.country.ilike(pattern),
                        Buyer.phone.ilike(pattern),
                        Buyer.srns.any(or_(*srn_filters)),
                    )
                )

            total_filtered = query.count()
            buyers = (
                query.order_by(Buyer.full_name.asc(), Buyer.id.asc())
                .offset((page - 1) * page_size)
                .limit(page_size)
                .all()
            )
            order_counts = BuyerService._order_counts(db, [buyer.id for buyer in buyers])

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data={
                    "page": page,
                    "page_size": page_size,
                    "total_pages": max(1, math.ceil(total_filtered / page_size)),
                    "total_filtered": total_filtered,
                    "total_buyers": db.query(func.count(Buyer.id)).scalar(),
                    "total_srn": db.query(func.count(BuyerSRN.id)).scalar(),
                    "buyers": [
                        BuyerService._to_response(buyer, order_counts.get(buyer.id, 0))
                        for buyer in buyers
                    ],
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching buyers: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to fetch buyers",
            )

    @staticmethod
    def create_buyer(
        buyer_data: BuyerInsertModel, country_table: CountryTable
    ) -> GenericResponseModel:
        db = get_db_session()
        try:
            fields, error = BuyerService._validate_address(buyer_data, country_table)
            if error:
                return error

            buyer = Buyer.get_by_country_phone(fields["country"], fields["phone"])
            created = buyer is None
            if created:
                buyer = Buyer.create_db_entity(fields)
                db.add(buyer)
            else:
                for key, value in fields.items():
                    setattr(buyer, key, value)
            db.flush()

            if buyer_data.sale_record_number is not None:
                BuyerService.attach_srn(db, buyer, buyer_data.sale_record_number)
                db.refresh(buyer)

            logger.info(
                extra=context_user_data.get(),
                msg=f"{'Created' if created else 'Updated'} buyer {buyer.id}",
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.CREATED,
                status=True,
                message="Buyer saved successfully",
                data=BuyerService._to_response(
                    buyer, BuyerService._order_counts(db, [buyer.id]).get(buyer.id, 0)
                ),
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error creating buyer: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to create buyer",
            )

    @staticmethod
    def get_buyer(buyer_id: int, with_orders: bool = False) -> GenericResponseModel:
        db = get_db_session()
        try:
            buyer = Buyer.get_by_id(buyer_id)
            if buyer is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Buyer not found",
                )

            data = BuyerService._to_response(
                buyer, BuyerService._order_counts(db, [buyer.id]).get(buyer.id, 0)
            )

            if with_orders:
                orders = (
                    db.query(Order)
                    .filter(Order.buyer_id == buyer.id)
                    .order_by(Order.placed_at.desc())
                    .all()
                )
                data["orders"] = [order.to_model().model_dump() for order in orders]

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=data,
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching buyer {buyer_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to fetch buyer",
            )

    @staticmethod
    def update_buyer(
        buyer_id: int, buyer_data: BuyerUpdateModel, country_table: CountryTable
    ) -> GenericResponseModel:
        db = get_db_session()
        try:
            buyer = Buyer.get_by_id(buyer_id)
            if buyer is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Buyer not found",
                )

            fields, error = BuyerService._validate_address(buyer_data, country_table)
            if error:
                return error

            clash = Buyer.get_by_country_phone(fields["country"], fields["phone"])
            if clash is not None and clash.id != buyer.id:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.CONFLICT,
                    message="Another buyer already uses this country+phone.",
                    data={"fields": ["country", "phone"]},
                )

            for key, value in fields.items():
                setattr(buyer, key, value)
            db.flush()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Buyer updated successfully",
                data=BuyerService._to_response(
                    buyer, BuyerService._order_counts(db, [buyer.id]).get(buyer.id, 0)
                ),
            )

        except IntegrityError:
            db.rollback()
            return GenericResponseModel(
                status_code=http.HTTPStatus.CONFLICT,
                message="Another buyer already uses this country+phone.",
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error updating buyer {buyer_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to update buyer",
            )

    @staticmethod
    def delete_buyer(
        buyer_id: int, force: bool = False, merge_into: Optional[int] = None
    ) -> GenericResponseModel:
        """
        Delete a buyer.

        With merge_into, orders and SRNs move to the target buyer first. A
        buyer with orders is only deleted with force, which deletes the orders
        too.
        """
        db = get_db_session()
        try:
            buyer = Buyer.get_by_id(buyer_id)
            if buyer is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Buyer not found",
                )

            if merge_into is not None:
                if merge_into == buyer.id:
                    return GenericResponseModel(
                        status_code=http.HTTPStatus.BAD_REQUEST,
                        message="merge_into must be a different buyer id",
                    )
                target = Buyer.get_by_id(merge_into)
                if target is None:
                    return GenericResponseModel(
                        status_code=http.HTTPStatus.NOT_FOUND,
                        message="Target buyer not found",
                    )

                db.query(Order).filter(Order.buyer_id == buyer.id).update(
                    {Order.buyer_id: target.id}, synchronize_session=False
                )
                db.query(BuyerSRN).filter(BuyerSRN.buyer_id == buyer.id).update(
                    {BuyerSRN.buyer_id: target.id}, synchronize_session=False
                )
                db.expire(buyer)
                db.delete(buyer)
                db.flush()

                return GenericResponseModel(
                    status_code=http.HTTPStatus.OK,
                    status=True,
                    message="Buyer merged successfully",
                    data={"merged_into": target.id},
                )

            order_count = BuyerService._order_counts(db, [buyer.id]).get(buyer.id, 0)
            if order_count > 0 and not force:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.CONFLICT,
                    message="Cannot delete buyer with existing orders.",
                    data={
                        "hint": "Use force=true to also delete the orders, "
                        "or merge_into=<buyer id> to reassign them."
                    },
                )

            if order_count > 0:
                db.query(Order).filter(Order.buyer_id == buyer.id).delete(
                    synchronize_session=False
                )

            # orders of other buyers may still point at these SRNs
            srn_numbers = db.query(BuyerSRN.sale_record_number).filter(
                BuyerSRN.buyer_id == buyer.id
            )
            db.query(Order).filter(Order.srn_id.in_(srn_numbers)).update(
                {Order.srn_id: None}, synchronize_session=False
            )
            db.query(BuyerSRN).filter(BuyerSRN.buyer_id == buyer.id).delete(
                synchronize_session=False
            )
            db.expire(buyer)
            db.delete(buyer)
            db.flush()

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Buyer deleted successfully",
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error deleting buyer {buyer_id}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to delete buyer",
            )
