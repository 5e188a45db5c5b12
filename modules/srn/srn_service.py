import http
import re

from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# models
from models import Buyer, BuyerSRN

# schema
from schema.base import GenericResponseModel

KRS_PATTERN = re.compile(r"^KRS", re.IGNORECASE)


class SRNService:

    @staticmethod
    def check_srn(srn: str, exclude_buyer_id: int = None) -> GenericResponseModel:
        """Whether a sale record number is taken, optionally ignoring one buyer."""
        srn = (srn or "").strip()
        if not srn:
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="srn is required",
            )
        if not srn.isdigit():
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="SRN must be numeric",
            )

        number = int(srn)
        if number <= 0:
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="Invalid SRN number",
            )

        try:
            found = BuyerSRN.get_by_number(number)
            exists = found is not None and (
                exclude_buyer_id is None or found.buyer_id != exclude_buyer_id
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data={"exists": exists, "srn": number},
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error checking SRN {number}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to check SRN",
            )

    @staticmethod
    def lookup(key: str) -> GenericResponseModel:
        """Find an SRN by its number or by the KRS shipment id it was shipped under."""
        key = (key or "").strip()
        is_krs = bool(KRS_PATTERN.match(key))

        if not is_krs and not key.isdigit():
            return GenericResponseModel(
                status_code=http.HTTPStatus.BAD_REQUEST,
                message="Invalid key. Use numeric SRN or a KRS… id.",
            )

        try:
            if is_krs:
                srn = BuyerSRN.get_by_shipment_id(key)
            else:
                srn = BuyerSRN.get_by_number(int(key))

            if srn is None:
                return GenericResponseModel(
                    status_code=http.HTTPStatus.NOT_FOUND,
                    message="Not found",
                )

            db = get_db_session()
            buyer = db.query(Buyer).filter(Buyer.id == srn.buyer_id).first()

            data = srn.to_dict()
            data["buyer"] = (
                buyer.to_model().model_dump(exclude={"srns"}) if buyer else None
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                data=data,
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error looking up SRN {key}: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed",
            )
