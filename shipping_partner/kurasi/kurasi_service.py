import http
from datetime import datetime, timedelta
from typing import Optional, Tuple

import pytz
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from context_manager.context import context_user_data, get_db_session

from logger import logger

# database
from database import time_now

# models
from models import Buyer, BuyerSRN, KurasiShipment, Order
from models.order import DeliveryStatus

# data
from data.region_mapping import normalize_region

# quote lines
from modules.shipping_quote.quote_normalizer import cheapest, normalize

# schema
from schema.base import GenericResponseModel

# utils
from utils.country import CountryTable
from utils.string import carrier_text

from . import kurasi_config as config
from .kurasi import Kurasi
from .kurasi_schema import (
    CarrierCallResult,
    KurasiBuyerInput,
    KurasiQuoteRequest,
    KurasiShipmentInput,
    OrderShipmentRequest,
    ProxyResponse,
    QuoteRequest,
    ShipmentListQuery,
    SyncBuyersRequest,
    TempShipmentQuery,
    TempShipmentsRequest,
)

DELETE_REMARK = "Deleted from PoS system"
NOT_LOGGED_IN = "Not logged in to Kurasi"


def _failure(result: CarrierCallResult) -> ProxyResponse:
    return ProxyResponse(
        status_code=result.http_status,
        status=result.status,
        error_message=result.message,
    )


def _fail(status_code: int, message: str, status: str = "FAIL") -> ProxyResponse:
    return ProxyResponse(status_code=status_code, status=status, error_message=message)


def _first_tracking_slug(shipment: dict) -> Optional[str]:
    tracking_list = shipment.get("trackingList") or []
    if tracking_list and isinstance(tracking_list[0], dict):
        return carrier_text(tracking_list[0].get("slug")) or None
    return None


class KurasiService:
    """Carrier proxy: forwards to Kurasi and keeps orders and SRNs in step."""

    @staticmethod
    def resolve_token(cookie_token: Optional[str]) -> Optional[str]:
        return cookie_token or config.KURASI_TOKEN or None

    # ============================================
    # SESSION
    # ============================================

    @staticmethod
    def login(username: Optional[str], password: Optional[str]) -> CarrierCallResult:
        if not username or not password:
            return CarrierCallResult(
                status="FAIL",
                http_status=http.HTTPStatus.BAD_REQUEST,
                message="username and password are required",
            )
        result = Kurasi.login(username, password)
        logger.info(
            extra=context_user_data.get(),
            msg=f"Kurasi login for {username}: {result.status}",
        )
        return result

    @staticmethod
    def session_info(token: Optional[str], label: Optional[str], verify: bool) -> ProxyResponse:
        token = token or ""
        logged_in = bool(token)
        if verify and token:
            logged_in = Kurasi.verify_token(token).ok

        return ProxyResponse(
            status_code=http.HTTPStatus.OK,
            payload={
                "loggedIn": logged_in,
                "label": label or None,
                "tokenPreview": f"{token[:6]}…{token[-4:]}" if token else None,
                "tokenLength": len(token),
            },
        )

    @staticmethod
    def passthrough(result: CarrierCallResult) -> ProxyResponse:
        if not result.ok:
            return _failure(result)
        return ProxyResponse(status_code=http.HTTPStatus.OK, payload={"data": result.data})

    # ============================================
    # QUOTE
    # ============================================

    @staticmethod
    def quote(body: KurasiQuoteRequest, token: Optional[str]) -> ProxyResponse:
        """All four catalog services, the available ones by price and the cheapest."""
        quote_request = QuoteRequest(
            country=str(body.country or ""),
            actual_weight=str(body.actualWeight or ""),
            actual_length=str(body.actualLength or ""),
            actual_width=str(body.actualWidth or ""),
            actual_height=str(body.actualHeight or ""),
            currency_type=str(body.currencyType or "IDR"),
            supported_country_code=str(body.supportedCountryCode or "ID"),
        )

        result = Kurasi.fetch_carrier_quote(quote_request, auth_token=token)
        if not result.ok:
            return _fail(result.http_status, result.message, status=result.status)

        raw = result.quote
        catalog = normalize(raw)
        best = cheapest(catalog)

        return ProxyResponse(
            status_code=http.HTTPStatus.OK,
            payload={
                "meta": {
                    "currencyType": raw.currencyType,
                    "currencySymbol": raw.currencySymbol,
                    "chargeableWeight": raw.chargeableWeight,
                    "volumetricWeight": raw.volumetricWeight,
                },
                "catalog": [line.to_dict() for line in catalog],
                "available": [line.to_dict() for line in catalog if line.available],
                "cheapest": best.to_dict() if best else None,
                "raw": raw.model_dump(),
            },
        )

    # ============================================
    # SHIPMENTS
    # ============================================

    @staticmethod
    def _load_order(request: OrderShipmentRequest, token: Optional[str], need_krs: str = None):
        """Returns (order, error response)."""
        if not request.orderId:
            return None, _fail(http.HTTPStatus.BAD_REQUEST, "Order ID is required")

        order = Order.get_by_id(request.orderId)
        if order is None:
            return None, _fail(http.HTTPStatus.NOT_FOUND, "Order not found")

        if need_krs and not order.krs_tracking_number:
            return None, _fail(http.HTTPStatus.BAD_REQUEST, need_krs)

        if not token:
            return None, _fail(http.HTTPStatus.UNAUTHORIZED, NOT_LOGGED_IN)

        return order, None

    @staticmethod
    def create_shipment(request: OrderShipmentRequest, token: Optional[str]) -> ProxyResponse:
        db = get_db_session()
        try:
            order, error = KurasiService._load_order(request, token)
            if error:
                return error

            # marked before the call, a failed submission stays visible
            order.delivery_status = DeliveryStatus.submitted_to_Kurasi.value
            db.flush()

            result = Kurasi.create_shipment(Kurasi.build_shipment_payload(order), token)
            if not result.ok:
                return _failure(result)

            krs_number = (result.data or {}).get("shipmentId")
            if not krs_number:
                logger.error(
                    extra=context_user_data.get(),
                    msg=f"No KRS number for order {order.id}: {result.content}",
                )
                return _fail(
                    http.HTTPStatus.INTERNAL_SERVER_ERROR,
                    "No KRS number received from Kurasi",
                    status="ERROR",
                )

            order.krs_tracking_number = krs_number
            if order.srn_id:
                srn = BuyerSRN.get_by_number(order.srn_id)
                if srn is not None:
                    srn.kurasi_shipment_id = krs_number
            db.flush()

            logger.info(
                extra=context_user_data.get(),
                msg=f"Order {order.id} submitted to Kurasi as {krs_number}",
            )

            return ProxyResponse(
                status_code=http.HTTPStatus.OK,
                payload={"krsNumber": krs_number, "shipmentData": result.content},
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error creating Kurasi shipment: {e}",
            )
            return _fail(
                http.HTTPStatus.INTERNAL_SERVER_ERROR,
                "Failed to create shipment",
                status="ERROR",
            )

    @staticmethod
    def _client_code(token: str) -> Optional[str]:
        if config.KURASI_CLIENT_CODE:
            return config.KURASI_CLIENT_CODE
        me = Kurasi.me(token)
        if me.ok and isinstance(me.data, dict):
            return me.data.get("clientCode") or None
        return None

    @staticmethod
    def update_shipment(request: OrderShipmentRequest, token: Optional[str]) -> ProxyResponse:
        order, error = KurasiService._load_order(
            request, token, need_krs="No KRS tracking number found for this order"
        )
        if error:
            return error

        client_code = KurasiService._client_code(token)
        if not client_code:
            return _fail(http.HTTPStatus.BAD_REQUEST, "No clientCode found")

        result = Kurasi.update_shipment(
            Kurasi.build_update_payload(order, client_code), token
        )
        if not result.ok:
            return _failure(result)

        return ProxyResponse(
            status_code=http.HTTPStatus.OK,
            payload={
                "message": "Shipment updated successfully in Kurasi",
                "krsNumber": order.krs_tracking_number,
                "shipmentData": result.content,
            },
        )

    @staticmethod
    def delete_shipment(request: OrderShipmentRequest, token: Optional[str]) -> ProxyResponse:
        db = get_db_session()
        try:
            order, error = KurasiService._load_order(
                request, token, need_krs="No KRS tracking number found for this order"
            )
            if error:
                return error

            krs_number = order.krs_tracking_number
            result = Kurasi.delete_shipment(krs_number, DELETE_REMARK, token)
            if not result.ok:
                return _failure(result)

            order.krs_tracking_number = None
            order.delivery_status = DeliveryStatus.submitted_to_Kurasi.value
            if order.srn_id:
                srn = BuyerSRN.get_by_number(order.srn_id)
                if srn is not None:
                    srn.kurasi_shipment_id = None
            db.flush()

            return ProxyResponse(
                status_code=http.HTTPStatus.OK,
                payload={
                    "message": "Shipment deleted successfully from Kurasi",
                    "krsNumber": krs_number,
                },
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error deleting Kurasi shipment: {e}",
            )
            return _fail(
                http.HTTPStatus.INTERNAL_SERVER_ERROR,
                "Failed to delete shipment",
                status="ERROR",
            )

    @staticmethod
    def create_label(request: OrderShipmentRequest, token: Optional[str]) -> ProxyResponse:
        """
        Ask Kurasi for the shipping label.

        Kurasi answers either with the PDF itself, which is passed through, or
        with JSON label info whose tracking link and label id are stored on
        the order. Both confirm the label.
        """
        db = get_db_session()
        try:
            order, error = KurasiService._load_order(
                request,
                token,
                need_krs="No KRS tracking number found. Please create a shipment first.",
            )
            if error:
                return error

            result = Kurasi.create_label(order.krs_tracking_number, token)
            if not result.ok:
                return _failure(result)

            if isinstance(result.content, bytes):
                order.delivery_status = DeliveryStatus.label_confirmed.value
                db.flush()
                return ProxyResponse(
                    status_code=http.HTTPStatus.OK,
                    pdf=result.content,
                    filename=f"label-{order.krs_tracking_number}.pdf",
                )

            label_info = result.data
            if not label_info:
                return _fail(
                    http.HTTPStatus.INTERNAL_SERVER_ERROR,
                    "No label information received from Kurasi",
                    status="ERROR",
                )

            tracking_link = None
            label_id = None
            if isinstance(label_info, dict):
                tracking_link = label_info.get("trackingLink") or None
                label_id = label_info.get("labelId") or None

            order.delivery_status = DeliveryStatus.label_confirmed.value
            order.tracking_link = tracking_link
            order.label_id = label_id
            db.flush()

            return ProxyResponse(
                status_code=http.HTTPStatus.OK,
                payload={
                    "labelInfo": label_info,
                    "trackingLink": tracking_link,
                    "labelId": label_id,
                },
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error creating Kurasi label: {e}",
            )
            return _fail(
                http.HTTPStatus.INTERNAL_SERVER_ERROR,
                "Failed to create label",
                status="ERROR",
            )

    @staticmethod
    def fetch_shipment_data(request: OrderShipmentRequest, token: Optional[str]) -> ProxyResponse:
        db = get_db_session()
        try:
            order, error = KurasiService._load_order(
                request, token, need_krs="Order has no KRS tracking number"
            )
            if error:
                return error

            result = Kurasi.shipment_other_data(order.krs_tracking_number, token)
            if not result.ok:
                return _failure(result)

            shipment = result.data
            if not isinstance(shipment, dict) or not shipment:
                return _fail(http.HTTPStatus.NOT_FOUND, "No shipment data returned")

            tracking_number = carrier_text(shipment.get("trackingNumber"))
            updated = {"order": False, "package": False, "srn": False}

            if tracking_number:
                order.tracking_link = carrier_text(shipment.get("trackingLink")) or None
                updated["order"] = True

            chargeable = carrier_text(shipment.get("chargeableWeight"))
            if chargeable and order.package is not None:
                try:
                    order.package.weight_grams = int(float(chargeable))
                    updated["package"] = True
                except ValueError:
                    logger.info(
                        extra=context_user_data.get(),
                        msg=f"Ignoring chargeableWeight {chargeable!r} for order {order.id}",
                    )

            if order.srn_id and tracking_number:
                srn = BuyerSRN.get_by_number(order.srn_id)
                if srn is not None:
                    srn.tracking_number = tracking_number
                    srn.tracking_slug = _first_tracking_slug(shipment)
                    updated["srn"] = True

            db.flush()

            return ProxyResponse(
                status_code=http.HTTPStatus.OK,
                payload={"shipmentData": shipment, "updated": updated},
            )

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching Kurasi shipment data: {e}",
            )
            return _fail(
                http.HTTPStatus.INTERNAL_SERVER_ERROR,
                "Failed to fetch shipment data",
                status="ERROR",
            )

    @staticmethod
    def validate_hs_code(hs_code: str, token: Optional[str]) -> ProxyResponse:
        hs_code = (hs_code or "").strip()
        if not hs_code:
            return _fail(http.HTTPStatus.BAD_REQUEST, "HS Code is required")
        if not token:
            return _fail(http.HTTPStatus.UNAUTHORIZED, NOT_LOGGED_IN)

        result = Kurasi.validate_hs_code(hs_code, token)
        if result.status == "FAIL":
            body = result.content if isinstance(result.content, dict) else {}
            return ProxyResponse(
                status_code=http.HTTPStatus.BAD_REQUEST,
                status="FAIL",
                error_message=body.get("returnMessage") or "HS Code validation failed",
                payload={
                    "returnCode": body.get("returnCode"),
                    "returnMessage": body.get("returnMessage"),
                },
            )
        if not result.ok:
            return _failure(result)

        return ProxyResponse(status_code=http.HTTPStatus.OK, payload={"data": result.data})

    # ============================================
    # BUYER SYNC
    # ============================================

    @staticmethod
    def sync_date_range(request: SyncBuyersRequest, today: datetime = None):
        today = today or datetime.now(pytz.timezone(config.SYNC_TIMEZONE))
        if request.fullSync:
            default_start = config.SYNC_FULL_START_DATE
        else:
            default_start = (today - timedelta(days=config.SYNC_DEFAULT_DAYS)).strftime(
                "%Y-%m-%d"
            )
        return (
            request.startDate or default_start,
            request.endDate or today.strftime("%Y-%m-%d"),
        )

    @staticmethod
    def _upsert_synced_buyer(db, buyer_input: KurasiBuyerInput) -> Tuple[bool, BuyerSRN]:
        """Returns (created, srn) for one listing row."""
        fields = {
            "full_name": buyer_input.full_name,
            "address1": buyer_input.address1,
            "address2": buyer_input.address2,
            "city": buyer_input.city,
            "state": normalize_region(buyer_input.country, buyer_input.state),
            "zip": buyer_input.zip,
        }

        buyer = Buyer.get_by_country_phone(buyer_input.country, buyer_input.phone)
        created = buyer is None
        if created:
            buyer = Buyer.create_db_entity(
                {
                    **fields,
                    "country": buyer_input.country,
                    "phone": buyer_input.phone,
                    "email": buyer_input.email,
                }
            )
            db.add(buyer)
        else:
            for key, value in fields.items():
                setattr(buyer, key, value)
            if buyer_input.email:
                buyer.email = buyer_input.email
        db.flush()

        srn = BuyerSRN.get_by_number(buyer_input.sale_record_number)
        if srn is None:
            srn = BuyerSRN(
                sale_record_number=buyer_input.sale_record_number, buyer_id=buyer.id
            )
            db.add(srn)
        else:
            srn.buyer_id = buyer.id
        db.flush()

        return created, srn

    @staticmethod
    def _copy_shipment_ids(srn: BuyerSRN, row: dict):
        shipment_id = carrier_text(row.get("kurasiShipmentId"))
        if shipment_id and srn.kurasi_shipment_id != shipment_id:
            holder = BuyerSRN.get_by_shipment_id(shipment_id)
            if holder is None:
                srn.kurasi_shipment_id = shipment_id

        tracking_number = carrier_text(row.get("trackingNumber"))
        if tracking_number:
            srn.tracking_number = tracking_number
            srn.tracking_slug = _first_tracking_slug(row) or srn.tracking_slug

    @staticmethod
    def _upsert_mirrored_shipment(db, shipment_input: KurasiShipmentInput) -> bool:
        """Refresh the local copy of a carrier shipment; True when it is new."""
        fields = shipment_input.model_dump()
        shipment = KurasiShipment.get_by_shipment_id(shipment_input.kurasi_shipment_id)
        created = shipment is None
        if created:
            shipment = KurasiShipment(**fields)
            db.add(shipment)
        else:
            for key, value in fields.items():
                setattr(shipment, key, value)
        # local_fee_minor is left to the fee backfill
        shipment.synced_at = time_now()
        db.flush()
        return created

    @staticmethod
    def sync_buyers(
        request: SyncBuyersRequest, token: Optional[str], country_table: CountryTable
    ) -> ProxyResponse:
        """
        Page through the Kurasi shipment listing, keep a local copy of every
        shipment and upsert a buyer per row.

        Rows without a numeric SRN, a known country or a phone are skipped for
        the buyer book; rows without a shipment id are not copied.
        """
        if not token:
            return _fail(http.HTTPStatus.UNAUTHORIZED, NOT_LOGGED_IN)

        client_code = KurasiService._client_code(token)
        if not client_code:
            return _fail(http.HTTPStatus.BAD_REQUEST, "No clientCode found")

        start_date, end_date = KurasiService.sync_date_range(request)

        rows = []
        index = 0
        while True:
            page = Kurasi.list_shipments(
                ShipmentListQuery(
                    startDate=start_date,
                    endDate=end_date,
                    clientCode=client_code,
                    index=index,
                    limit=config.SYNC_PAGE_SIZE,
                ),
                token,
            )
            if not page.ok:
                if not rows:
                    return _failure(page)
                logger.error(
                    extra=context_user_data.get(),
                    msg=f"Shipment listing stopped at index {index}: {page.message}",
                )
                break

            batch = page.data["rows"]
            rows.extend(batch)
            if len(batch) < config.SYNC_PAGE_SIZE:
                break
            index += config.SYNC_PAGE_SIZE

        db = get_db_session()
        created = updated = skipped = 0
        mirrored = {"created": 0, "updated": 0}
        try:
            for row in rows:
                shipment_input = Kurasi.to_shipment_input(row, country_table)
                if shipment_input is not None:
                    if KurasiService._upsert_mirrored_shipment(db, shipment_input):
                        mirrored["created"] += 1
                    else:
                        mirrored["updated"] += 1

                buyer_input = Kurasi.to_buyer_input(row, country_table)
                if buyer_input is None:
                    skipped += 1
                    continue

                was_created, srn = KurasiService._upsert_synced_buyer(db, buyer_input)
                KurasiService._copy_shipment_ids(srn, row)
                db.flush()

                if was_created:
                    created += 1
                else:
                    updated += 1

        except SQLAlchemyError as e:
            db.rollback()
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error syncing Kurasi buyers: {e}",
            )
            return _fail(
                http.HTTPStatus.INTERNAL_SERVER_ERROR,
                "Failed to sync buyers",
                status="ERROR",
            )

        logger.info(
            extra=context_user_data.get(),
            msg=f"Synced {len(rows)} Kurasi rows: {created} created, "
            f"{updated} updated, {skipped} skipped, "
            f"{mirrored['created']} new shipments",
        )

        return ProxyResponse(
            status_code=http.HTTPStatus.OK,
            payload={
                "synced": len(rows),
                "created": created,
                "updated": updated,
                "skipped": skipped,
                "shipments": mirrored,
                "dateRange": {"startDate": start_date, "endDate": end_date},
            },
        )

    # ============================================
    # SHIPMENT COPIES
    # ============================================

    @staticmethod
    def temp_shipments(request: TempShipmentsRequest, token: Optional[str]) -> ProxyResponse:
        """Draft shipments saved in Kurasi, the last 30 days unless a range is given."""
        if not token:
            return _fail(http.HTTPStatus.UNAUTHORIZED, NOT_LOGGED_IN)

        client_code = KurasiService._client_code(token)
        if not client_code:
            return _fail(http.HTTPStatus.BAD_REQUEST, "No clientCode found")

        today = datetime.now(pytz.timezone(config.SYNC_TIMEZONE))
        start_date = request.startDate or (
            today - timedelta(days=config.TEMP_SHIPMENTS_DEFAULT_DAYS)
        ).strftime("%Y-%m-%d")
        end_date = request.endDate or today.strftime("%Y-%m-%d")

        result = Kurasi.list_temp_shipments(
            TempShipmentQuery(startDate=start_date, endDate=end_date, clientCode=client_code),
            token,
        )
        if not result.ok:
            return _failure(result)

        return ProxyResponse(
            status_code=http.HTTPStatus.OK,
            payload={
                "data": result.data["rows"],
                "total": result.data["total"],
                "dateRange": {"startDate": start_date, "endDate": end_date},
            },
        )

    @staticmethod
    def shipment_stats() -> GenericResponseModel:
        db = get_db_session()
        try:
            total = db.query(func.count(KurasiShipment.id)).scalar()
            fees, local_fees = db.query(
                func.coalesce(func.sum(KurasiShipment.shipping_fee_minor), 0),
                func.coalesce(func.sum(KurasiShipment.local_fee_minor), 0),
            ).one()

            country_count = func.count(KurasiShipment.id)
            by_country = (
                db.query(KurasiShipment.buyer_country, country_count)
                .group_by(KurasiShipment.buyer_country)
                .order_by(country_count.desc(), KurasiShipment.buyer_country)
                .all()
            )

            service_count = func.count(KurasiShipment.id)
            by_service = (
                db.query(KurasiShipment.service_name, service_count)
                .group_by(KurasiShipment.service_name)
                .order_by(service_count.desc(), KurasiShipment.service_name)
                .all()
            )

            recent = (
                db.query(KurasiShipment)
                .order_by(KurasiShipment.synced_at.desc(), KurasiShipment.id.desc())
                .limit(config.SHIPMENT_STATS_RECENT)
                .all()
            )

            return GenericResponseModel(
                status_code=http.HTTPStatus.OK,
                status=True,
                message="Shipment stats fetched successfully",
                data={
                    "total": total,
                    "total_fees": fees,
                    "total_local_fees": local_fees,
                    "by_country": [
                        {"country": country, "count": count} for country, count in by_country
                    ],
                    "by_service": [
                        {"service": service or "Unknown", "count": count}
                        for service, count in by_service
                    ],
                    "recent": [shipment.to_dict() for shipment in recent],
                },
            )

        except SQLAlchemyError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Error fetching Kurasi shipment stats: {e}",
            )
            return GenericResponseModel(
                status_code=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Failed to fetch shipment stats",
            )
