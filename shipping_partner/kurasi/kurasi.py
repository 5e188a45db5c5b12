import http
import re
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

import pytz
import requests
from pydantic import ValidationError

from context_manager.context import context_user_data

from logger import logger

# models
from models import Order

# data
from data.service_mapping import DEFAULT_HS_CODE, resolve_service_code

# utils
from utils.country import CountryTable
from utils.phone import build_e164_phone, normalize_and_split_phone
from utils.string import carrier_text, clean_email, digits_only

from . import kurasi_config as config
from .kurasi_schema import (
    CarrierCallResult,
    CarrierQuoteResult,
    KurasiBuyerInput,
    KurasiShipmentInput,
    QuoteRequest,
    RawQuoteResponse,
    ShipmentListQuery,
    TempShipmentQuery,
)

CARRIER_DATETIME_FORMATS = ("%Y/%m/%d %H:%M:%S", "%Y/%m/%d %H:%M", "%Y/%m/%d")


def _as_carrier_number(value) -> str:
    # the calculator wants "100", not "100.0"
    if value is None or value == "":
        return "0"
    if isinstance(value, float) and value.is_integer():
        value = int(value)
    return str(value)


def _carrier_int(value) -> Optional[int]:
    """Leading integer of "104,000" or "1200.5", None when there is none."""
    match = re.match(r"-?\d+", carrier_text(value).replace(",", ""))
    return int(match.group()) if match else None


def _carrier_datetime(value) -> Optional[datetime]:
    """Listing timestamps look like "2025/12/04 17:21:35", Jakarta local time."""
    text = carrier_text(value).replace("-", "/")
    if not text:
        return None
    for date_format in CARRIER_DATETIME_FORMATS:
        try:
            parsed = datetime.strptime(text, date_format)
        except ValueError:
            continue
        return pytz.timezone(config.SYNC_TIMEZONE).localize(parsed)
    return None


def _json_body(response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, (dict, list)) else {}


def _carrier_message(body, fallback: str) -> str:
    if isinstance(body, dict):
        return (
            body.get("message")
            or body.get("errorMessage")
            or body.get("returnMessage")
            or fallback
        )
    return fallback


class Kurasi:

    @staticmethod
    def headers(token: Optional[str] = None) -> Dict[str, str]:
        headers = {
            "Accept": "application/json, text/plain, */*",
            "Content-Type": "application/json; charset=UTF-8",
            "Origin": config.KURASI_ORIGIN,
            "X-Requested-With": "XMLHttpRequest",
        }
        if token:
            headers["X-Ship-Auth-Token"] = token
        return headers

    @staticmethod
    def url(path: str) -> str:
        return f"{config.KURASI_BASE}{path}"

    # ============================================
    # CALCULATOR
    # ============================================

    @staticmethod
    def build_quote_payload(quote_request: QuoteRequest) -> Dict[str, str]:
        return {
            "country": str(quote_request.country),
            "actualWeight": _as_carrier_number(quote_request.actual_weight),
            "actualHeight": _as_carrier_number(quote_request.actual_height),
            "actualLength": _as_carrier_number(quote_request.actual_length),
            "actualWidth": _as_carrier_number(quote_request.actual_width),
            "currencyType": quote_request.currency_type,
            "supportedCountryCode": quote_request.supported_country_code,
        }

    @staticmethod
    def fetch_carrier_quote(
        quote_request: QuoteRequest, auth_token: Optional[str] = None
    ) -> CarrierQuoteResult:
        """
        One POST to the rate calculator. Never raises: transport problems come
        back as ERROR, carrier refusals as FAIL.
        """
        payload = Kurasi.build_quote_payload(quote_request)

        try:
            response = requests.post(
                Kurasi.url("/api/v1/ship/calculator"),
                json=payload,
                headers=Kurasi.headers(auth_token),
                timeout=config.KURASI_QUOTE_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Kurasi calculator unreachable: {e}",
            )
            return CarrierQuoteResult(
                status="ERROR",
                http_status=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message=str(e) or "Kurasi calculator unreachable",
            )

        body = _json_body(response)
        carrier_status = body.get("status") if isinstance(body, dict) else None

        if not response.ok or carrier_status != "SUCCESS":
            message = _carrier_message(
                body,
                f"Kurasi API returned status: {carrier_status or response.status_code}",
            )
            logger.info(
                extra=context_user_data.get(),
                msg=f"Kurasi calculator refused {payload['country']}: {message}",
            )
            return CarrierQuoteResult(
                status="FAIL",
                http_status=(
                    http.HTTPStatus.BAD_REQUEST if response.ok else response.status_code
                ),
                message=message,
            )

        try:
            quote = RawQuoteResponse.model_validate(body.get("data") or {})
        except ValidationError as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Unexpected Kurasi calculator payload: {e}",
            )
            return CarrierQuoteResult(
                status="ERROR",
                http_status=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message="Unexpected response from Kurasi calculator",
            )

        return CarrierQuoteResult(
            status="SUCCESS", http_status=http.HTTPStatus.OK, quote=quote
        )

    # ============================================
    # GENERIC CALLS
    # ============================================

    @staticmethod
    def _call(
        method: str,
        path: str,
        token: Optional[str] = None,
        payload: Optional[dict] = None,
        timeout: Optional[float] = None,
        binary: bool = False,
    ) -> CarrierCallResult:
        try:
            response = requests.request(
                method,
                Kurasi.url(path),
                json=payload,
                headers=Kurasi.headers(token),
                timeout=timeout if timeout is not None else config.KURASI_CALL_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Kurasi {method} {path} failed: {e}",
            )
            return CarrierCallResult(
                status="ERROR",
                http_status=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message=str(e) or "Kurasi API unreachable",
            )

        content_type = response.headers.get("Content-Type", "")
        if binary and "application/pdf" in content_type:
            return CarrierCallResult(
                status="SUCCESS" if response.ok else "FAIL",
                http_status=response.status_code,
                content=response.content,
                content_type=content_type,
            )

        body = _json_body(response)
        carrier_status = body.get("status") if isinstance(body, dict) else None

        if response.ok and carrier_status == "SUCCESS":
            return CarrierCallResult(
                status="SUCCESS",
                http_status=response.status_code,
                data=body.get("data"),
                content=body,
                content_type=content_type,
            )

        message = _carrier_message(
            body, f"Kurasi API returned status: {carrier_status or response.status_code}"
        )
        logger.info(
            extra=context_user_data.get(),
            msg=f"Kurasi {method} {path} answered {response.status_code}: {message}",
        )
        return CarrierCallResult(
            status="FAIL",
            http_status=(
                http.HTTPStatus.BAD_REQUEST if response.ok else response.status_code
            ),
            message=message,
            data=body.get("data") if isinstance(body, dict) else None,
            content=body,
            content_type=content_type,
        )

    # ============================================
    # SESSION
    # ============================================

    @staticmethod
    def login(username: str, password: str) -> CarrierCallResult:
        result = Kurasi._call(
            "POST",
            "/api/v1/login",
            payload={"username": username, "password": password},
        )
        if result.ok and not (result.data or {}).get("token"):
            return CarrierCallResult(
                status="FAIL",
                http_status=http.HTTPStatus.UNAUTHORIZED,
                message="Kurasi login returned no token",
                content=result.content,
            )
        return result

    @staticmethod
    def me(token: str) -> CarrierCallResult:
        return Kurasi._call("GET", "/api/v1/me", token=token)

    @staticmethod
    def countries(token: str) -> CarrierCallResult:
        return Kurasi._call("GET", "/api/v1/ship/allCountry", token=token)

    @staticmethod
    def verify_token(token: str) -> CarrierCallResult:
        """A token is live when an authenticated lookup answers 2xx."""
        try:
            response = requests.get(
                Kurasi.url("/api/v1/ship/country"),
                headers=Kurasi.headers(token),
                timeout=config.KURASI_CALL_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.info(
                extra=context_user_data.get(), msg=f"Kurasi token check failed: {e}"
            )
            return CarrierCallResult(
                status="ERROR",
                http_status=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message=str(e),
            )
        return CarrierCallResult(
            status="SUCCESS" if response.ok else "FAIL",
            http_status=response.status_code,
        )

    # ============================================
    # SHIPMENTS
    # ============================================

    @staticmethod
    def create_shipment(payload: dict, token: str) -> CarrierCallResult:
        return Kurasi._call("POST", "/api/v1/createShipment", token=token, payload=payload)

    @staticmethod
    def update_shipment(payload: dict, token: str) -> CarrierCallResult:
        return Kurasi._call("POST", "/api/v1/modifyShipment", token=token, payload=payload)

    @staticmethod
    def delete_shipment(shipment_id: str, remark: str, token: str) -> CarrierCallResult:
        payload = {"shipmentIdList": [{"ShipmentID": shipment_id, "Remark": remark}]}
        return Kurasi._call("POST", "/api/v1/deleteShipment", token=token, payload=payload)

    @staticmethod
    def create_label(shipment_id: str, token: str) -> CarrierCallResult:
        return Kurasi._call(
            "POST",
            "/api/v1/createLabel",
            token=token,
            payload={"shipmentIdList": [shipment_id]},
            binary=True,
        )

    @staticmethod
    def validate_hs_code(hs_code: str, token: str) -> CarrierCallResult:
        return Kurasi._call("GET", f"/api/v1/validate/hsCode/{hs_code}", token=token)

    @staticmethod
    def shipment_other_data(shipment_id: str, token: str) -> CarrierCallResult:
        return Kurasi._call("GET", f"/api/v1/shipment/otherdata/{shipment_id}", token=token)

    # ============================================
    # SHIPMENT LISTING
    # ============================================

    @staticmethod
    def extract_rows(payload) -> Tuple[List[dict], Optional[int]]:
        """Flatten the listing's response shapes into (rows, total)."""
        if isinstance(payload, list):
            return payload, None
        if not isinstance(payload, dict):
            return [], None

        if isinstance(payload.get("rows"), list):
            return payload["rows"], payload.get("total")

        data = payload.get("data")
        if isinstance(data, list):
            return data, payload.get("total")
        if isinstance(data, dict):
            if isinstance(data.get("rows"), list):
                return data["rows"], data.get("total")
            if isinstance(data.get("data"), list):
                return data["data"], data.get("total")

        return [], None

    @staticmethod
    def _post_listing(path: str, payload: dict, token: str) -> CarrierCallResult:
        """Listings answer without a status field; only the HTTP status counts."""
        try:
            response = requests.post(
                Kurasi.url(path),
                json=payload,
                headers=Kurasi.headers(token),
                timeout=config.KURASI_LIST_TIMEOUT,
            )
        except requests.RequestException as e:
            logger.error(
                extra=context_user_data.get(),
                msg=f"Kurasi listing {path} failed: {e}",
            )
            return CarrierCallResult(
                status="ERROR",
                http_status=http.HTTPStatus.INTERNAL_SERVER_ERROR,
                message=str(e) or "Kurasi API unreachable",
            )

        body = _json_body(response)
        if not response.ok:
            return CarrierCallResult(
                status="FAIL",
                http_status=response.status_code,
                message=_carrier_message(
                    body, f"Kurasi API returned status: {response.status_code}"
                ),
                content=body,
            )

        rows, total = Kurasi.extract_rows(body)
        return CarrierCallResult(
            status="SUCCESS",
            http_status=response.status_code,
            data={"rows": rows, "total": total},
            content=body,
        )

    @staticmethod
    def list_shipments(query: ShipmentListQuery, token: str) -> CarrierCallResult:
        return Kurasi._post_listing(
            "/api/v1/shipmentManagement", query.model_dump(), token
        )

    @staticmethod
    def to_buyer_input(row: dict, country_table: CountryTable) -> Optional[KurasiBuyerInput]:
        """Map a listing row to buyer fields, None when the row cannot be used."""
        srn_raw = carrier_text(row.get("saleRecordNumber"))
        if not srn_raw.isdigit():
            return None

        iso2 = country_table.normalize_code(
            carrier_text(row.get("buyerCountry") or row.get("countryShortName"))
        )
        if not iso2:
            return None

        phone = build_e164_phone(
            carrier_text(row.get("buyerPhone")), carrier_text(row.get("phoneCode")), iso2
        )
        if not phone:
            return None

        return KurasiBuyerInput(
            sale_record_number=int(srn_raw),
            full_name=carrier_text(row.get("buyerFullName")),
            address1=carrier_text(row.get("buyerAddress1")),
            address2=carrier_text(row.get("buyerAddress2")),
            city=carrier_text(row.get("buyerCity")),
            state=carrier_text(row.get("buyerState")),
            zip=carrier_text(row.get("buyerZip")),
            country=iso2,
            email=clean_email(carrier_text(row.get("buyerEmail"))),
            phone=phone,
        )

    @staticmethod
    def to_shipment_input(
        row: dict, country_table: CountryTable
    ) -> Optional[KurasiShipmentInput]:
        """Map a listing row to the local shipment copy, None without a shipment id."""
        shipment_id = carrier_text(row.get("kurasiShipmentId"))
        if not shipment_id:
            return None

        raw_country = carrier_text(row.get("countryShortName") or row.get("buyerCountry"))
        tracking_number = carrier_text(row.get("trackingNumber"))
        shipping_fee = carrier_text(row.get("shippingFee"))

        return KurasiShipmentInput(
            kurasi_shipment_id=shipment_id,
            sale_record_number=carrier_text(row.get("saleRecordNumber")),
            flag_id=carrier_text(row.get("flagId")) or None,
            buyer_full_name=carrier_text(row.get("buyerFullName")),
            buyer_country=country_table.normalize_code(raw_country) or raw_country,
            buyer_city=carrier_text(row.get("buyerCity")) or None,
            buyer_state=carrier_text(row.get("buyerState")) or None,
            buyer_zip=carrier_text(row.get("buyerZip")) or None,
            buyer_phone=carrier_text(row.get("buyerPhone")) or None,
            service_name=carrier_text(row.get("serviceName")) or None,
            carrier=carrier_text(row.get("carrier")) or None,
            shipping_fee=shipping_fee or None,
            shipping_fee_minor=_carrier_int(shipping_fee),
            chargeable_weight=_carrier_int(row.get("chargeableWeight")),
            actual_weight=_carrier_int(row.get("actualWeight")),
            tracking_number=tracking_number or None,
            awb=carrier_text(row.get("awb")) or None,
            box_id=carrier_text(row.get("boxId")) or None,
            shipment_received_at=_carrier_datetime(row.get("shipmentReceivedDatetime")),
            label_created_at=_carrier_datetime(row.get("labelCreatedDatetime")),
            shipped_at=_carrier_datetime(row.get("shippedDatetime")),
        )

    @staticmethod
    def list_temp_shipments(query: TempShipmentQuery, token: str) -> CarrierCallResult:
        """Draft shipments that were saved but not yet submitted."""
        return Kurasi._post_listing("/api/v1/shipmentTemp", query.model_dump(), token)

    # ============================================
    # SHIPMENT PAYLOADS
    # ============================================

    @staticmethod
    def split_buyer_phone(order: Order) -> Tuple[str, str]:
        """National number and calling-code digits for the carrier form."""
        buyer = order.buyer
        parts = normalize_and_split_phone(buyer.phone, buyer.country)
        if parts:
            return parts.national, digits_only(parts.phone_code) or "1"
        return digits_only(buyer.phone), "1"

    @staticmethod
    def build_shipment_payload(order: Order) -> dict:
        buyer = order.buyer
        package = order.package

        service_name = resolve_service_code(package.service)
        is_express = service_name == "EX"

        national, phone_code = Kurasi.split_buyer_phone(order)
        weight = str(package.weight_grams or 100)
        value = float(package.total_value or 0) or 7.0
        value = int(value) if value.is_integer() else value
        currency = package.currency or "USD"
        description = package.description or "Package"

        content_item = {
            "description": description,
            "quantity": "1",
            "value": str(value),
            "itemWeight": weight,
            "currency": currency,
            "sku": package.sku or "",
            "hsCode": package.hs_code or DEFAULT_HS_CODE,
            "countryOfOrigin": package.country_of_origin or "ID",
        }

        return {
            "buyerFullName": buyer.full_name,
            "buyerAddress1": buyer.address1,
            "buyerAddress2": buyer.address2 or "",
            "buyerCity": buyer.city,
            "buyerState": buyer.state or "",
            "buyerZip": buyer.zip,
            "buyerCountry": buyer.country,
            "buyerPhone": national,
            "buyerEmail": buyer.email or "",
            "phoneCode": phone_code,
            "serviceName": service_name,
            "packageDesc": description,
            "saleRecordNumber": str(order.srn_id) if order.srn_id else "",
            "totalWeight": weight,
            # express wants a number, the other services a string
            "totalValue": value if is_express else str(value),
            "currency": currency,
            "hsCode": "" if is_express else (package.hs_code or DEFAULT_HS_CODE),
            "contentItem": [content_item] if is_express else [],
            "shipmentRemark": order.notes or "",
            "companyName": "",
            "isNoPhone": False,
            "shipmentCategory": "M",
            "collectTaxId": [],
            "valueAddedServiceInsurance": [],
            "valueAddedServiceSignature": [],
            "saleChannel": order.sale_channel or "",
            "ioss": "",
            "iossCheck": False,
        }

    @staticmethod
    def build_update_payload(order: Order, client_code: str) -> dict:
        payload = Kurasi.build_shipment_payload(order)
        package = order.package

        content_item = {
            "countryOfOrigin": package.country_of_origin or "ID",
            "currency": payload["currency"],
            "description": payload["packageDesc"],
            "hsCode": package.hs_code or DEFAULT_HS_CODE,
            "number": "1",
            "quantity": 1,
            "sku": package.sku or "",
            "value": float(package.total_value or 0) or 7,
            "itemWeight": package.weight_grams or 100,
            "length": float(package.length_cm) if package.length_cm else None,
            "width": float(package.width_cm) if package.width_cm else None,
            "height": float(package.height_cm) if package.height_cm else None,
        }

        payload.update(
            {
                "shipmentId": order.krs_tracking_number,
                "id": order.krs_tracking_number,
                "clientCode": client_code,
                "countryShortName": order.buyer.country,
                "clientCountry": "Indonesia",
                "totalValue": str(payload["totalValue"]),
                "hsCode": package.hs_code or "",
                "contentItem": [content_item],
                "shipmentStatus": "New",
                "shipmentSource": "Web",
                "isDocConfirm": False,
            }
        )
        payload.pop("iossCheck", None)
        return payload
