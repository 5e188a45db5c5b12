import math
import numbers

from context_manager.context import context_user_data

from logger import logger

# carrier
from shipping_partner.kurasi.kurasi import Kurasi
from shipping_partner.kurasi import kurasi_config
from shipping_partner.kurasi.kurasi_schema import QuoteRequest

# utils
from utils.country import CountryTable

# fees
from modules.fees.fee_calculator import FeeSchedule, calculate_fee

from .quote_normalizer import combine
from .shipping_quote_errors import (
    NoServiceAvailable,
    QuoteValidationError,
    UpstreamFailure,
)
from .shipping_quote_schema import QuotedService, ShippingQuoteMeta, ShippingQuoteResponse


ORIGIN_COUNTRY_CODE = "ID"
SETTLEMENT_CURRENCY = "IDR"


DIMENSION_FIELDS = ("actualLength", "actualWidth", "actualHeight")


def _is_finite_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return math.isfinite(value)


class ShippingQuoteService:

    @staticmethod
    def _validated_weight(body: dict):
        weight = body.get("actualWeight")
        if not _is_finite_number(weight) or weight <= 0:
            raise QuoteValidationError(
                "Missing or invalid field: actualWeight (must be positive number in grams)"
            )
        return weight

    @staticmethod
    def _validated_dimensions(body: dict) -> dict:
        """Length, width and height in cm; missing or null means 0."""
        dimensions = {}
        for field in DIMENSION_FIELDS:
            value = body.get(field)
            if value is None:
                value = 0
            if not _is_finite_number(value) or value < 0:
                raise QuoteValidationError(
                    f"Invalid field: {field} (must be a non-negative number in cm)"
                )
            dimensions[field] = value
        return dimensions

    @staticmethod
    def _resolve_country_code(body: dict, country: str, country_table: CountryTable) -> str:
        provided = body.get("countryCode")
        if isinstance(provided, str) and provided.strip():
            return provided.strip().upper()

        country_code = country_table.code_for_name(country)
        if not country_code:
            raise QuoteValidationError(
                f'Could not determine country code for "{country}". '
                "Please provide countryCode field."
            )
        return country_code

    @staticmethod
    def get_combined_quote(
        body, country_table: CountryTable, fee_schedule: FeeSchedule
    ) -> ShippingQuoteResponse:
        """
        Carrier quote plus the local handling fee, cheapest service first.

        Raises a QuoteError subclass for every failure the caller should see.
        """
        if not isinstance(body, dict):
            raise QuoteValidationError("Invalid JSON body")

        country = body.get("country")
        if not country or not isinstance(country, str) or not country.strip():
            raise QuoteValidationError("Missing required field: country")
        country = country.strip()

        weight = ShippingQuoteService._validated_weight(body)
        dimensions = ShippingQuoteService._validated_dimensions(body)
        country_code = ShippingQuoteService._resolve_country_code(
            body, country, country_table
        )

        result = Kurasi.fetch_carrier_quote(
            QuoteRequest(
                country=country,
                actual_weight=weight,
                actual_length=dimensions["actualLength"],
                actual_width=dimensions["actualWidth"],
                actual_height=dimensions["actualHeight"],
                currency_type=SETTLEMENT_CURRENCY,
                supported_country_code=ORIGIN_COUNTRY_CODE,
            ),
            auth_token=kurasi_config.KURASI_TOKEN or None,
        )
        if not result.ok:
            raise UpstreamFailure(
                result.message, http_status=result.http_status, status=result.status
            )

        local_fee = calculate_fee(weight, country_code, fee_schedule)
        lines = combine(result.quote, local_fee)

        if not lines:
            raise NoServiceAvailable(
                "No shipping services available for this destination/weight combination"
            )

        logger.info(
            extra=context_user_data.get(),
            msg=f"Quoted {len(lines)} services to {country_code} for {weight}g, local fee {local_fee}",
        )

        return ShippingQuoteResponse(
            meta=ShippingQuoteMeta(
                currency=SETTLEMENT_CURRENCY,
                chargeableWeight=result.quote.chargeableWeight,
                volumetricWeight=result.quote.volumetricWeight,
            ),
            services=[
                QuotedService(
                    code=line.service_code,
                    title=line.title,
                    totalFee=line.total_fee_minor,
                    maxWeight=line.max_weight_label,
                )
                for line in lines
            ],
        )
