import re
from dataclasses import dataclass
from typing import Optional

import phonenumbers
from phonenumbers import NumberParseException, PhoneNumberFormat


@dataclass(frozen=True)
class PhoneParts:
    e164: str
    phone_code: str
    country: Optional[str]
    national: str


def _region_hint(country_hint: Optional[str]) -> Optional[str]:
    if country_hint and re.fullmatch(r"[A-Za-z]{2}", country_hint):
        return country_hint.upper()
    return None


def _parse(raw: str, region: Optional[str] = None):
    try:
        return phonenumbers.parse(raw, region)
    except NumberParseException:
        return None


def _prefixed(phone_code: str) -> str:
    phone_code = (phone_code or "").strip()
    if phone_code and not phone_code.startswith("+"):
        phone_code = "+" + phone_code
    return phone_code


def normalize_and_split_phone(raw, country_hint: str = None) -> Optional[PhoneParts]:
    """
    Parse and validate a phone number.

    Returns the E.164 form, the "+<calling code>" prefix, the detected region
    and the national number, or None when the number does not validate.
    """
    if raw is None:
        return None
    region = _region_hint(country_hint)
    parsed = _parse(str(raw).strip(), region)
    if parsed is None or not phonenumbers.is_valid_number(parsed):
        return None

    return PhoneParts(
        e164=phonenumbers.format_number(parsed, PhoneNumberFormat.E164),
        phone_code=f"+{parsed.country_code}",
        country=phonenumbers.region_code_for_number(parsed) or region,
        national=str(parsed.national_number),
    )


def combine_with_phone_code(raw, phone_code: str = None) -> str:
    """Apply a separately entered dialing code to a locally written number."""
    phone = str(raw or "").strip()
    code = _prefixed(phone_code)
    if not code:
        return phone
    if phone.startswith("0"):
        return code + phone[1:]
    if not phone.startswith("+"):
        return code + phone
    return phone


def build_e164_phone(digits, phone_code: str, iso2: str) -> str:
    """
    Build an E.164 number from the carrier's split phone fields.

    Leading zeros of the national part are dropped. The carrier's dialing code
    wins over the one derived from the country. The candidate is returned even
    when it does not validate, the raw digits only when no code is known.
    """
    digits = str(digits or "").strip()
    if not digits:
        return ""

    code = _prefixed(phone_code)
    if not code:
        region = _region_hint(iso2)
        calling_code = phonenumbers.country_code_for_region(region) if region else 0
        if not calling_code:
            return digits
        code = f"+{calling_code}"

    candidate = code + digits.lstrip("0")
    parsed = _parse(candidate)
    if parsed is not None and phonenumbers.is_valid_number(parsed):
        return phonenumbers.format_number(parsed, PhoneNumberFormat.E164)
    return candidate
