import unicodedata
import re


def clean_text(text, max_length: int = None):
    """
    Clean and normalize text.

    - Normalizes Unicode (NFKC)
    - Replaces non-breaking spaces
    - Collapses multiple spaces to single space
    - Trims whitespace
    - Optionally truncates to max_length
    """
    if text is None:
        return ""
    if not isinstance(text, str):
        text = str(text)
    text = unicodedata.normalize("NFKC", text).replace("\xa0", " ").strip()
    text = re.sub(r"\s+", " ", text).strip()
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


def clean_email(email) -> str:
    """Lower-case and strip an email, empty string when missing."""
    if email is None:
        return ""
    return re.sub(r"\s+", "", str(email)).lower()


def digits_only(value) -> str:
    if value is None:
        return ""
    return re.sub(r"\D", "", str(value))


def carrier_text(value) -> str:
    # the carrier sends the literal string "null" for empty fields
    text = clean_text(value)
    return "" if text == "null" else text


def format_idr(amount_minor: int) -> str:
    """Render 104000 as 'Rp 104.000'."""
    return "Rp " + f"{int(amount_minor):,}".replace(",", ".")
