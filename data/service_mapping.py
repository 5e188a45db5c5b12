# carrier response block -> (service code, title), in display order
SERVICE_CATALOG = (
    ("esr", "ES", "Economy Standard"),
    ("epr", "EP", "Economy Plus"),
    ("err", "EX", "Express"),
    ("ppr", "PP", "Packet Premium"),
)

SERVICE_CODES = tuple(code for _, code, _ in SERVICE_CATALOG)

DEFAULT_SERVICE_CODE = "EX"

# hs code sent for non-express parcels when the package has none
DEFAULT_HS_CODE = "490900"


def resolve_service_code(raw_service: str) -> str:
    """Pick the carrier service whose code prefixes the stored service name."""
    raw_service = (raw_service or "").strip().upper()
    for code in sorted(SERVICE_CODES):
        if raw_service.startswith(code):
            return code
    return DEFAULT_SERVICE_CODE
