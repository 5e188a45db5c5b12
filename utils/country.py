from dataclasses import dataclass
from typing import Iterable, Optional

from data.country_mapping import country_mapping


@dataclass(frozen=True)
class CountryRecord:
    """
    One destination country.

    `zone` and `ioss_code` are carrier-assigned. The bundled table has
    neither, so records built by `build_country_table` leave them None;
    a table built from carrier data may set them.
    """

    iso_code: str
    display_name: str
    calling_code: str
    zone: Optional[int] = None
    ioss_code: Optional[str] = None


class CountryTable:
    """Read-only lookups over a fixed set of country records."""

    def __init__(self, records: Iterable[CountryRecord]):
        records = tuple(records)
        self._by_code = {record.iso_code.upper(): record for record in records}
        self._by_name = {
            record.display_name.strip().lower(): record for record in records
        }

    def __len__(self):
        return len(self._by_code)

    def get(self, iso_code: str) -> Optional[CountryRecord]:
        if not iso_code:
            return None
        return self._by_code.get(str(iso_code).strip().upper())

    def name_for(self, iso_code: str) -> Optional[str]:
        record = self.get(iso_code)
        return record.display_name if record else None

    def code_for_name(self, name: str) -> Optional[str]:
        if not name or not isinstance(name, str):
            return None
        record = self._by_name.get(name.strip().lower())
        return record.iso_code if record else None

    def normalize_code(self, value: str) -> Optional[str]:
        """Accept an ISO-2 code in any case or a display name."""
        if not value or not isinstance(value, str):
            return None
        value = value.strip()
        if len(value) == 2 and self.get(value):
            return value.upper()
        return self.code_for_name(value)

    def calling_code_for(self, iso_code: str) -> Optional[str]:
        record = self.get(iso_code)
        return record.calling_code if record else None


def build_country_table(mapping: dict = country_mapping) -> CountryTable:
    return CountryTable(
        CountryRecord(iso_code=iso_code, display_name=name, calling_code=calling_code)
        for iso_code, (name, calling_code) in mapping.items()
    )


DEFAULT_COUNTRY_TABLE = build_country_table()


# fastapi dependency, overridden in tests with an alternate table
def get_country_table() -> CountryTable:
    return DEFAULT_COUNTRY_TABLE
