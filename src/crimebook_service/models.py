"""
models.py
The crime data entry record and the helpers that move it in and out of
CSV rows and JSON payloads.

Field names on the wire are the ones the crimebook API has always used
(IncidentNumber, OffenseCode, ...). The CSV columns follow the same order.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Sequence

from jsonschema import validate, ValidationError

from src.crimebook_service.errors import MalformedPayload

# (attribute name, JSON name) for every data column, in CSV order
DATA_FIELDS = [
    ("incident_number", "IncidentNumber"),
    ("offense_code", "OffenseCode"),
    ("offense_code_group", "OffenseCodeGroup"),
    ("offense_description", "OffenseDescription"),
    ("district", "District"),
    ("reporting_area", "ReportingArea"),
    ("shooting", "Shooting"),
    ("occurred_on_date", "OccurredOnDate"),
    ("year", "Year"),
    ("month", "Month"),
    ("day_of_week", "DayOfWeek"),
    ("hour", "Hour"),
    ("ucr_part", "UcrPart"),
    ("street", "Street"),
    ("lat", "Lat"),
    ("long", "Long"),
    ("location", "Location"),
]

JSON_NAMES = [json_name for _, json_name in DATA_FIELDS]
ATTRIBUTE_FOR_JSON_NAME = {json_name: attr for attr, json_name in DATA_FIELDS}

# Number of columns in a bootstrap CSV row (the ID is never part of the file)
CSV_FIELD_COUNT = len(DATA_FIELDS)

# Create payloads must be a JSON object; known fields must be strings or null
# (null leaves the field empty). Unknown keys are ignored, and ID is accepted
# but overwritten by the store.
ENTRY_PAYLOAD_SCHEMA = {
    "type": "object",
    "properties": dict(
        {"ID": {"type": ["integer", "null"]}},
        **{json_name: {"type": ["string", "null"]} for json_name in JSON_NAMES}
    ),
}


@dataclass(frozen=True)
class CrimeDataEntry:
    """One row of crime data. Entries are never edited after they are created."""

    ID: int
    incident_number: str = ""
    offense_code: str = ""
    offense_code_group: str = ""
    offense_description: str = ""
    district: str = ""
    reporting_area: str = ""
    shooting: str = ""
    occurred_on_date: str = ""
    year: str = ""
    month: str = ""
    day_of_week: str = ""
    hour: str = ""
    ucr_part: str = ""
    street: str = ""
    lat: str = ""
    long: str = ""
    location: str = ""

    def get_field(self, json_name: str) -> str:
        """Return the value of a data field by its JSON name."""
        return getattr(self, ATTRIBUTE_FOR_JSON_NAME[json_name])

    def to_dict(self) -> Dict[str, Any]:
        """Convert the entry into the JSON shape returned by the API."""
        result = {"ID": self.ID}
        for attr, json_name in DATA_FIELDS:
            result[json_name] = getattr(self, attr)
        return result


def row_to_fields(row: Sequence[str]) -> Dict[str, str]:
    """
    Map a CSV data row onto JSON field names.
    The caller is responsible for checking the row length.
    """
    return {json_name: value for json_name, value in zip(JSON_NAMES, row)}


def parse_entry_payload(payload: Any) -> Dict[str, str]:
    """
    Check a decoded create payload and keep only the known data fields.

    Raises:
        MalformedPayload: if the payload is not an object or a field has the wrong type.
    """
    try:
        validate(instance=payload, schema=ENTRY_PAYLOAD_SCHEMA)
    except ValidationError as error:
        raise MalformedPayload(f"invalid JSON data: {error.message}")

    return {
        json_name: payload[json_name] or ""
        for json_name in JSON_NAMES if json_name in payload
    }


def entries_to_list(entries: List[CrimeDataEntry]) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in entries]

