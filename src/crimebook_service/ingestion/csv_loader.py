"""
csv_loader.py
Loads the crime data CSV into the crime book when the service starts.

The CSV has a header row followed by data rows of 17 columns:
INCIDENT_NUMBER, OFFENSE_CODE, OFFENSE_CODE_GROUP, OFFENSE_DESCRIPTION, DISTRICT,
REPORTING_AREA, SHOOTING, OCCURRED_ON_DATE, YEAR, MONTH, DAY_OF_WEEK, HOUR,
UCR_PART, STREET, Lat, Long, Location.
The entry ID is not part of the file; the crime book assigns it.

The source can be a local file or an http(s) URL. There is no partial load:
any malformed row stops the whole bootstrap.
"""

import csv
import io
import logging
import os

import requests

from src.crimebook_service.errors import MalformedSource
from src.crimebook_service.models import CSV_FIELD_COUNT, row_to_fields

logger = logging.getLogger(__name__)

# Config
CRIME_CSV = os.getenv("CRIME_CSV", "data/crime10.csv")


def is_url(source):
    return source.startswith("http://") or source.startswith("https://")


def read_source(source):
    """
    Return the CSV text from a file path or URL.
    I/O and HTTP errors are raised to the caller.
    """
    if is_url(source):
        logger.info(f"Downloading crime data from {source}")
        response = requests.get(source, timeout=30)
        response.raise_for_status()
        return response.text

    logger.info(f"Reading crime data from {source}")
    with open(source, newline="", encoding="utf-8") as f:
        return f.read()


def load_rows(text):
    """
    Parse CSV text and return the data rows (header thrown away).

    Raises:
        MalformedSource: if the source is empty or any row has the wrong number of fields.
    """
    reader = csv.reader(io.StringIO(text, newline=""))

    try:
        header = next(reader)
    except StopIteration:
        raise MalformedSource("crime data source is empty (no header row)")

    if len(header) != CSV_FIELD_COUNT:
        raise MalformedSource(
            f"header has {len(header)} fields, expected {CSV_FIELD_COUNT}"
        )

    rows = []
    for row in reader:
        # blank lines are skipped
        if not row:
            continue
        if len(row) != CSV_FIELD_COUNT:
            raise MalformedSource(
                f"line {reader.line_num} has {len(row)} fields, expected {CSV_FIELD_COUNT}"
            )
        rows.append(row)
    return rows


def load_crime_book(book, source=CRIME_CSV):
    """
    Fill the crime book from the CSV source. Each data row becomes one entry.
    Returns the number of entries added.
    """
    rows = load_rows(read_source(source))

    for row in rows:
        book.add_entry(row_to_fields(row))

    logger.info(f"Loaded {len(rows)} crime data entries from {source}")
    return len(rows)
