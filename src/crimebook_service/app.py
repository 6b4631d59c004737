"""
app.py: Main Flask application for the Crimebook Service.

This service keeps crime incident records in memory and exposes them through
a small REST API:
- List, fetch, create, and delete crime data entries under /crimebook.
- Filter entries on a single field (e.g., /crimebook?District=A1).
- Open API (Swagger) integration for documentation.

The crime book is filled from a CSV file (CRIME_CSV) when the service starts.
Nothing is persisted; restarting the service reloads the CSV.

Run with: python -m src.crimebook_service.app (starts on port 3000).
"""

import logging
import os
import sys

import requests
from flask import Flask, jsonify
from flask_cors import CORS
from flask_swagger_ui import get_swaggerui_blueprint
from dotenv import load_dotenv

load_dotenv()

from src.crimebook_service.api.crimebook import create_crimebook_blueprint
from src.crimebook_service.errors import MalformedSource
from src.crimebook_service.ingestion.csv_loader import CRIME_CSV, load_crime_book
from src.crimebook_service.store.crime_book import CrimeBook, FILTERABLE_FIELDS

logger = logging.getLogger(__name__)

# Environment vars
CRIMEBOOK_PATH = os.getenv("CRIMEBOOK_PATH", "/crimebook")
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "3000"))

# Swagger UI configuration
SWAGGER_URL = '/swagger'  # URL for Swagger UI (e.g., http://localhost:3000/swagger)
API_URL = '/swagger.json'

SWAGGER_CONFIG = {
    'app_name': "Crimebook Service",
    'deepLinking': True,
    'defaultModelsExpandDepth': -1,
}

EXAMPLE_ENTRY = {
    "ID": 0,
    "IncidentNumber": "I182070945",
    "OffenseCode": "00619",
    "OffenseCodeGroup": "Larceny",
    "OffenseDescription": "LARCENY ALL OTHERS",
    "District": "D14",
    "ReportingArea": "808",
    "Shooting": "",
    "OccurredOnDate": "2018-09-02 13:00:00",
    "Year": "2018",
    "Month": "9",
    "DayOfWeek": "Sunday",
    "Hour": "13",
    "UcrPart": "Part One",
    "Street": "LINCOLN ST",
    "Lat": "42.35779134",
    "Long": "-71.13937053",
    "Location": "(42.35779134, -71.13937053)"
}


def build_openapi_spec(path):
    """Open API spec for the crimebook endpoints."""
    error = {"description": "Error", "content": {"application/json": {"example": {"error": "entry not found"}}}}
    entry_id = [{"name": "id", "in": "path", "required": True, "schema": {"type": "integer"}}]
    filters = [
        {"name": field, "in": "query", "required": False, "schema": {"type": "string"},
         "description": "Return only entries where this field equals the value. At most one filter per request."}
        for field in FILTERABLE_FIELDS
    ]

    return {
        "openapi": "3.0.0",
        "info": {"title": "Crimebook Service", "version": "1.0.0"},
        "paths": {
            "/health": {
                "get": {
                    "summary": "Health check",
                    "responses": {"200": {"description": "OK"}}
                }
            },
            path: {
                "get": {
                    "summary": "List crime data entries (optionally filtered on one field)",
                    "tags": ["Crimebook"],
                    "parameters": filters,
                    "responses": {
                        "200": {"description": "Array of entries",
                                "content": {"application/json": {"example": [EXAMPLE_ENTRY]}}},
                        "500": error
                    }
                },
                "post": {
                    "summary": "Create a crime data entry (the ID is assigned by the service)",
                    "tags": ["Crimebook"],
                    "requestBody": {"content": {"application/json": {"example": EXAMPLE_ENTRY}}},
                    "responses": {
                        "200": {"description": "Entry created",
                                "content": {"application/json": {"example": {"message": "new entry created", "ID": 10}}}},
                        "400": error
                    }
                },
                "delete": {
                    "summary": "Delete every crime data entry",
                    "tags": ["Crimebook"],
                    "responses": {"200": {"description": "Collection deleted"}}
                }
            },
            path + "/{id}": {
                "get": {
                    "summary": "Get one crime data entry",
                    "tags": ["Crimebook"],
                    "parameters": entry_id,
                    "responses": {
                        "200": {"description": "The entry",
                                "content": {"application/json": {"example": EXAMPLE_ENTRY}}},
                        "404": error
                    }
                },
                "post": {
                    "summary": "Not supported: entries cannot be updated",
                    "tags": ["Crimebook"],
                    "parameters": entry_id,
                    "responses": {"405": error}
                },
                "delete": {
                    "summary": "Delete one crime data entry",
                    "tags": ["Crimebook"],
                    "parameters": entry_id,
                    "responses": {
                        "200": {"description": "Entry deleted"},
                        "400": error,
                        "404": error
                    }
                }
            }
        }
    }


def create_app(book=None, path=CRIMEBOOK_PATH):
    """
    Build the Flask app around a crime book.
    An empty CrimeBook is used when none is given.
    """
    if book is None:
        book = CrimeBook()

    app = Flask(__name__)

    # Use Flask CORS to allow connections from other sites
    CORS(app)

    app.logger.setLevel("INFO")

    swaggerui_blueprint = get_swaggerui_blueprint(
        SWAGGER_URL,
        API_URL,
        config=SWAGGER_CONFIG
    )
    app.register_blueprint(swaggerui_blueprint)
    app.register_blueprint(create_crimebook_blueprint(book, path))

    openapi_spec = build_openapi_spec(path)

    @app.route('/swagger.json', methods=['GET'])
    def swagger_spec():
        return jsonify(openapi_spec)

    @app.route('/health', methods=['GET'])
    def health():
        """
        Health check for the crimebook service.
        Returns: {"status": "ok", "service": "crimebook_service", "entries": <count>}
        """
        return jsonify({
            "status": "ok",
            "service": "crimebook_service",
            "entries": book.count_entries()
        })

    # Error handler for 404
    @app.errorhandler(404)
    def not_found(error):
        return jsonify({"error": "Endpoint not found"}), 404

    # Error handler for 405
    @app.errorhandler(405)
    def method_not_allowed(error):
        return jsonify({"error": "method not allowed"}), 405

    # Error handler for 500
    @app.errorhandler(500)
    def internal_error(error):
        app.logger.error(f"Unhandled error: {error}")
        return jsonify({"error": "Internal server error"}), 500

    return app


def bootstrap(source=CRIME_CSV):
    """
    Load the crime book from the CSV source.
    A missing or malformed source is fatal: the process exits.
    """
    book = CrimeBook()
    try:
        load_crime_book(book, source)
    except (OSError, MalformedSource, requests.RequestException) as e:
        logger.critical(f"Could not load crime data from {source}: {e}")
        sys.exit(1)

    entries = book.get_all_entries()
    logger.info(f"Crime book ready with {len(entries)} entries")
    if entries:
        logger.info(f"Last entry: {entries[-1]}")
    return book


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    app = create_app(bootstrap())

    # Run the Flask app (debug mode = True for development only).
    debug_mode = os.getenv('FLASK_DEBUG', 'False').lower() == 'true'
    app.run(host=HOST, port=PORT, debug=debug_mode)
