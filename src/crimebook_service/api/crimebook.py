# src/crimebook_service/api/crimebook.py

import json
import logging
import re

from flask import Blueprint, request, jsonify
from werkzeug.exceptions import ClientDisconnected

from src.crimebook_service.errors import (
    EntryNotFound,
    InvalidIdentifier,
    MalformedPayload,
    SerializationFailure,
    UnsupportedQuery,
)
from src.crimebook_service.models import entries_to_list, parse_entry_payload
from src.crimebook_service.store.crime_book import FieldFilter

logger = logging.getLogger(__name__)


# ASCII digits with an optional minus sign, nothing else
ENTRY_ID_PATTERN = re.compile(r"-?[0-9]+")


def parse_entry_id(raw_id):
    """Turn the <entry_id> path segment into an int, or raise InvalidIdentifier."""
    if not ENTRY_ID_PATTERN.fullmatch(raw_id):
        raise InvalidIdentifier(f"invalid entry id '{raw_id}'")
    return int(raw_id)


def parse_filter(args):
    """
    Build a FieldFilter from the query string, or return None when there is no query.
    Only one parameter is allowed (repeating a parameter counts as more than one).
    """
    params = list(args.items(multi=True))
    if not params:
        return None
    if len(params) > 1:
        raise UnsupportedQuery("only one filter parameter is allowed per request")
    field, value = params[0]
    return FieldFilter(field, value)


def error_response(error):
    return jsonify({"error": error.message}), error.status_code


def json_response(payload, status=200):
    try:
        return jsonify(payload), status
    except (TypeError, ValueError) as e:
        raise SerializationFailure(f"could not encode response: {e}")


def create_crimebook_blueprint(book, path="/crimebook"):
    """
    Factory that creates the crime book blueprint with access to the
    in-memory CrimeBook.

    Endpoints:
        GET    <path>               all entries (or a filtered list, see below)
        GET    <path>?District=A1   entries where one field equals a value
        GET    <path>/<id>          a single entry
        POST   <path>               create an entry from a JSON body
        POST   <path>/<id>          405, entries cannot be updated
        DELETE <path>               delete every entry
        DELETE <path>/<id>          delete a single entry

    Filterable fields: IncidentNumber, OffenseCode, District, OffenseCodeGroup.
    """
    bp = Blueprint("crimebook", __name__)
    entry_path = path + "/<entry_id>"

    @bp.route(path, methods=["GET"], strict_slashes=False)
    def get_entries():
        """
        Return every entry that has not been deleted, in the order they were added.
        With a single query parameter, return only entries where that field matches exactly.
        """
        try:
            criteria = parse_filter(request.args)
            if criteria is None:
                entries = book.get_all_entries()
            else:
                entries = book.filter_entries(criteria)
            return json_response(entries_to_list(entries))
        except UnsupportedQuery as e:
            logger.warning(f"Rejected crimebook query {request.query_string!r}: {e.message}")
            return error_response(e)
        except SerializationFailure as e:
            logger.error(e.message)
            return jsonify({"error": "internal error"}), 500

    @bp.route(entry_path, methods=["GET"], strict_slashes=False)
    def get_entry(entry_id):
        """Return one entry. Unknown, deleted, and non-numeric IDs are all 404."""
        try:
            entry = book.get_entry(parse_entry_id(entry_id))
            return json_response(entry.to_dict())
        except (InvalidIdentifier, EntryNotFound):
            return jsonify({"error": "entry not found"}), 404
        except SerializationFailure as e:
            logger.error(e.message)
            return jsonify({"error": "internal error"}), 500

    @bp.route(path, methods=["POST"], strict_slashes=False)
    def create_entry():
        """
        Create an entry from a JSON object. The ID is assigned by the crime book;
        an ID sent by the client is ignored.
        """
        try:
            body = request.get_data()
        except (ClientDisconnected, OSError) as e:
            logger.error(f"Failed reading crimebook request body: {e}")
            return jsonify({"error": "internal error"}), 500

        try:
            try:
                payload = json.loads(body)
            except ValueError as e:
                raise MalformedPayload(f"invalid JSON data: {e}")
            entry = book.add_entry(parse_entry_payload(payload))
        except MalformedPayload as e:
            logger.warning(e.message)
            return jsonify({"error": "invalid JSON data", "detail": e.message}), 400

        logger.info(f"Created crime data entry {entry.ID}")
        return jsonify({"message": "new entry created", "ID": entry.ID}), 200

    @bp.route(entry_path, methods=["POST"], strict_slashes=False)
    def update_entry(entry_id):
        """Entries are never updated in place."""
        return jsonify({"error": "method not allowed"}), 405

    @bp.route(path, methods=["DELETE"], strict_slashes=False)
    def delete_entries():
        book.remove_all_entries()
        return jsonify({"message": "collection deleted"}), 200

    @bp.route(entry_path, methods=["DELETE"], strict_slashes=False)
    def delete_entry(entry_id):
        """Delete one entry. Its ID stays taken, so other IDs never shift."""
        try:
            book.remove_entry(parse_entry_id(entry_id))
        except InvalidIdentifier as e:
            return error_response(e)
        except EntryNotFound:
            return jsonify({"error": "entry not found"}), 404

        return jsonify({"message": "entry deleted"}), 200

    return bp
