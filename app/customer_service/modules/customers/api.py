from __future__ import annotations

import logging
from typing import Any

from flask import Blueprint, current_app, g, has_request_context, request

from app.customer_service.modules.customers.service import (
    CustomerPatch,
    CustomerStore,
    DuplicateCustomerError,
    StoreError,
)

bp = Blueprint("customers", __name__)
logger = logging.getLogger(__name__)

NOT_FOUND = {"error": "Customer not found"}

# `customers.id` is a 32-bit serial; name/email/address are VARCHAR(255).
MAX_CUSTOMER_ID = 2**31 - 1
MAX_FIELD_LENGTH = 255


def parse_customer_id(raw: str | None) -> int | None:
    """Return the id if `raw` is a decimal integer in 1..MAX_CUSTOMER_ID, else None."""
    raw = (raw or "").strip()
    if not raw or not raw.isascii() or not raw.isdigit():
        return None
    value = int(raw)
    return value if 1 <= value <= MAX_CUSTOMER_ID else None


def _text(payload: dict, key: str) -> tuple[str | None, str | None]:
    value = payload.get(key)
    if value is None:
        return None, None
    if not isinstance(value, str):
        return None, f"{key.capitalize()} must be a string."
    value = value.strip()
    if len(value) > MAX_FIELD_LENGTH:
        return None, f"{key.capitalize()} must be at most {MAX_FIELD_LENGTH} characters."
    return value, None


def validate_customer_payload(payload: Any) -> list[str]:
    """Validate a create payload. Returns list of errors."""
    if not isinstance(payload, dict):
        return ["Request body must be a JSON object."]
    errors = []
    for key in ("name", "email"):
        value, err = _text(payload, key)
        if err:
            errors.append(err)
        elif not value:
            errors.append(f"{key.capitalize()} is required.")
    _, err = _text(payload, "address")
    if err:
        errors.append(err)
    return errors


def parse_customer_patch(payload: Any) -> tuple[CustomerPatch | None, list[str]]:
    """Build a CustomerPatch from an update payload. Email is not updatable and is ignored."""
    if not isinstance(payload, dict):
        return None, ["Request body must be a JSON object."]
    errors = []
    name, err = _text(payload, "name")
    if err:
        errors.append(err)
    elif name is not None and not name:
        errors.append("Name cannot be empty.")
    address, err = _text(payload, "address")
    if err:
        errors.append(err)
    if errors:
        return None, errors
    return CustomerPatch(name=name, address=address), []


def _request_id() -> str | None:
    return getattr(g, "request_id", None) if has_request_context() else None


def _bad_request(errors: list[str]):
    logger.info("Rejected customer request: %s (request_id=%s)", " ".join(errors), _request_id())
    return {"error": " ".join(errors)}, 400


def _store_failure(op: str, customer_id: int | None = None):
    rid = _request_id()
    logger.exception("Customer %s failed (customer_id=%s request_id=%s)", op, customer_id, rid)
    return {"error": "Internal Server Error", "request_id": rid}, 500


class CustomerHandler:
    """
    Maps customer requests onto a CustomerStore and the outcome onto an HTTP status.

    Every method returns a (body, status) pair that Flask can serialise.
    Validation failures never reach the store.
    """

    def __init__(self, store: CustomerStore) -> None:
        self.store = store

    def create(self, payload: Any):
        errors = validate_customer_payload(payload)
        if errors:
            return _bad_request(errors)

        address, _ = _text(payload, "address")
        try:
            c = self.store.insert(
                name=payload["name"].strip(),
                email=payload["email"].strip(),
                address=address,
            )
        except DuplicateCustomerError as e:
            logger.info("Duplicate customer email rejected (request_id=%s)", _request_id())
            return {"error": str(e)}, 400
        except StoreError:
            return _store_failure("create")

        logger.info("Customer created: %s", c.id)
        return c.to_dict(), 201

    def get(self, raw_id: str):
        customer_id = parse_customer_id(raw_id)
        if customer_id is None:
            return _bad_request(["Invalid customer ID."])
        try:
            c = self.store.select_by_id(customer_id)
        except StoreError:
            return _store_failure("read", customer_id)
        if c is None:
            return NOT_FOUND, 404
        return c.to_dict(), 200

    def update(self, raw_id: str, payload: Any):
        customer_id = parse_customer_id(raw_id)
        if customer_id is None:
            return _bad_request(["Invalid customer ID."])

        patch, errors = parse_customer_patch(payload)
        if errors:
            return _bad_request(errors)
        if patch.is_empty():
            return "", 304

        try:
            c = self.store.update_by_id(customer_id, patch)
        except StoreError:
            return _store_failure("update", customer_id)
        if c is None:
            return NOT_FOUND, 404

        logger.info("Customer %s updated (fields=%s)", customer_id, sorted(patch.changes()))
        return c.to_dict(), 200

    def delete(self, raw_id: str):
        customer_id = parse_customer_id(raw_id)
        if customer_id is None:
            return _bad_request(["Invalid customer ID."])
        try:
            found = self.store.delete_by_id(customer_id)
        except StoreError:
            return _store_failure("delete", customer_id)
        if not found:
            return NOT_FOUND, 404

        logger.info("Customer %s deleted", customer_id)
        return "", 204


def _handler() -> CustomerHandler:
    return current_app.extensions["customer_handler"]


@bp.post("")
def customers_create():
    return _handler().create(request.get_json(silent=True))


@bp.get("/<customer_id>")
def customers_get(customer_id: str):
    return _handler().get(customer_id)


@bp.put("/<customer_id>")
def customers_update(customer_id: str):
    return _handler().update(customer_id, request.get_json(silent=True))


@bp.delete("/<customer_id>")
def customers_delete(customer_id: str):
    return _handler().delete(customer_id)
