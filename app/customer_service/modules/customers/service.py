"""
Customer store.

The handler talks to persistence only through `CustomerStore`. Not-found is
a return value (`None` / `False`); failures are raised as `StoreError`, with
`DuplicateCustomerError` singled out for the unique email constraint so the
caller can treat it as a client error.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.customer_service.modules.customers.models import Customer

logger = logging.getLogger(__name__)


class StoreError(RuntimeError):
    pass


class DuplicateCustomerError(StoreError):
    pass


@dataclass(frozen=True)
class CustomerPatch:
    """Fields of a partial update. `None` means the field was not supplied."""

    name: str | None = None
    address: str | None = None

    def is_empty(self) -> bool:
        return self.name is None and self.address is None

    def changes(self) -> dict[str, str]:
        return {k: v for k, v in (("name", self.name), ("address", self.address)) if v is not None}


class CustomerStore:
    def insert(self, *, name: str, email: str, address: str | None = None) -> Customer:
        raise NotImplementedError

    def select_by_id(self, customer_id: int) -> Customer | None:
        raise NotImplementedError

    def update_by_id(self, customer_id: int, patch: CustomerPatch) -> Customer | None:
        raise NotImplementedError

    def delete_by_id(self, customer_id: int) -> bool:
        raise NotImplementedError


class SqlCustomerStore(CustomerStore):
    """SQLAlchemy-backed store. `session_factory` is usually the request-scoped `db_session`."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def insert(self, *, name: str, email: str, address: str | None = None) -> Customer:
        s = self._session_factory()
        c = Customer(name=name, email=email, address=address)
        s.add(c)
        try:
            s.commit()
        except IntegrityError as e:
            s.rollback()
            raise DuplicateCustomerError("Customer with this email already exists") from e
        except SQLAlchemyError as e:
            s.rollback()
            raise StoreError("insert failed") from e
        return c

    def select_by_id(self, customer_id: int) -> Customer | None:
        s = self._session_factory()
        try:
            return s.get(Customer, customer_id)
        except SQLAlchemyError as e:
            s.rollback()
            raise StoreError("select failed") from e

    def update_by_id(self, customer_id: int, patch: CustomerPatch) -> Customer | None:
        s = self._session_factory()
        try:
            c = s.get(Customer, customer_id)
            if c is None:
                return None
            for field, value in patch.changes().items():
                setattr(c, field, value)
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            raise StoreError("update failed") from e
        return c

    def delete_by_id(self, customer_id: int) -> bool:
        s = self._session_factory()
        try:
            result = s.execute(delete(Customer).where(Customer.id == customer_id))
            s.commit()
        except SQLAlchemyError as e:
            s.rollback()
            raise StoreError("delete failed") from e
        if result.rowcount == 0:
            logger.debug("delete matched no rows (customer_id=%s)", customer_id)
            return False
        return True
