from __future__ import annotations

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def load_all_models() -> None:
    """
    Import every module's models so Base.metadata includes their tables.
    Not done at import time: module models import `Base` from here.
    """
    import app.customer_service.modules.customers.models  # noqa: F401
