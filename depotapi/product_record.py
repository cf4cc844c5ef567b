"""Product records: model, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import date
from typing import Callable, Collection, Iterable

from depotapi.web import (
    Request,
    Response,
    TypeMismatchError,
    ValidationError,
    bind_json,
    error,
    success,
)

logger = logging.getLogger(__name__)

CREATED_BUT_NOT_FOUND_MESSAGE = "product created with no errors but not found in database"
DATE_IN_PAST_MESSAGE = "input date cannot be less than today"
INVALID_DATE_MESSAGE = "invalid input date"


@dataclass
class ProductRecord:
    """A price record of a product at a given date (YYYY-MM-DD)."""

    id: int = 0
    last_update_date: str = ""
    purchase_price: float = 0.0
    sale_price: float = 0.0
    product_id: int = 0


class RecordDateError(ValueError):
    """The record date lies before today."""

    def __init__(self, message: str = "last update date is before today") -> None:
        super().__init__(message)


class RecordForeignKeyNotFoundError(LookupError):
    """The referenced product does not exist."""

    def __init__(self, message: str = "product_id does not exist") -> None:
        super().__init__(message)


class RecordNotFoundError(LookupError):
    """No product record has the requested id."""

    def __init__(self, message: str = "product record not found") -> None:
        super().__init__(message)


class _MalformedDateError(Exception):
    """The requested date is not a valid YYYY-MM-DD date."""


_POST_FIELDS = {
    "last_update_date": (str, "LastUpdateDate", True),
    "purchase_price": (float, "PurchasePrice", True),
    "sale_price": (float, "SalePrice", True),
    "product_id": (int, "ProductID", True),
}

# Status and client message per failure; None keeps the exception's text.
_FAILURES = {
    ValidationError: (422, None),
    TypeMismatchError: (422, None),
    _MalformedDateError: (400, INVALID_DATE_MESSAGE),
    RecordDateError: (409, DATE_IN_PAST_MESSAGE),
    RecordForeignKeyNotFoundError: (409, None),
    RecordNotFoundError: (404, CREATED_BUT_NOT_FOUND_MESSAGE),
}


def _parse_date(text: str) -> date:
    """Parse a strict YYYY-MM-DD date, raising ValueError otherwise."""
    if len(text) != 10:
        raise ValueError(f"invalid date: {text!r}")
    return date.fromisoformat(text)


class ProductRecordService:
    """In-memory product record store.

    ``product_ids`` limits the accepted products, ``None`` accepting any;
    ``today`` supplies the current date.
    """

    def __init__(
        self,
        records: Iterable[ProductRecord] = (),
        product_ids: Collection[int] | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._records = {r.id: replace(r) for r in records}
        self._product_ids = None if product_ids is None else set(product_ids)
        self._today = today

    def get(self, record_id: int) -> ProductRecord:
        if record_id not in self._records:
            raise RecordNotFoundError()
        return replace(self._records[record_id])

    def save(self, record: ProductRecord) -> ProductRecord:
        if _parse_date(record.last_update_date) < self._today():
            raise RecordDateError()
        if self._product_ids is not None and record.product_id not in self._product_ids:
            raise RecordForeignKeyNotFoundError()
        new_id = max(self._records, default=0) + 1
        self._records[new_id] = replace(record, id=new_id)
        return self.get(new_id)


class ProductRecordHandler:
    """Maps product record requests to the service and errors to statuses."""

    def __init__(self, service: ProductRecordService) -> None:
        self.service = service

    def _save(self, request: Request) -> ProductRecord:
        values = bind_json(request.body, _POST_FIELDS, "ProductRecordPOSTRequest")
        try:
            _parse_date(values["last_update_date"])
        except ValueError as exc:
            raise _MalformedDateError(str(exc)) from exc
        return self.service.save(ProductRecord(**values))

    def create(self, request: Request) -> Response:
        try:
            created = self._save(request)
        except Exception as exc:
            logger.error(exc)
            status, message = next(
                (outcome for kind, outcome in _FAILURES.items() if isinstance(exc, kind)),
                # Internal details are not exposed to the client.
                (500, ""),
            )
            return error(status, str(exc) if message is None else message)
        return success(201, created)