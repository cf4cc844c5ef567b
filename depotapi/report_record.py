"""Report of product records per product: model, service and HTTP handler."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from typing import Iterable

from depotapi.product import Product
from depotapi.product_record import ProductRecord
from depotapi.web import Request, Response, error, parse_id, success

logger = logging.getLogger(__name__)

INVALID_ID_MESSAGE = "invalid ID"
NOT_FOUND_MESSAGE = "product not found"


@dataclass
class ReportRecord:
    """Number of price records registered for a product."""

    product_id: int = 0
    description: str = ""
    records_count: int = 0


class ReportRecordNotFoundError(LookupError):
    """No product has the requested id."""

    def __init__(self, message: str = "product not found") -> None:
        super().__init__(message)


class ReportRecordService:
    """Builds record reports from products and their records."""

    def __init__(
        self,
        products: Iterable[Product] = (),
        records: Iterable[ProductRecord] = (),
    ) -> None:
        self._products = {p.id: replace(p) for p in products}
        self._counts = Counter(r.product_id for r in records)

    def _report(self, product: Product) -> ReportRecord:
        return ReportRecord(product.id, product.description, self._counts[product.id])

    def get(self, product_id: int | None = None) -> list[ReportRecord]:
        """Report every product when ``product_id`` is None, otherwise just that one."""
        if product_id is None:
            return [self._report(p) for p in self._products.values()]
        product = self._products.get(product_id)
        if product is None:
            raise ReportRecordNotFoundError()
        return [self._report(product)]


def _fail(status: int, message: str, cause: object) -> Response:
    logger.error(cause)
    return error(status, message)


class ReportRecordHandler:
    """Maps report requests to the service and errors to statuses."""

    def __init__(self, service: ReportRecordService) -> None:
        self.service = service

    def get_report_records(self, request: Request) -> Response:
        text = request.query.get("id", "")
        product_id = None
        if text:
            try:
                product_id = parse_id(text)
            except ValueError as exc:
                return _fail(400, INVALID_ID_MESSAGE, exc)
        try:
            reports = self.service.get(product_id)
        except ReportRecordNotFoundError as exc:
            return _fail(404, NOT_FOUND_MESSAGE, exc)
        except Exception as exc:
            # Internal details are not exposed to the client.
            return _fail(500, "", exc)
        return success(200, list(reports or []))