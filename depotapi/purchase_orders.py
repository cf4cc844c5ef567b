"""Purchase orders: models, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Collection, Iterable

from depotapi.buyer import Buyer
from depotapi.web import BindError, Request, Response, bind_json, error, parse_id, success

logger = logging.getLogger(__name__)

BODY_VALIDATION_MESSAGE = "invalid body: required fields are missing or have the wrong type"


@dataclass
class PurchaseOrder:
    """An order placed by a buyer for a product record."""

    id: int = 0
    order_number: str = ""
    order_date: str = ""
    tracking_code: str = ""
    buyer_id: int = 0
    product_record_id: int = 0
    order_status_id: int = 0


@dataclass
class PurchaseOrdersByBuyer(Buyer):
    """A buyer together with the number of purchase orders they placed."""

    purchase_orders_count: int = 0


class PurchaseOrderAlreadyExistsError(ValueError):
    """Another purchase order already has the order number."""

    def __init__(self, message: str = "order_number already exists") -> None:
        super().__init__(message)


class PurchaseOrderForeignKeyError(LookupError):
    """A referenced buyer, product record or order status does not exist."""

    def __init__(
        self, message: str = "buyer_id, product_record_id or order_status_id does not exist"
    ) -> None:
        super().__init__(message)


class PurchaseOrderDataTooLongError(ValueError):
    """A field exceeds the allowed length."""

    def __init__(self, message: str = "data too long for field") -> None:
        super().__init__(message)


class PurchaseOrderNotFoundError(LookupError):
    """No buyer has the requested id."""

    def __init__(self, message: str = "buyer not found") -> None:
        super().__init__(message)


_POST_FIELDS = {
    "id": (int, "ID", False),
    "order_number": (str, "OrderNumber", True),
    "order_date": (str, "OrderDate", True),
    "tracking_code": (str, "TrackingCode", True),
    "buyer_id": (int, "BuyerId", True),
    "product_record_id": (int, "ProductRecordId", True),
    "order_status_id": (int, "OrderStatusId", True),
}


class PurchaseOrderService:
    """In-memory purchase order store.

    Buyers are always checked; ``product_record_ids`` and ``order_status_ids``
    limit the accepted references, ``None`` accepting any.
    """

    def __init__(
        self,
        orders: Iterable[PurchaseOrder] = (),
        buyers: Iterable[Buyer] = (),
        product_record_ids: Collection[int] | None = None,
        order_status_ids: Collection[int] | None = None,
        max_field_length: int = 255,
    ) -> None:
        self._orders = {o.id: replace(o) for o in orders}
        self._buyers = {b.id: replace(b) for b in buyers}
        self._product_record_ids = None if product_record_ids is None else set(product_record_ids)
        self._order_status_ids = None if order_status_ids is None else set(order_status_ids)
        self._max_field_length = max_field_length

    def save_order(self, order: PurchaseOrder) -> PurchaseOrder:
        texts = (order.order_number, order.order_date, order.tracking_code)
        if any(len(text) > self._max_field_length for text in texts):
            raise PurchaseOrderDataTooLongError()
        if any(o.order_number == order.order_number for o in self._orders.values()):
            raise PurchaseOrderAlreadyExistsError()
        if (
            order.buyer_id not in self._buyers
            or (
                self._product_record_ids is not None
                and order.product_record_id not in self._product_record_ids
            )
            or (
                self._order_status_ids is not None
                and order.order_status_id not in self._order_status_ids
            )
        ):
            raise PurchaseOrderForeignKeyError()
        new_id = max(self._orders, default=0) + 1
        stored = replace(order, id=new_id)
        self._orders[new_id] = stored
        return replace(stored)

    def _report(self, buyer: Buyer) -> PurchaseOrdersByBuyer:
        count = sum(1 for o in self._orders.values() if o.buyer_id == buyer.id)
        return PurchaseOrdersByBuyer(**asdict(buyer), purchase_orders_count=count)

    def get_all_by_buyer(self, buyer_id: int = 0) -> list[PurchaseOrdersByBuyer]:
        """Report every buyer when ``buyer_id`` is 0, otherwise just that one."""
        if buyer_id == 0:
            return [self._report(b) for b in self._buyers.values()]
        buyer = self._buyers.get(buyer_id)
        if buyer is None:
            raise PurchaseOrderNotFoundError()
        return [self._report(buyer)]


def _fail(status: int, message: str) -> Response:
    logger.error(message)
    return error(status, message)


class PurchaseOrderHandler:
    """Maps purchase order requests to the service and errors to statuses."""

    def __init__(self, service: PurchaseOrderService) -> None:
        self.service = service

    def create_order(self, request: Request) -> Response:
        try:
            values = bind_json(request.body, _POST_FIELDS, "RequestPurchaseOrdersPost")
        except BindError:
            return _fail(422, BODY_VALIDATION_MESSAGE)
        values["id"] = values["id"] or 0
        try:
            created = self.service.save_order(PurchaseOrder(**values))
        except (PurchaseOrderAlreadyExistsError, PurchaseOrderForeignKeyError) as exc:
            return _fail(409, str(exc))
        except PurchaseOrderDataTooLongError as exc:
            return _fail(422, str(exc))
        except Exception as exc:
            return _fail(500, str(exc))
        return success(201, created)

    def get_all_orders_by_buyers(self, request: Request) -> Response:
        text = request.query.get("id", "")
        buyer_id = 0
        if text:
            try:
                buyer_id = parse_id(text)
            except ValueError:
                return _fail(400, "invalid Id")
        try:
            report = self.service.get_all_by_buyer(buyer_id)
        except PurchaseOrderNotFoundError as exc:
            return _fail(404, str(exc))
        except Exception as exc:
            return _fail(500, str(exc))
        return success(200, report)