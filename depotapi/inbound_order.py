"""Inbound orders: models, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, replace
from typing import Any, Callable, Collection, Iterable

from depotapi.employee import Employee
from depotapi.web import BindError, Request, Response, bind_json, error, parse_id, success

logger = logging.getLogger(__name__)


@dataclass
class InboundOrder:
    """An order of a product batch received into a warehouse by an employee."""

    id: int = 0
    order_date: str = ""
    order_number: str = ""
    employee_id: int = 0
    product_batch_id: int = 0
    warehouse_id: int = 0


@dataclass
class EmployeeWithInboundOrders(Employee):
    """An employee together with the number of inbound orders they handled."""

    inbound_orders_count: int = 0


class _InboundOrderError(Exception):
    default_message = ""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(self.default_message if message is None else message)


class InboundOrderAlreadyExistsError(_InboundOrderError, ValueError):
    """Another inbound order already has the order number."""

    default_message = "inbound order with this order number already exists"


class InboundOrderNotSavedError(_InboundOrderError, RuntimeError):
    """The inbound order could not be stored."""

    default_message = "inbound order could not be saved"


class EmptyOrderNumberError(_InboundOrderError, ValueError):
    """The order number is empty."""

    default_message = "order number cannot be empty"


class EmployeeNonExistentError(_InboundOrderError, LookupError):
    """The referenced employee does not exist."""

    default_message = "employee does not exist"


class WarehouseNonExistentError(_InboundOrderError, LookupError):
    """The referenced warehouse does not exist."""

    default_message = "warehouse does not exist"


class ProductBatchNonExistentError(_InboundOrderError, LookupError):
    """The referenced product batch does not exist."""

    default_message = "product batch does not exist"


class EmployeeWithInboundOrdersNotFoundError(_InboundOrderError, LookupError):
    """No employee has the requested id."""

    default_message = "employee with inbound orders not found"


_POST_FIELDS = {
    "order_date": (str, "OrderDate", True),
    "order_number": (str, "OrderNumber", True),
    "employee_id": (int, "EmployeeID", True),
    "product_batch_id": (int, "ProductBatchID", True),
    "warehouse_id": (int, "WarehouseID", True),
}


class InboundOrderService:
    """In-memory inbound order store.

    Employees are always checked; ``warehouse_ids`` and ``product_batch_ids``
    limit the accepted references, ``None`` accepting any.
    """

    def __init__(
        self,
        inbound_orders: Iterable[InboundOrder] = (),
        employees: Iterable[Employee] = (),
        warehouse_ids: Collection[int] | None = None,
        product_batch_ids: Collection[int] | None = None,
    ) -> None:
        self._orders = {o.id: replace(o) for o in inbound_orders}
        self._employees = {e.id: replace(e) for e in employees}
        self._warehouse_ids = None if warehouse_ids is None else set(warehouse_ids)
        self._product_batch_ids = None if product_batch_ids is None else set(product_batch_ids)

    def save(self, order: InboundOrder) -> InboundOrder:
        if not order.order_number:
            raise EmptyOrderNumberError()
        if any(o.order_number == order.order_number for o in self._orders.values()):
            raise InboundOrderAlreadyExistsError()
        if order.employee_id not in self._employees:
            raise EmployeeNonExistentError()
        for allowed, value, problem in (
            (self._warehouse_ids, order.warehouse_id, WarehouseNonExistentError),
            (self._product_batch_ids, order.product_batch_id, ProductBatchNonExistentError),
        ):
            if allowed is not None and value not in allowed:
                raise problem()
        new_id = max(self._orders, default=0) + 1
        stored = replace(order, id=new_id)
        self._orders[new_id] = stored
        return replace(stored)

    def _report(self, employee: Employee) -> EmployeeWithInboundOrders:
        count = sum(1 for o in self._orders.values() if o.employee_id == employee.id)
        return EmployeeWithInboundOrders(**asdict(employee), inbound_orders_count=count)

    def get_all_employees_inbound_orders(self) -> list[EmployeeWithInboundOrders]:
        return [self._report(e) for e in self._employees.values()]

    def get_employee_inbound_orders(self, employee_id: int) -> EmployeeWithInboundOrders:
        employee = self._employees.get(employee_id)
        if employee is None:
            raise EmployeeWithInboundOrdersNotFoundError()
        return self._report(employee)


_CREATE_STATUSES = {
    BindError: 422,
    InboundOrderAlreadyExistsError: 409,
    EmptyOrderNumberError: 409,
    EmployeeNonExistentError: 404,
    WarehouseNonExistentError: 404,
    ProductBatchNonExistentError: 404,
}


def _fail(status: int, message: str) -> Response:
    logger.error(message)
    return error(status, message)


def _respond(call: Callable[[], Any], ok_status: int, statuses: dict) -> Response:
    """Run ``call``; a raised error listed in ``statuses`` gets its status, others 500."""
    try:
        data = call()
    except Exception as exc:
        status = next((code for kind, code in statuses.items() if isinstance(exc, kind)), 500)
        return _fail(status, str(exc))
    return success(ok_status, data)


class InboundOrderHandler:
    """Maps inbound order requests to the service and errors to statuses."""

    def __init__(self, service: InboundOrderService) -> None:
        self.service = service

    def get_all_employees_inbound_orders(self, request: Request) -> Response:
        return _respond(
            lambda: list(self.service.get_all_employees_inbound_orders() or []), 200, {}
        )

    def get_employee_inbound_orders(self, request: Request) -> Response:
        try:
            employee_id = parse_id(request.params.get("id", ""))
        except ValueError:
            return _fail(400, "invalid id")
        return _respond(
            lambda: self.service.get_employee_inbound_orders(employee_id),
            200,
            {EmployeeWithInboundOrdersNotFoundError: 404},
        )

    def create(self, request: Request) -> Response:
        return _respond(
            lambda: self.service.save(
                InboundOrder(**bind_json(request.body, _POST_FIELDS, "InboundOrderDTOPOST"))
            ),
            201,
            _CREATE_STATUSES,
        )