import pytest

from depotapi.employee import Employee
from depotapi.inbound_order import (
    EmployeeWithInboundOrdersNotFoundError,
    InboundOrder,
    InboundOrderHandler,
    InboundOrderNotSavedError,
    InboundOrderService,
)
from depotapi.web import Request

EMPLOYEE = Employee(id=1, card_number_id="123456", first_name="John", last_name="Doe", warehouse_id=1)
EXISTING = InboundOrder(
    id=1, order_date="01/01/2022", order_number="Test#1", employee_id=1, product_batch_id=1, warehouse_id=1
)
BODY = (
    '{"order_date": "01/01/2022", "order_number": "%s", "employee_id": %d, '
    '"product_batch_id": %d, "warehouse_id": %d}'
)


class _FailingService:
    """Stand-in service whose every operation raises the given exception."""

    def __init__(self, exc):
        self._exc = exc

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise self._exc

        return fail


def _failing_handler(exc):
    return InboundOrderHandler(_FailingService(exc))


def _handler(**kwargs):
    kwargs.setdefault("employees", [EMPLOYEE])
    return InboundOrderHandler(InboundOrderService(**kwargs))


def _post(handler, number="Test#1", employee=1, batch=1, warehouse=1):
    return handler.create(Request(body=BODY % (number, employee, batch, warehouse)))


def test_save_ok():
    response = _post(_handler())
    assert response.status == 201
    assert response.body["data"] == {
        "id": 1,
        "order_date": "01/01/2022",
        "order_number": "Test#1",
        "employee_id": 1,
        "product_batch_id": 1,
        "warehouse_id": 1,
    }


def test_save_missing_field():
    handler = _handler(inbound_orders=[EXISTING])
    body = '{"order_number": "Test#1", "employee_id": 1, "product_batch_id": 1, "warehouse_id": 1}'
    response = handler.create(Request(body=body))
    assert response.status == 422
    assert "OrderDate" in response.body["message"]


@pytest.mark.parametrize(
    "service_kwargs, order, status, message",
    [
        ({"inbound_orders": [EXISTING]}, {}, 409, "inbound order with this order number already exists"),
        ({}, {"number": ""}, 409, "order number cannot be empty"),
        ({}, {"employee": 10}, 404, "employee does not exist"),
        ({"warehouse_ids": {1}}, {"warehouse": 10}, 404, "warehouse does not exist"),
        ({"product_batch_ids": {1}}, {"batch": 10}, 404, "product batch does not exist"),
    ],
)
def test_save_rejected(service_kwargs, order, status, message):
    response = _post(_handler(**service_kwargs), **order)
    assert response.status == status
    assert response.body["message"] == message


@pytest.mark.parametrize(
    "exc, call, message",
    [
        (InboundOrderNotSavedError(), _post, "inbound order could not be saved"),
        (
            RuntimeError("error"),
            lambda handler: handler.get_all_employees_inbound_orders(Request()),
            "error",
        ),
    ],
)
def test_service_errors_are_internal(exc, call, message):
    response = call(_failing_handler(exc))
    assert response.status == 500
    assert response.body["message"] == message


def test_get_all_employees_inbound_orders():
    response = _handler(inbound_orders=[EXISTING]).get_all_employees_inbound_orders(Request())
    assert response.status == 200
    assert response.body["data"] == [
        {
            "id": 1,
            "card_number_id": "123456",
            "first_name": "John",
            "last_name": "Doe",
            "warehouse_id": 1,
            "inbound_orders_count": 1,
        }
    ]


def test_get_employee_inbound_orders():
    handler = _handler(inbound_orders=[EXISTING])
    response = handler.get_employee_inbound_orders(Request(params={"id": "1"}))
    assert response.status == 200
    assert response.body["data"]["inbound_orders_count"] == 1
    assert response.body["data"]["first_name"] == "John"


@pytest.mark.parametrize(
    "employee_id, status, message",
    [
        ("10", 404, "employee with inbound orders not found"),
        ("thisIsAnInvalidID", 400, "invalid id"),
    ],
)
def test_get_employee_inbound_orders_errors(employee_id, status, message):
    response = _handler().get_employee_inbound_orders(Request(params={"id": employee_id}))
    assert response.status == status
    assert response.body["message"] == message


def test_service_report_raises_for_unknown_employee():
    with pytest.raises(EmployeeWithInboundOrdersNotFoundError):
        InboundOrderService(employees=[EMPLOYEE]).get_employee_inbound_orders(2)


def test_service_assigns_increasing_ids():
    service = InboundOrderService(employees=[EMPLOYEE])
    first = service.save(InboundOrder(order_number="A", employee_id=1))
    second = service.save(InboundOrder(order_number="B", employee_id=1))
    assert (first.id, second.id) == (1, 2)