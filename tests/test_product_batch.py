import json

import pytest

from depotapi.product_batch import (
    InvalidDateError,
    ProductBatch,
    ProductBatchHandler,
    ProductBatchService,
)
from depotapi.web import Request

DEFAULT_BATCH = {
    "batch_number": 1,
    "current_quantity": 1,
    "current_temperature": 1,
    "due_date": "1999-12-12",
    "initial_quantity": 1,
    "manufacturing_date": "1999-12-12",
    "manufacturing_hour": 1,
    "minimum_temperature": 1,
    "product_id": 1,
    "section_id": 1,
}


class _FailingService:
    """Stand-in service whose every operation raises the given exception."""

    def __init__(self, exc):
        self._exc = exc

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise self._exc

        return fail


def _body(**overrides):
    return Request(body=json.dumps({**DEFAULT_BATCH, **overrides}))


def test_create_ok():
    response = ProductBatchHandler(ProductBatchService()).create(_body())
    assert response.status == 201
    assert response.body["data"] == {"id": 1, **DEFAULT_BATCH}


def test_create_empty_body():
    response = ProductBatchHandler(ProductBatchService()).create(Request())
    assert response.status == 422


def test_create_invalid_date():
    request = _body(due_date="kadmfdkls", manufacturing_date="llcsmd")
    response = ProductBatchHandler(ProductBatchService()).create(request)
    assert response.status == 400
    assert response.body["message"] == "invalid date value"


@pytest.mark.parametrize(
    "make_service, overrides, message",
    [
        (
            lambda: ProductBatchService([ProductBatch(id=1, batch_number=4)]),
            {},
            "a product batch with the batch_number 4 already exists",
        ),
        (lambda: ProductBatchService(product_ids={1}), {"product_id": 2}, "product_id does not exist"),
        (lambda: ProductBatchService(section_ids={1}), {"section_id": 2}, "section_id does not exist"),
    ],
)
def test_create_conflict(make_service, overrides, message):
    response = ProductBatchHandler(make_service()).create(_body(batch_number=4, **overrides))
    assert response.status == 409
    assert response.body["message"] == message


def test_create_internal():
    service = _FailingService(RuntimeError("internal error"))
    response = ProductBatchHandler(service).create(_body(batch_number=4))
    assert response.status == 500
    assert response.body["message"] == "internal error"


def test_service_rejects_bad_date():
    with pytest.raises(InvalidDateError):
        ProductBatchService().create(ProductBatch(due_date="2022-13-40", manufacturing_date="2022-01-01"))