import pytest

from depotapi.buyer import (
    Buyer,
    BuyerAlreadyExistsError,
    BuyerHandler,
    BuyerNotFoundError,
    BuyerService,
)
from depotapi.web import Request

NEW_BUYER = '{"card_number_id": "004", "first_name": "Comprador 4", "last_name": "Vendedor 4"}'


def _buyers():
    return [Buyer(n, f"00{n}", f"Comprador {n}", f"Vendedor {n}") for n in (1, 2, 3)]


class FailingService:
    def __init__(self, exc):
        self.exc = exc

    def _fail(self, *args):
        raise self.exc

    get = get_all = save = update = delete = _fail


@pytest.fixture
def handler():
    return BuyerHandler(BuyerService(_buyers()))


@pytest.mark.parametrize(
    "method, exc, params, body, status, message",
    [
        ("get_all", RuntimeError("db down"), {}, "", 500, "db down"),
        ("get", RuntimeError("boom"), {"id": "1"}, "", 500, "boom"),
        (
            "create",
            BuyerNotFoundError(),
            {},
            NEW_BUYER,
            404,
            "buyer created with no errors but not found in database",
        ),
        ("create", RuntimeError("internal"), {}, NEW_BUYER, 500, "internal"),
        ("delete", BuyerNotFoundError(), {"id": "1"}, "", 404, "buyer with id 1 not found"),
        ("delete", RuntimeError("x"), {"id": "2"}, "", 500, "x"),
        ("update", BuyerAlreadyExistsError(), {"id": "1"}, NEW_BUYER, 409, "buyer already exists"),
        ("update", BuyerNotFoundError(), {"id": "1"}, NEW_BUYER, 404, "buyer with id 1 not found"),
        ("update", RuntimeError(""), {"id": "1"}, NEW_BUYER, 500, ""),
    ],
)
def test_service_failures(method, exc, params, body, status, message):
    handler = BuyerHandler(FailingService(exc))
    response = getattr(handler, method)(Request(params=params, body=body))
    assert response.status == status
    assert response.body["message"] == message


@pytest.mark.parametrize("method, bad_id", [("get", "aaa"), ("delete", "aaa"), ("update", "aa")])
def test_invalid_id(handler, method, bad_id):
    response = getattr(handler, method)(Request(params={"id": bad_id}, body=NEW_BUYER))
    assert response.status == 400
    assert response.body["message"] == "invalid Id"


def test_get_all_success(handler):
    response = handler.get_all(Request())
    assert response.status == 200
    assert len(response.body["data"]) == 3


def test_get_success(handler):
    response = handler.get(Request(params={"id": "2"}))
    assert response.status == 200
    assert response.body["data"]["card_number_id"] == "002"


def test_get_not_found(handler):
    response = handler.get(Request(params={"id": "15"}))
    assert response.status == 404
    assert response.body["message"] == "buyer with 15 id not found"


def test_create_success(handler):
    response = handler.create(Request(body=NEW_BUYER))
    assert response.status == 201
    assert response.body["data"] == {
        "id": 4,
        "card_number_id": "004",
        "first_name": "Comprador 4",
        "last_name": "Vendedor 4",
    }


def test_create_empty_body(handler):
    assert handler.create(Request(body="")).status == 422


def test_create_already_exists(handler):
    body = '{"card_number_id": "002", "first_name": "Comprador 2", "last_name": "Vendedor 2"}'
    assert handler.create(Request(body=body)).status == 409


def test_delete_success(handler):
    response = handler.delete(Request(params={"id": "2"}))
    assert response.status == 204
    assert handler.get(Request(params={"id": "2"})).status == 404


def test_update_success(handler):
    response = handler.update(Request(params={"id": "2"}, body=NEW_BUYER))
    assert response.status == 200
    assert response.body["data"]["id"] == 2
    assert response.body["data"]["card_number_id"] == "004"


def test_update_unprocessable(handler):
    response = handler.update(Request(params={"id": "1"}, body='{"card_number_id": 004}'))
    assert response.status == 422


def test_service_update_keeps_unset_fields():
    service = BuyerService(_buyers())
    updated = service.update(Buyer(id=1, first_name="Nuevo"))
    assert updated == Buyer(1, "001", "Nuevo", "Vendedor 1")


def test_service_update_rejects_taken_card():
    service = BuyerService(_buyers())
    with pytest.raises(BuyerAlreadyExistsError):
        service.update(Buyer(id=1, card_number_id="003"))


def test_service_delete_missing():
    with pytest.raises(BuyerNotFoundError):
        BuyerService().delete(9)