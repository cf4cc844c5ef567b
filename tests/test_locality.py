import json

import pytest

from depotapi.locality import (
    Locality,
    LocalityHandler,
    LocalityNotFoundError,
    LocalityService,
)
from depotapi.web import Request

SAN_LUIS = Locality(id="5700", locality_name="San Luis", province_name="San Luis", country_name="Argentina")
SANTIAGO = Locality(id="0001", locality_name="Santiago", province_name="Santiago", country_name="Chile")
SAN_LUIS_BODY = json.dumps(
    {"id": "5700", "locality_name": "San Luis", "province_name": "San Luis", "country_name": "Argentina"}
)


class _FailingService:
    """Stand-in service whose every operation raises the given exception."""

    def __init__(self, exc):
        self._exc = exc

    def __getattr__(self, name):
        def fail(*args, **kwargs):
            raise self._exc

        return fail


def _broken(exc):
    return LocalityHandler(_FailingService(exc))


def _handler():
    service = LocalityService(
        [SANTIAGO, SAN_LUIS],
        seller_localities=["5700", "5700", "5700"],
        carry_localities=["0001", "0001"],
    )
    return LocalityHandler(service)


@pytest.mark.parametrize(
    "query, expected",
    [
        ({"id": "0001"}, [{"locality_id": "0001", "locality_name": "Santiago", "carries_count": 2}]),
        (
            {},
            [
                {"locality_id": "0001", "locality_name": "Santiago", "carries_count": 2},
                {"locality_id": "5700", "locality_name": "San Luis", "carries_count": 0},
            ],
        ),
    ],
)
def test_report_carries(query, expected):
    response = _handler().get_report_carries(Request(query=query))
    assert response.status == 200
    assert response.body["data"] == expected


def test_report_sellers_ok():
    response = _handler().get_report_sellers(Request(query={"id": "5700"}))
    assert response.status == 200
    assert response.body["data"] == [
        {"locality_id": "5700", "locality_name": "San Luis", "sellers_count": 3}
    ]


def test_report_carries_not_found():
    response = _handler().get_report_carries(Request(query={"id": "9999"}))
    assert response.status == 404
    assert response.body["message"] == "locality not found"


def test_report_sellers_not_found():
    response = _broken(LocalityNotFoundError()).get_report_sellers(Request())
    assert response.status == 404
    assert response.body["message"] == "locality not found"


@pytest.mark.parametrize(
    "call, message",
    [
        (lambda handler: handler.get_report_carries(Request()), "internal error"),
        (lambda handler: handler.get_report_sellers(Request()), "internal error"),
        (lambda handler: handler.get(Request(params={"id": "1"})), "Error on Get"),
        (lambda handler: handler.create(Request(body=SAN_LUIS_BODY)), "internal error"),
    ],
)
def test_internal_errors(call, message):
    response = call(_broken(RuntimeError(message)))
    assert response.status == 500
    assert response.body["message"] == message


def test_get_ok():
    response = _handler().get(Request(params={"id": "5700"}))
    assert response.status == 200
    assert response.body["data"] == {
        "id": "5700",
        "locality_name": "San Luis",
        "province_name": "San Luis",
        "country_name": "Argentina",
    }


def test_get_not_found():
    response = _handler().get(Request(params={"id": "1534"}))
    assert response.status == 404
    assert response.body["message"] == "Id 1534 does not exist"


def test_create_ok():
    handler = LocalityHandler(LocalityService())
    response = handler.create(Request(body=SAN_LUIS_BODY))
    assert response.status == 201
    assert response.body["data"]["id"] == "5700"
    assert handler.service.get("5700") == SAN_LUIS


@pytest.mark.parametrize(
    "handler_factory, body, status, message",
    [
        (
            lambda: LocalityHandler(LocalityService()),
            json.dumps({"id": "5700", "locality_name": "San Luis", "country_name": "Argentina"}),
            400,
            "Bad Request, missing required fields",
        ),
        (_handler, SAN_LUIS_BODY, 409, "locality already exists"),
        (lambda: LocalityHandler(LocalityService()), "", 422, "EOF"),
    ],
)
def test_create_rejected(handler_factory, body, status, message):
    response = handler_factory().create(Request(body=body))
    assert response.status == status
    assert response.body["message"] == message


def test_create_wrong_type_is_unprocessable():
    body = '{"id": 5700, "locality_name": "a", "province_name": "b", "country_name": "c"}'
    response = LocalityHandler(LocalityService()).create(Request(body=body))
    assert response.status == 422


def test_service_get_unknown_raises():
    with pytest.raises(LocalityNotFoundError):
        LocalityService().get("1")