"""Localities: models, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, replace
from typing import Callable, Iterable

from depotapi.web import (
    BindError,
    Request,
    Response,
    ValidationError,
    bind_json,
    error,
    success,
)

logger = logging.getLogger(__name__)


@dataclass
class Locality:
    """A locality within a province and country."""

    id: str = ""
    locality_name: str = ""
    province_name: str = ""
    country_name: str = ""


@dataclass
class ReportCarries:
    """Number of carries registered in a locality."""

    locality_id: str = ""
    locality_name: str = ""
    carries_count: int = 0


@dataclass
class ReportSellers:
    """Number of sellers registered in a locality."""

    locality_id: str = ""
    locality_name: str = ""
    sellers_count: int = 0


class LocalityNotFoundError(LookupError):
    """No locality has the requested id."""

    def __init__(self, message: str = "locality not found") -> None:
        super().__init__(message)


class LocalityAlreadyExistsError(ValueError):
    """A locality with the id already exists."""

    def __init__(self, message: str = "locality already exists") -> None:
        super().__init__(message)


_POST_FIELDS = {
    "id": (str, "ID", True),
    "locality_name": (str, "LocalityName", True),
    "province_name": (str, "ProvinceName", True),
    "country_name": (str, "CountryName", True),
}


class LocalityService:
    """In-memory locality store.

    ``seller_localities`` and ``carry_localities`` hold one locality id per
    registered seller or carry.
    """

    def __init__(
        self,
        localities: Iterable[Locality] = (),
        seller_localities: Iterable[str] = (),
        carry_localities: Iterable[str] = (),
    ) -> None:
        self._localities = {loc.id: replace(loc) for loc in localities}
        self._sellers = Counter(seller_localities)
        self._carries = Counter(carry_localities)

    def get(self, locality_id: str) -> Locality:
        try:
            return replace(self._localities[locality_id])
        except KeyError:
            raise LocalityNotFoundError() from None

    def create(self, locality: Locality) -> Locality:
        if locality.id in self._localities:
            raise LocalityAlreadyExistsError()
        self._localities[locality.id] = replace(locality)
        return self.get(locality.id)

    def _select(self, locality_id: str | None) -> list[Locality]:
        if locality_id is None:
            return [replace(loc) for loc in self._localities.values()]
        return [self.get(locality_id)]

    def report_sellers(self, locality_id: str | None = None) -> list[ReportSellers]:
        return [
            ReportSellers(loc.id, loc.locality_name, self._sellers[loc.id])
            for loc in self._select(locality_id)
        ]

    def report_carries(self, locality_id: str | None = None) -> list[ReportCarries]:
        return [
            ReportCarries(loc.id, loc.locality_name, self._carries[loc.id])
            for loc in self._select(locality_id)
        ]


def _fail(status: int, message: str, *args: object) -> Response:
    response = error(status, message, *args)
    logger.error(response.body["message"])
    return response


class LocalityHandler:
    """Maps locality requests to the service and errors to statuses."""

    def __init__(self, service: LocalityService) -> None:
        self.service = service

    def _report(self, request: Request, fetch: Callable[[str | None], list]) -> Response:
        locality_id = request.query.get("id", "") or None
        try:
            report = fetch(locality_id)
        except LocalityNotFoundError as exc:
            return _fail(404, str(exc))
        except Exception as exc:
            return _fail(500, str(exc))
        return success(200, report)

    def get_report_carries(self, request: Request) -> Response:
        return self._report(request, self.service.report_carries)

    def get_report_sellers(self, request: Request) -> Response:
        return self._report(request, self.service.report_sellers)

    def get(self, request: Request) -> Response:
        locality_id = request.params.get("id", "")
        try:
            found = self.service.get(locality_id)
        except LocalityNotFoundError:
            return _fail(404, "Id %s does not exist", locality_id)
        except Exception as exc:
            return _fail(500, str(exc))
        return success(200, found)

    def create(self, request: Request) -> Response:
        try:
            values = bind_json(request.body, _POST_FIELDS, "Locality")
        except ValidationError:
            return _fail(400, "Bad Request, missing required fields")
        except BindError as exc:
            return _fail(422, str(exc))
        try:
            created = self.service.create(Locality(**values))
        except LocalityAlreadyExistsError as exc:
            return _fail(409, str(exc))
        except Exception as exc:
            return _fail(500, str(exc))
        return success(201, created)