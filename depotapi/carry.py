"""Carries: model, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Collection, Iterable

from depotapi.web import BindError, Request, Response, bind_json, error, success

logger = logging.getLogger(__name__)

BODY_VALIDATION_MESSAGE = "invalid body: all fields are required and must be strings"


@dataclass
class Carry:
    """A carrier company serving a locality."""

    id: int = 0
    cid: str = ""
    company_name: str = ""
    address: str = ""
    telephone: str = ""
    locality_id: str = ""


class CarryAlreadyExistsError(ValueError):
    """A carry with the same cid already exists."""

    def __init__(self, message: str = "carry with this cid already exists") -> None:
        super().__init__(message)


class CarryForeignKeyError(LookupError):
    """The referenced locality does not exist."""

    def __init__(self, message: str = "locality_id does not exist") -> None:
        super().__init__(message)


class CarryDataTooLongError(ValueError):
    """A field exceeds the allowed length."""

    def __init__(self, message: str = "data too long for field") -> None:
        super().__init__(message)


_POST_FIELDS = {
    "cid": (str, "CID", True),
    "company_name": (str, "CompanyName", True),
    "address": (str, "Address", True),
    "telephone": (str, "Telephone", True),
    "locality_id": (str, "Locality_id", True),
}


class CarryService:
    """In-memory carry store.

    ``localities`` limits the accepted locality ids; ``None`` accepts any.
    """

    def __init__(
        self,
        carries: Iterable[Carry] = (),
        localities: Collection[str] | None = None,
        max_field_length: int = 255,
    ) -> None:
        self._carries = {c.id: replace(c) for c in carries}
        self._localities = None if localities is None else set(localities)
        self._max_field_length = max_field_length

    def save(
        self, cid: str, company_name: str, address: str, telephone: str, locality_id: str
    ) -> Carry:
        fields = (cid, company_name, address, telephone, locality_id)
        if any(len(value) > self._max_field_length for value in fields):
            raise CarryDataTooLongError()
        if any(c.cid == cid for c in self._carries.values()):
            raise CarryAlreadyExistsError()
        if self._localities is not None and locality_id not in self._localities:
            raise CarryForeignKeyError()
        new_id = max(self._carries, default=0) + 1
        carry = Carry(new_id, cid, company_name, address, telephone, locality_id)
        self._carries[new_id] = carry
        return replace(carry)


class CarryHandler:
    """Maps carry requests to the service and errors to statuses."""

    def __init__(self, service: CarryService) -> None:
        self.service = service

    def save(self, request: Request) -> Response:
        try:
            values = bind_json(request.body, _POST_FIELDS, "CarryPostRequest")
        except BindError:
            logger.error(BODY_VALIDATION_MESSAGE)
            return error(422, BODY_VALIDATION_MESSAGE)
        try:
            created = self.service.save(**values)
        except (CarryAlreadyExistsError, CarryForeignKeyError) as exc:
            logger.error(exc)
            return error(409, str(exc))
        except CarryDataTooLongError as exc:
            logger.error(exc)
            return error(422, str(exc))
        except Exception as exc:
            logger.error(exc)
            return error(500, str(exc))
        return success(201, created)