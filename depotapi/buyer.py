"""Buyers: model, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable

from depotapi.web import BindError, Request, Response, bind_json, error, parse_id, success

logger = logging.getLogger(__name__)


@dataclass
class Buyer:
    """A buyer identified by a unique card number."""

    id: int = 0
    card_number_id: str = ""
    first_name: str = ""
    last_name: str = ""


class BuyerNotFoundError(LookupError):
    """No buyer has the requested id."""

    def __init__(self, message: str = "buyer not found") -> None:
        super().__init__(message)


class BuyerAlreadyExistsError(ValueError):
    """Another buyer already has the card number."""

    def __init__(self, message: str = "buyer already exists") -> None:
        super().__init__(message)


_FIELD_NAMES = {"card_number_id": "CardNumberID", "first_name": "FirstName", "last_name": "LastName"}
_POST_FIELDS = {key: (str, name, True) for key, name in _FIELD_NAMES.items()}
_PATCH_FIELDS = {key: (str, name, False) for key, name in _FIELD_NAMES.items()}


class BuyerService:
    """In-memory buyer store with unique card numbers."""

    def __init__(self, buyers: Iterable[Buyer] = ()) -> None:
        self._buyers = {buyer.id: replace(buyer) for buyer in buyers}

    def _card_taken(self, card_number_id: str, exclude_id: int | None = None) -> bool:
        return any(
            b.card_number_id == card_number_id and b.id != exclude_id
            for b in self._buyers.values()
        )

    def get(self, buyer_id: int) -> Buyer:
        if buyer_id not in self._buyers:
            raise BuyerNotFoundError()
        return replace(self._buyers[buyer_id])

    def get_all(self) -> list[Buyer]:
        return [replace(b) for b in self._buyers.values()]

    def save(self, buyer: Buyer) -> Buyer:
        if self._card_taken(buyer.card_number_id):
            raise BuyerAlreadyExistsError()
        new_id = max(self._buyers, default=0) + 1
        self._buyers[new_id] = replace(buyer, id=new_id)
        return self.get(new_id)

    def update(self, buyer: Buyer) -> Buyer:
        current = self.get(buyer.id)
        if buyer.card_number_id and self._card_taken(buyer.card_number_id, buyer.id):
            raise BuyerAlreadyExistsError()
        changes = {name: getattr(buyer, name) for name in _FIELD_NAMES if getattr(buyer, name)}
        self._buyers[buyer.id] = replace(current, **changes)
        return self.get(buyer.id)

    def delete(self, buyer_id: int) -> None:
        if self._buyers.pop(buyer_id, None) is None:
            raise BuyerNotFoundError()


class BuyerHandler:
    """Maps buyer requests to service calls and service errors to statuses."""

    def __init__(self, service: BuyerService) -> None:
        self.service = service

    @staticmethod
    def _reject(status: int, message: str) -> Response:
        logger.error(message)
        return error(status, message)

    def _respond(self, action: Callable[[], Any], ok_status: int, not_found_message: str) -> Response:
        try:
            data = action()
        except BindError as exc:
            return self._reject(422, str(exc))
        except BuyerAlreadyExistsError as exc:
            return self._reject(409, str(exc))
        except BuyerNotFoundError:
            return self._reject(404, not_found_message)
        except Exception as exc:
            return self._reject(500, str(exc))
        return success(ok_status, data)

    def _for_id(
        self,
        request: Request,
        action: Callable[[int], Any],
        ok_status: int,
        not_found_template: str,
    ) -> Response:
        try:
            buyer_id = parse_id(request.params.get("id", ""))
        except ValueError:
            return self._reject(400, "invalid Id")
        return self._respond(
            lambda: action(buyer_id), ok_status, not_found_template.format(buyer_id)
        )

    def get(self, request: Request) -> Response:
        return self._for_id(request, self.service.get, 200, "buyer with {} id not found")

    def get_all(self, request: Request) -> Response:
        try:
            buyers = self.service.get_all()
        except Exception as exc:
            return self._reject(500, str(exc))
        return success(200, list(buyers or []))

    def create(self, request: Request) -> Response:
        return self._respond(
            lambda: self.service.save(
                Buyer(**bind_json(request.body, _POST_FIELDS, "RequestBuyerPost"))
            ),
            201,
            "buyer created with no errors but not found in database",
        )

    def update(self, request: Request) -> Response:
        def patch(buyer_id: int) -> Buyer:
            values = bind_json(request.body, _PATCH_FIELDS, "RequestBuyerPatch")
            return self.service.update(
                Buyer(id=buyer_id, **{k: v or "" for k, v in values.items()})
            )

        return self._for_id(request, patch, 200, "buyer with id {} not found")

    def delete(self, request: Request) -> Response:
        def remove(buyer_id: int) -> str:
            self.service.delete(buyer_id)
            return "Deleted ok"

        return self._for_id(request, remove, 204, "buyer with id {} not found")