"""Product batches: model, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Collection, Iterable

from depotapi.web import BindError, Request, Response, bind_json, error, success

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"


@dataclass
class ProductBatch:
    """A batch of a product stored in a section."""

    id: int = 0
    batch_number: int = 0
    current_quantity: int = 0
    current_temperature: float = 0.0
    due_date: str = ""
    initial_quantity: int = 0
    manufacturing_date: str = ""
    manufacturing_hour: int = 0
    minimum_temperature: float = 0.0
    product_id: int = 0
    section_id: int = 0


class ProductBatchAlreadyExistsError(ValueError):
    """A batch with the batch number already exists."""

    def __init__(self, message: str = "product batch already exists") -> None:
        super().__init__(message)


class ForeignProductNotFoundError(LookupError):
    """The referenced product does not exist."""

    def __init__(self, message: str = "product_id does not exist") -> None:
        super().__init__(message)


class ForeignSectionNotFoundError(LookupError):
    """The referenced section does not exist."""

    def __init__(self, message: str = "section_id does not exist") -> None:
        super().__init__(message)


class InvalidDateError(ValueError):
    """A date is not in YYYY-MM-DD form."""

    def __init__(self, message: str = "invalid date value") -> None:
        super().__init__(message)


_POST_FIELDS = {
    "batch_number": (int, "BatchNumber", True),
    "current_quantity": (int, "CurrentQuantity", True),
    "current_temperature": (float, "CurrentTemperature", True),
    "due_date": (str, "DueDate", True),
    "initial_quantity": (int, "InitialQuantity", True),
    "manufacturing_date": (str, "ManufacturingDate", True),
    "manufacturing_hour": (int, "ManufacturingHour", True),
    "minimum_temperature": (float, "MinimumTemperature", True),
    "product_id": (int, "ProductID", True),
    "section_id": (int, "SectionID", True),
}


def _valid_date(text: str) -> bool:
    try:
        datetime.strptime(text, DATE_FORMAT)
    except ValueError:
        return False
    return True


class ProductBatchService:
    """In-memory product batch store.

    ``product_ids`` and ``section_ids`` limit the accepted references,
    ``None`` accepting any.
    """

    def __init__(
        self,
        batches: Iterable[ProductBatch] = (),
        product_ids: Collection[int] | None = None,
        section_ids: Collection[int] | None = None,
    ) -> None:
        self._batches = {b.id: replace(b) for b in batches}
        self._product_ids = None if product_ids is None else set(product_ids)
        self._section_ids = None if section_ids is None else set(section_ids)

    def create(self, batch: ProductBatch) -> ProductBatch:
        if not (_valid_date(batch.due_date) and _valid_date(batch.manufacturing_date)):
            raise InvalidDateError()
        if any(b.batch_number == batch.batch_number for b in self._batches.values()):
            raise ProductBatchAlreadyExistsError()
        if self._product_ids is not None and batch.product_id not in self._product_ids:
            raise ForeignProductNotFoundError()
        if self._section_ids is not None and batch.section_id not in self._section_ids:
            raise ForeignSectionNotFoundError()
        new_id = max(self._batches, default=0) + 1
        stored = replace(batch, id=new_id)
        self._batches[new_id] = stored
        return replace(stored)


class ProductBatchHandler:
    """Maps product batch requests to the service and errors to statuses."""

    def __init__(self, service: ProductBatchService) -> None:
        self.service = service

    def create(self, request: Request) -> Response:
        try:
            values = bind_json(request.body, _POST_FIELDS, "PostProductBatch")
        except BindError as exc:
            logger.error(exc)
            return error(422, str(exc))
        try:
            created = self.service.create(ProductBatch(**values))
        except ProductBatchAlreadyExistsError as exc:
            logger.error(exc)
            return error(
                409,
                "a product batch with the batch_number %d already exists",
                values["batch_number"],
            )
        except (ForeignProductNotFoundError, ForeignSectionNotFoundError) as exc:
            logger.error(exc)
            return error(409, str(exc))
        except InvalidDateError as exc:
            logger.error(exc)
            return error(400, str(exc))
        except Exception as exc:
            logger.error(exc)
            return error(500, str(exc))
        return success(201, created)