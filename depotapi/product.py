"""Products: models, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Callable, Collection, Iterable, Optional

from depotapi.web import (
    Request,
    Response,
    TypeMismatchError,
    ValidationError,
    bind_json,
    error,
    parse_id,
    success,
)

logger = logging.getLogger(__name__)

INVALID_ID_MESSAGE = "invalid ID"
NOT_FOUND_MESSAGE = "product not found"
CREATED_BUT_NOT_FOUND_MESSAGE = "product created with no errors but not found in database"


@dataclass
class Product:
    """A product, identified by a unique product code."""

    id: int = 0
    description: str = ""
    expiration_rate: int = 0
    freezing_rate: int = 0
    height: float = 0.0
    length: float = 0.0
    net_weight: float = 0.0
    product_code: str = ""
    recommended_freezing_temperature: float = 0.0
    width: float = 0.0
    product_type_id: int = 0
    seller_id: Optional[int] = None


@dataclass
class ProductUpdate:
    """A partial modification of a product; ``None`` leaves a field unchanged."""

    description: Optional[str] = None
    expiration_rate: Optional[int] = None
    freezing_rate: Optional[int] = None
    height: Optional[float] = None
    length: Optional[float] = None
    net_weight: Optional[float] = None
    product_code: Optional[str] = None
    recommended_freezing_temperature: Optional[float] = None
    width: Optional[float] = None
    product_type_id: Optional[int] = None
    seller_id: Optional[int] = None


class ProductNotFoundError(LookupError):
    """No product has the requested id."""

    def __init__(self, message: str = "product not found") -> None:
        super().__init__(message)


class ProductAlreadyExistsError(ValueError):
    """Another product already has the product code."""

    def __init__(self, message: str = "product_code already exists") -> None:
        super().__init__(message)


class ProductForeignKeyNotFoundError(LookupError):
    """The referenced seller does not exist."""

    def __init__(self, message: str = "seller_id does not exist") -> None:
        super().__init__(message)


class _InvalidIdError(Exception):
    """The id in the path is not an integer."""


_REQUIRED_FIELDS = {
    "description": (str, "Description"),
    "expiration_rate": (int, "ExpirationRate"),
    "freezing_rate": (int, "FreezingRate"),
    "height": (float, "Height"),
    "length": (float, "Length"),
    "net_weight": (float, "NetWeight"),
    "product_code": (str, "ProductCode"),
    "recommended_freezing_temperature": (float, "RecommendedFreezingTemperature"),
    "width": (float, "Width"),
    "product_type_id": (int, "ProductTypeID"),
}
_POST_FIELDS = {key: (kind, name, True) for key, (kind, name) in _REQUIRED_FIELDS.items()}
_POST_FIELDS["seller_id"] = (int, "SellerID", False)
_PATCH_FIELDS = {key: (kind, name, False) for key, (kind, name, _) in _POST_FIELDS.items()}

# Each entry: exception type, status, message (None means the exception's own text).
_ErrorTable = tuple[tuple[type, int, Optional[str]], ...]

_ID_ERRORS: _ErrorTable = ((_InvalidIdError, 400, INVALID_ID_MESSAGE),)
_WRITE_ERRORS: _ErrorTable = (
    (TypeMismatchError, 422, None),
    (ProductAlreadyExistsError, 409, None),
    (ProductForeignKeyNotFoundError, 404, None),
)
_CREATE_ERRORS: _ErrorTable = (
    (ValidationError, 400, None),
    *_WRITE_ERRORS,
    (ProductNotFoundError, 404, CREATED_BUT_NOT_FOUND_MESSAGE),
)
_UPDATE_ERRORS: _ErrorTable = (
    *_ID_ERRORS,
    *_WRITE_ERRORS,
    (ProductNotFoundError, 404, NOT_FOUND_MESSAGE),
)
_LOOKUP_ERRORS: _ErrorTable = (*_ID_ERRORS, (ProductNotFoundError, 404, NOT_FOUND_MESSAGE))


class ProductService:
    """In-memory product store with unique product codes.

    ``seller_ids`` limits the accepted sellers; ``None`` accepts any.
    """

    def __init__(
        self,
        products: Iterable[Product] = (),
        seller_ids: Collection[int] | None = None,
    ) -> None:
        self._products = {p.id: replace(p) for p in products}
        self._seller_ids = None if seller_ids is None else set(seller_ids)

    def _code_taken(self, code: str, exclude_id: int | None = None) -> bool:
        return any(p.product_code == code and p.id != exclude_id for p in self._products.values())

    def _check_seller(self, seller_id: int | None) -> None:
        known = self._seller_ids
        if seller_id is not None and known is not None and seller_id not in known:
            raise ProductForeignKeyNotFoundError()

    def get_all(self) -> list[Product]:
        return [replace(p) for p in self._products.values()]

    def get(self, product_id: int) -> Product:
        try:
            return replace(self._products[product_id])
        except KeyError:
            raise ProductNotFoundError() from None

    def save(self, product: Product) -> Product:
        if self._code_taken(product.product_code):
            raise ProductAlreadyExistsError()
        self._check_seller(product.seller_id)
        new_id = max(self._products, default=0) + 1
        self._products[new_id] = replace(product, id=new_id)
        return self.get(new_id)

    def partial_update(self, product_id: int, update: ProductUpdate) -> Product:
        current = self.get(product_id)
        if update.product_code is not None and self._code_taken(update.product_code, product_id):
            raise ProductAlreadyExistsError()
        self._check_seller(update.seller_id)
        changes = {f.name: getattr(update, f.name) for f in fields(update)}
        self._products[product_id] = replace(
            current, **{name: value for name, value in changes.items() if value is not None}
        )
        return self.get(product_id)

    def delete(self, product_id: int) -> None:
        if self._products.pop(product_id, None) is None:
            raise ProductNotFoundError()


def _path_id(request: Request) -> int:
    try:
        return parse_id(request.params.get("id", ""))
    except ValueError as exc:
        raise _InvalidIdError(str(exc)) from exc


def _run(status: int, action: Callable[[], Any], handled: _ErrorTable = ()) -> Response:
    """Run ``action`` and turn its result or its exception into a response.

    Unlisted exceptions give a 500 with an empty message, so that internal
    details are not exposed to the client.
    """
    try:
        result = action()
    except Exception as exc:
        logger.error(exc)
        for kind, code, message in handled:
            if isinstance(exc, kind):
                return error(code, str(exc) if message is None else message)
        return error(500, "")
    return success(status, result)


class ProductHandler:
    """Maps product requests to the service and errors to statuses."""

    def __init__(self, service: ProductService) -> None:
        self.service = service

    def get_all(self, request: Request) -> Response:
        return _run(200, lambda: list(self.service.get_all() or []))

    def get(self, request: Request) -> Response:
        return _run(200, lambda: self.service.get(_path_id(request)), _LOOKUP_ERRORS)

    def create(self, request: Request) -> Response:
        def action() -> Product:
            values = bind_json(request.body, _POST_FIELDS, "ProductPOSTRequest")
            return self.service.save(Product(**values))

        return _run(201, action, _CREATE_ERRORS)

    def partial_update(self, request: Request) -> Response:
        def action() -> Product:
            product_id = _path_id(request)
            values = bind_json(request.body, _PATCH_FIELDS, "ProductPATCHRequest")
            return self.service.partial_update(product_id, ProductUpdate(**values))

        return _run(200, action, _UPDATE_ERRORS)

    def delete(self, request: Request) -> Response:
        def action() -> str:
            self.service.delete(_path_id(request))
            return ""

        return _run(204, action, _LOOKUP_ERRORS)