"""Request and response primitives shared by the resource handlers."""

from __future__ import annotations

import json
import re
from dataclasses import asdict, dataclass, field, is_dataclass
from http import HTTPStatus
from typing import Any, Mapping, Tuple

_INTEGER = re.compile(r"[+-]?[0-9]+")

_TYPE_NAMES = {str: "string", int: "int", float: "float32", bool: "bool"}

_STATUS_CODES = {
    400: "bad_request",
    404: "not_found",
    409: "conflict",
    422: "unprocessable_entity",
    500: "internal_server_error",
}

FieldSpec = Tuple[type, str, bool]


class BindError(ValueError):
    """The request body could not be bound to the expected shape."""


class TypeMismatchError(BindError):
    """A JSON value has a different type than the one expected."""


class ValidationError(BindError):
    """Required fields are missing from the request body."""


@dataclass
class Request:
    """An incoming request: path parameters, query values and raw body."""

    params: dict[str, str] = field(default_factory=dict)
    query: dict[str, str] = field(default_factory=dict)
    body: bytes | str = b""


@dataclass
class Response:
    """An outgoing response: status code and JSON-ready body."""

    status: int
    body: dict[str, Any] | None = None

    def json(self) -> str:
        """Serialize the body; a response without body yields an empty string."""
        if self.body is None:
            return ""
        return json.dumps(self.body)


def _to_plain(value: Any) -> Any:
    if is_dataclass(value) and not isinstance(value, type):
        return asdict(value)
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    return value


def _status_code(status: int) -> str:
    if status in _STATUS_CODES:
        return _STATUS_CODES[status]
    try:
        return HTTPStatus(status).name.lower()
    except ValueError:
        return str(status)


def success(status: int, data: Any) -> Response:
    """Wrap data in a ``{"data": ...}`` envelope; 204 carries no body."""
    if status == HTTPStatus.NO_CONTENT:
        return Response(status)
    return Response(status, {"data": _to_plain(data)})


def error(status: int, message: str, *args: Any) -> Response:
    """Build an error response, formatting the message with args if given."""
    text = message % args if args else message
    return Response(status, {"code": _status_code(status), "message": text})


def parse_id(text: str) -> int:
    """Parse a decimal integer identifier, rejecting anything else."""
    if not _INTEGER.fullmatch(text):
        raise ValueError(f"invalid id: {text!r}")
    return int(text)


def _json_kind(value: Any) -> str:
    if isinstance(value, bool):
        return "bool"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    return "object"


def _matches(value: Any, kind: type) -> bool:
    if kind is bool:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if kind is int:
        return isinstance(value, int)
    if kind is float:
        return isinstance(value, (int, float))
    return isinstance(value, kind)


def bind_json(
    body: bytes | str, fields: Mapping[str, FieldSpec], type_name: str
) -> dict[str, Any]:
    """Decode a JSON object into the declared fields.

    ``fields`` maps each JSON key to ``(type, struct field name, required)``.
    Absent or null keys come back as ``None``; unknown keys are ignored.
    """
    try:
        text = body.decode("utf-8") if isinstance(body, bytes) else body
    except UnicodeDecodeError as exc:
        raise BindError(str(exc)) from exc
    text = text.lstrip()
    if not text:
        raise BindError("EOF")
    try:
        document, _ = json.JSONDecoder().raw_decode(text)
    except json.JSONDecodeError as exc:
        raise BindError(str(exc)) from exc
    if document is None:
        document = {}
    if not isinstance(document, dict):
        raise TypeMismatchError(
            f"json: cannot unmarshal {_json_kind(document)} into value of type {type_name}"
        )

    values: dict[str, Any] = {}
    mismatch: TypeMismatchError | None = None
    for key, (kind, _name, _required) in fields.items():
        value = document.get(key)
        if value is not None and not _matches(value, kind):
            if mismatch is None:
                shown = _json_kind(value)
                if kind is int and isinstance(value, float):
                    shown = f"number {value}"
                mismatch = TypeMismatchError(
                    f"json: cannot unmarshal {shown} into struct field "
                    f"{type_name}.{key} of type {_TYPE_NAMES.get(kind, kind.__name__)}"
                )
            value = None
        values[key] = value
    if mismatch is not None:
        raise mismatch

    missing = [
        f"Key: '{type_name}.{name}' Error:Field validation for '{name}' failed on the 'required' tag"
        for key, (_kind, name, required) in fields.items()
        if required and values[key] is None
    ]
    if missing:
        raise ValidationError("\n".join(missing))
    return values