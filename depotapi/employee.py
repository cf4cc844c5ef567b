"""Employees: model, in-memory service and HTTP handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable

from depotapi.web import BindError, Request, Response, bind_json, error, parse_id, success

logger = logging.getLogger(__name__)


@dataclass
class Employee:
    """An employee assigned to a warehouse."""

    id: int = 0
    card_number_id: str = ""
    first_name: str = ""
    last_name: str = ""
    warehouse_id: int = 0


class _EmployeeError(Exception):
    default_message = ""

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class EmployeeNotFoundError(_EmployeeError, LookupError):
    """No employee has the requested id."""

    default_message = "employee not found"


class EmployeeAlreadyExistsError(_EmployeeError, ValueError):
    """Another employee already has the card number."""

    default_message = "employee already exists"


class EmployeeNotSavedError(_EmployeeError, RuntimeError):
    """The employee could not be stored."""

    default_message = "employee could not be saved"


class EmployeeNotUpdatedError(_EmployeeError, RuntimeError):
    """The employee could not be updated."""

    default_message = "employee could not be updated"


class _InvalidIdError(_EmployeeError, ValueError):
    default_message = "invalid id"


_PATCH_TYPES = {"first_name": (str, "FirstName"), "last_name": (str, "LastName"), "warehouse_id": (int, "WarehouseID")}
_POST_FIELDS = {
    "card_number_id": (str, "CardNumberID", True),
    **{key: (kind, name, True) for key, (kind, name) in _PATCH_TYPES.items()},
}
_PATCH_FIELDS = {key: (kind, name, False) for key, (kind, name) in _PATCH_TYPES.items()}

_STATUS = {
    _InvalidIdError: 400,
    BindError: 422,
    EmployeeAlreadyExistsError: 409,
    EmployeeNotFoundError: 404,
}


class EmployeeService:
    """In-memory employee store with unique card numbers."""

    def __init__(self, employees: Iterable[Employee] = ()) -> None:
        self._employees = {e.id: replace(e) for e in employees}

    def get(self, employee_id: int) -> Employee:
        found = self._employees.get(employee_id)
        if found is None:
            raise EmployeeNotFoundError()
        return replace(found)

    def get_all(self) -> list[Employee]:
        return list(map(replace, self._employees.values()))

    def save(self, employee: Employee) -> Employee:
        taken = {e.card_number_id for e in self._employees.values()}
        if employee.card_number_id in taken:
            raise EmployeeAlreadyExistsError()
        new_id = max(self._employees, default=0) + 1
        self._employees[new_id] = replace(employee, id=new_id)
        return self.get(new_id)

    def update(self, employee: Employee) -> Employee:
        current = self.get(employee.id)
        changes = {name: getattr(employee, name) for name in _PATCH_TYPES if getattr(employee, name)}
        self._employees[employee.id] = replace(current, **changes)
        return self.get(employee.id)

    def delete(self, employee_id: int) -> None:
        if employee_id not in self._employees:
            raise EmployeeNotFoundError()
        del self._employees[employee_id]


def _employee_id(request: Request) -> int:
    try:
        return parse_id(request.params.get("id", ""))
    except ValueError:
        raise _InvalidIdError() from None


class EmployeeHandler:
    """Maps employee requests to the service and errors to statuses."""

    def __init__(self, service: EmployeeService) -> None:
        self.service = service

    @staticmethod
    def _answer(action: Callable[[], Any], ok_status: int, *handled: type) -> Response:
        """Run ``action``; errors of the ``handled`` kinds get their own status, others 500."""
        try:
            data = action()
        except Exception as exc:
            status = next(
                (_STATUS[kind] for kind in (_InvalidIdError, *handled) if isinstance(exc, kind)),
                500,
            )
            logger.error(exc)
            return error(status, str(exc))
        return success(ok_status, data)

    def get(self, request: Request) -> Response:
        return self._answer(
            lambda: self.service.get(_employee_id(request)), 200, EmployeeNotFoundError
        )

    def get_all(self, request: Request) -> Response:
        return self._answer(lambda: list(self.service.get_all() or []), 200)

    def create(self, request: Request) -> Response:
        return self._answer(
            lambda: self.service.save(
                Employee(**bind_json(request.body, _POST_FIELDS, "EmployeeDTOPost"))
            ),
            201,
            BindError,
            EmployeeAlreadyExistsError,
        )

    def update(self, request: Request) -> Response:
        def patch() -> Employee:
            employee_id = _employee_id(request)
            values = bind_json(request.body, _PATCH_FIELDS, "EmployeeDTOPatch")
            return self.service.update(
                Employee(
                    id=employee_id,
                    first_name=values["first_name"] or "",
                    last_name=values["last_name"] or "",
                    warehouse_id=values["warehouse_id"] or 0,
                )
            )

        return self._answer(patch, 200, BindError, EmployeeNotFoundError)

    def delete(self, request: Request) -> Response:
        def remove() -> str:
            self.service.delete(_employee_id(request))
            return ""

        return self._answer(remove, 204, EmployeeNotFoundError)