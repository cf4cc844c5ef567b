# depotapi

Request handlers for a warehouse and logistics API that do not depend on any
web framework. Each resource has a handler class. A handler method takes a
`depotapi.web.Request` and returns a `depotapi.web.Response`.

- A `Request` holds `params` (path parameters), `query` (query values) and
  `body` (raw JSON, as `bytes` or `str`).
- A `Response` holds a `status` and a `body`. On success the body is
  `{"data": ...}`. On failure it is `{"code": ..., "message": ...}`.
- A `204` response has no body, and `Response.json()` returns `""` for it.

## Resources

| Module | Handler | Service | Operations |
| --- | --- | --- | --- |
| `depotapi.buyer` | `BuyerHandler` | `BuyerService` | `get`, `get_all`, `create`, `update`, `delete` |
| `depotapi.carry` | `CarryHandler` | `CarryService` | `save` |
| `depotapi.employee` | `EmployeeHandler` | `EmployeeService` | `get`, `get_all`, `create`, `update`, `delete` |
| `depotapi.inbound_order` | `InboundOrderHandler` | `InboundOrderService` | `create`, `get_all_employees_inbound_orders`, `get_employee_inbound_orders` |
| `depotapi.locality` | `LocalityHandler` | `LocalityService` | `get`, `create`, `get_report_carries`, `get_report_sellers` |
| `depotapi.product` | `ProductHandler` | `ProductService` | `get`, `get_all`, `create`, `partial_update`, `delete` |
| `depotapi.product_batch` | `ProductBatchHandler` | `ProductBatchService` | `create` |
| `depotapi.product_record` | `ProductRecordHandler` | `ProductRecordService` | `create` |
| `depotapi.purchase_orders` | `PurchaseOrderHandler` | `PurchaseOrderService` | `create_order`, `get_all_orders_by_buyers` |
| `depotapi.report_record` | `ReportRecordHandler` | `ReportRecordService` | `get_report_records` |

Each handler is built with a service object. The services in the package keep
their data in memory and give new records the next free integer id.

Some services take optional collections of ids that they check references
against, for example `CarryService(localities=...)`,
`ProductService(seller_ids=...)` and `ProductBatchService(product_ids=...,
section_ids=...)`. When such a collection is `None`, any reference is accepted.

`ProductRecordService` takes a `today` callable. It rejects any record dated
before that day.

`depotapi.web` also offers the helpers the handlers use:

- `success`, `error` and `parse_id`;
- `bind_json`, which decodes a JSON object into declared fields;
- the errors that `bind_json` raises: `BindError`, `TypeMismatchError` and
  `ValidationError`.

## Behaviour

- A path id that is not an integer gives `400`.
- A query id that is not an integer gives `400`. This applies to purchase
  order reports and record reports.
- A body with missing fields or wrong types usually gives `422`. There are
  exceptions:
  - `LocalityHandler.create` answers missing fields with `400`;
  - `ProductHandler.create` answers missing fields with `400`;
  - `ProductHandler` answers malformed JSON with `500` and an empty message.
- Not-found errors give `404`, and already-exists errors give `409`.
- A missing referenced record gives a status that depends on the resource:

  | Resource | Status |
  | --- | --- |
  | inbound orders | `404` |
  | products | `404` |
  | carries | `409` |
  | product batches | `409` |
  | product records | `409` |
  | purchase orders | `409` |

- Unexpected errors give `500`. For products, product records and record
  reports the message is left empty.
- Failures are logged through the standard `logging` module, using each
  module's own logger.

## Example

```python
from depotapi.buyer import BuyerHandler, BuyerService
from depotapi.web import Request

handler = BuyerHandler(BuyerService())
created = handler.create(
    Request(body=b'{"card_number_id": "001", "first_name": "Ann", "last_name": "Lee"}')
)
print(created.status, created.json())
# 201 {"data": {"id": 1, "card_number_id": "001", "first_name": "Ann", "last_name": "Lee"}}

bad = handler.get(Request(params={"id": "abc"}))
print(bad.status, bad.body["message"])
# 400 invalid Id
```

## What this package does not do

It has no HTTP server, no URL routing and no command to start anything. You
pass `Request` objects to handler methods yourself, or wire the handlers into
a web framework of your choice.

It has no database either. The services hold everything in memory, so data
is lost when the process ends.

## Tests

```
pip install -e .[test]
pytest
```