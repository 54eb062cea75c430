from __future__ import annotations

import pytest

from pgdba.domain.models import Record
from pgdba.service import DataAccess

CUSTOMER_FK = {
    "column_name": "customer_id",
    "foreign_table_schema": "public",
    "foreign_table_name": "customers",
    "foreign_column_name": "id",
}


@pytest.mark.asyncio
async def test_get_records_without_hydration(executor) -> None:
    executor.queue([{"id": 1, "customer_id": 5}])

    records = await DataAccess(executor).get_records("public", "orders")

    assert records[0].get("customer_id") == 5
    assert len(executor.calls) == 1


@pytest.mark.asyncio
async def test_get_records_with_hydration(executor) -> None:
    executor.queue([{"id": 1, "customer_id": 5}, {"id": 2, "customer_id": None}])
    executor.queue([CUSTOMER_FK])
    executor.queue([{"id": 5, "name": "Ada"}])

    records = await DataAccess(executor).get_records("public", "orders", hydrate=True)

    assert isinstance(records[0].get("customer_id"), Record)
    assert records[1].get("customer_id") is None
    assert len(executor.calls) == 3


@pytest.mark.asyncio
async def test_get_record_missing_returns_none(executor) -> None:
    executor.queue([])

    assert await DataAccess(executor).get_record("public", "orders", 404, hydrate=True) is None
    assert len(executor.calls) == 1


@pytest.mark.asyncio
async def test_insert_record_returns_new_id(executor) -> None:
    executor.queue([{"id": 12}])
    record = Record.from_row({"id": None, "customer_id": 5}, "public", "orders")

    new_id = await DataAccess(executor).insert_record("public", "orders", record)

    assert new_id == 12
    assert executor.calls[0][1] == (5,)


@pytest.mark.asyncio
async def test_update_record_returns_affected_rows(executor) -> None:
    executor.queue([], rowcount=1)
    record = Record.from_row({"id": 3, "customer_id": 5}, "public", "orders")
    record.set("customer_id", 6)

    affected = await DataAccess(executor).update_record("public", "orders", record)

    assert affected == 1
    assert executor.calls[0][1] == (3, 6, 3)


@pytest.mark.asyncio
async def test_delete_record_returns_affected_rows(executor) -> None:
    executor.queue([], rowcount=0)

    assert await DataAccess(executor).delete_record("public", "orders", 99) == 0
    assert executor.calls[0][1] == (99,)
