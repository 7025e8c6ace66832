"""In-memory stand-in for the Supabase client used by store helpers.

Covers the query-builder calls the helpers make (select/eq/order/limit/range with
optional exact counts) and the ``insert_property_aggregate`` RPC, which
behaves like the Postgres function: a unique zpid and all-or-nothing writes.
"""

import copy
import itertools
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class FakeResponse:
    data: Any
    count: Optional[int] = None


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str):
        self.db = db
        self.table_name = table
        self.filters: list[tuple[str, Any]] = []
        self.order_by: list[tuple[str, bool]] = []
        self.row_limit: Optional[int] = None
        self.row_range: Optional[tuple[int, int]] = None
        self.want_count = False

    def select(self, columns: str = "*", count: Optional[str] = None) -> "FakeQuery":
        self.want_count = count == "exact"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters.append((column, value))
        return self

    def order(self, column: str, desc: bool = False) -> "FakeQuery":
        self.order_by.append((column, desc))
        return self

    def limit(self, size: int) -> "FakeQuery":
        self.row_limit = size
        return self

    def range(self, start: int, end: int) -> "FakeQuery":
        self.row_range = (start, end)
        return self

    def execute(self) -> FakeResponse:
        self.db.queries.append(self.table_name)
        self.db.order_calls.append(list(self.order_by))
        if self.db.fail_queries:
            raise RuntimeError("connection refused")

        rows = [
            row for row in self.db.tables[self.table_name]
            if all(row.get(column) == value for column, value in self.filters)
        ]
        if self.db.scan_reversed:
            # Unordered rows in a different physical order than inserted
            rows.reverse()
        # Stable sorts, least significant key first
        for column, desc in reversed(self.order_by):
            rows = sorted(rows, key=lambda row: (row.get(column) is None, row.get(column)), reverse=desc)
        total = len(rows)
        if self.row_range is not None:
            start, end = self.row_range
            rows = rows[start:end + 1]
        if self.row_limit is not None:
            rows = rows[:self.row_limit]
        if self.db.max_rows is not None:
            rows = rows[:self.db.max_rows]
        return FakeResponse(data=copy.deepcopy(rows), count=total if self.want_count else None)


class FakeRpc:
    def __init__(self, db: "FakeSupabase", name: str, params: dict):
        self.db = db
        self.name = name
        self.params = params

    def execute(self) -> FakeResponse:
        if self.name != "insert_property_aggregate":
            raise RuntimeError(f"function {self.name} does not exist")
        return FakeResponse(data=self.db.insert_aggregate(self.params["aggregate"]))


class FakeSupabase:
    """Tables are plain lists of dict rows keyed by table name."""

    TABLES = ("properties", "listing_details", "property_features", "property_photos")

    def __init__(self):
        self.tables: dict[str, list[dict]] = {name: [] for name in self.TABLES}
        self.rpc_calls: list[dict] = []
        self.queries: list[str] = []
        self.fail_rpc_for: set[str] = set()
        self.fail_queries = False
        # Server-side cap on rows per response, like PostgREST max-rows
        self.max_rows: Optional[int] = None
        self.scan_reversed = False
        self.order_calls: list[list[tuple[str, bool]]] = []
        self._ids = itertools.count(1)

    def table(self, name: str) -> FakeQuery:
        if name not in self.tables:
            raise RuntimeError(f'relation "{name}" does not exist')
        return FakeQuery(self, name)

    def rpc(self, name: str, params: dict) -> FakeRpc:
        return FakeRpc(self, name, params)

    def insert_aggregate(self, aggregate: dict) -> str:
        self.rpc_calls.append(copy.deepcopy(aggregate))
        property_row = dict(aggregate["property"])
        zpid = property_row["zpid"]

        if any(row["zpid"] == zpid for row in self.tables["properties"]):
            raise RuntimeError(
                'duplicate key value violates unique constraint "properties_zpid_key"'
            )

        # Stage every row first so a failure leaves nothing behind
        staged: list[tuple[str, dict]] = []
        property_row["created_at"] = next(self._ids)
        staged.append(("properties", property_row))
        if aggregate.get("listing"):
            staged.append(("listing_details", {"id": next(self._ids), **aggregate["listing"]}))
        if aggregate.get("features"):
            staged.append(("property_features", {"id": next(self._ids), **aggregate["features"]}))
        for photo in aggregate.get("photos") or []:
            staged.append(("property_photos", {"id": next(self._ids), **photo}))

        if zpid in self.fail_rpc_for:
            raise RuntimeError("insert or update on table \"property_photos\" violates foreign key constraint")

        for table, row in staged:
            self.tables[table].append(row)
        return property_row["id"]

    def add_property_row(self, **row: Any) -> dict:
        """Insert a bare root row, bypassing the aggregate function."""
        row.setdefault("created_at", next(self._ids))
        self.tables["properties"].append(row)
        return row
