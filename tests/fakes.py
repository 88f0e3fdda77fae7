"""
In-memory stand-in for the supabase-py client.

Supports the subset of the query builder the repositories use:
table().select()/insert()/update()/upsert()/delete(), eq/neq/is_/in_ filters,
not_ negation, order(desc=), limit(), execute(), rpc() and auth.get_user().
"""

import copy
import itertools
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

_ids = itertools.count(1)


class FakeAuth:
    def __init__(self, users: Dict[str, str]):
        self.users = users

    def get_user(self, token: str):
        if token not in self.users:
            raise ValueError("invalid token")
        uid = self.users[token]
        return SimpleNamespace(user=SimpleNamespace(id=uid, email=f"{uid}@example.com"))


class FakeRpc:
    def __init__(self, sb: "FakeSupabase", name: str, params: Dict[str, Any]):
        self.sb = sb
        self.name = name
        self.params = params

    def execute(self):
        self.sb.rpc_calls.append((self.name, self.params))
        result = self.sb.rpc_results.get(self.name)
        if isinstance(result, Exception):
            raise result
        return SimpleNamespace(data=copy.deepcopy(result), count=None)


class _Not:
    def __init__(self, query: "FakeQuery"):
        self.query = query

    def is_(self, column: str, value: Any) -> "FakeQuery":
        return self.query._filter(column, "is", value, negate=True)

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self.query._filter(column, "eq", value, negate=True)


class FakeQuery:
    def __init__(self, sb: "FakeSupabase", table: str):
        self.sb = sb
        self.table = table
        self.op = "select"
        self.columns = "*"
        self.payload: Any = None
        self.on_conflict: Optional[str] = None
        self.count_mode: Optional[str] = None
        self.head = False
        self.filters: List[tuple] = []
        self.orders: List[tuple] = []
        self.limit_n: Optional[int] = None

    # -----------------------------
    # Operations
    # -----------------------------
    def select(self, columns: str = "*", count: Optional[str] = None, head: bool = False):
        self.op = "select"
        self.columns = columns
        self.count_mode = count
        self.head = head
        return self

    def insert(self, payload: Any):
        self.op = "insert"
        self.payload = payload
        return self

    def update(self, payload: Dict[str, Any]):
        self.op = "update"
        self.payload = payload
        return self

    def upsert(self, payload: Any, on_conflict: Optional[str] = None):
        self.op = "upsert"
        self.payload = payload
        self.on_conflict = on_conflict
        return self

    def delete(self):
        self.op = "delete"
        return self

    # -----------------------------
    # Filters / modifiers
    # -----------------------------
    @property
    def not_(self) -> _Not:
        return _Not(self)

    def _filter(self, column: str, kind: str, value: Any, negate: bool = False):
        self.filters.append((column, kind, value, negate))
        return self

    def eq(self, column: str, value: Any):
        return self._filter(column, "eq", value)

    def neq(self, column: str, value: Any):
        return self._filter(column, "eq", value, negate=True)

    def is_(self, column: str, value: Any):
        return self._filter(column, "is", value)

    def in_(self, column: str, values: List[Any]):
        return self._filter(column, "in", list(values))

    def order(self, column: str, desc: bool = False):
        self.orders.append((column, desc))
        return self

    def limit(self, n: int):
        self.limit_n = n
        return self

    # -----------------------------
    # Execution
    # -----------------------------
    def _matches(self, row: Dict[str, Any]) -> bool:
        for column, kind, value, negate in self.filters:
            v = row.get(column)
            if kind == "eq":
                hit = v == value
            elif kind == "is":
                hit = v is None if value in ("null", None) else v is value
            else:
                hit = v in value
            if hit == negate:
                return False
        return True

    def _project(self, row: Dict[str, Any]) -> Dict[str, Any]:
        if self.columns.strip() == "*":
            return copy.deepcopy(row)
        cols = [c.strip() for c in self.columns.split(",")]
        return {c: copy.deepcopy(row.get(c)) for c in cols}

    def execute(self):
        if self.table in self.sb.failing:
            raise RuntimeError(f"table {self.table} unavailable")

        rows = self.sb.tables.setdefault(self.table, [])

        if self.op == "insert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            out = []
            for item in items:
                row = dict(item)
                row.setdefault("id", next(_ids))
                rows.append(row)
                out.append(copy.deepcopy(row))
            self.sb.writes.append((self.table, "insert", out))
            return SimpleNamespace(data=out, count=None)

        if self.op == "upsert":
            items = self.payload if isinstance(self.payload, list) else [self.payload]
            key = self.on_conflict or "id"
            out = []
            for item in items:
                existing = next((r for r in rows if r.get(key) == item.get(key)), None)
                if existing is not None:
                    existing.update(item)
                    out.append(copy.deepcopy(existing))
                else:
                    row = dict(item)
                    rows.append(row)
                    out.append(copy.deepcopy(row))
            self.sb.writes.append((self.table, "upsert", out))
            return SimpleNamespace(data=out, count=None)

        matched = [r for r in rows if self._matches(r)]

        if self.op == "update":
            for r in matched:
                r.update(self.payload)
            self.sb.writes.append((self.table, "update", copy.deepcopy(matched)))
            return SimpleNamespace(data=copy.deepcopy(matched), count=None)

        if self.op == "delete":
            self.sb.tables[self.table] = [r for r in rows if r not in matched]
            return SimpleNamespace(data=copy.deepcopy(matched), count=None)

        for column, desc in reversed(self.orders):
            present = [r for r in matched if r.get(column) is not None]
            missing = [r for r in matched if r.get(column) is None]
            matched = sorted(present, key=lambda r: r[column], reverse=desc) + missing

        count = len(matched) if self.count_mode else None
        if self.limit_n is not None:
            matched = matched[: self.limit_n]
        data = [] if self.head else [self._project(r) for r in matched]
        return SimpleNamespace(data=data, count=count)


class FakeSupabase:
    def __init__(
        self,
        tables: Optional[Dict[str, List[Dict[str, Any]]]] = None,
        *,
        users: Optional[Dict[str, str]] = None,
        rpc_results: Optional[Dict[str, Any]] = None,
        failing: Optional[List[str]] = None,
    ):
        self.tables: Dict[str, List[Dict[str, Any]]] = copy.deepcopy(tables or {})
        self.auth = FakeAuth(users or {})
        self.rpc_results = rpc_results or {}
        self.rpc_calls: List[tuple] = []
        self.writes: List[tuple] = []
        self.failing = set(failing or [])

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Optional[Dict[str, Any]] = None) -> FakeRpc:
        return FakeRpc(self, name, params or {})

    def rows(self, name: str) -> List[Dict[str, Any]]:
        return self.tables.get(name, [])
