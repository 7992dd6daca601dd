from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional, Union

import pytest
import requests

CHAIN_METHODS = (
    "select", "eq", "ilike", "order", "range", "limit",
    "insert", "update", "upsert", "delete", "lt", "gte",
)


class FakeResult:
    def __init__(self, data: Any = None, count: Optional[int] = None) -> None:
        self.data = data
        self.count = count


class FakeQuery:
    """Records a PostgREST-style call chain; execute() answers from the owning FakeSupabase."""

    def __init__(self, sb: "FakeSupabase", table: str, rpc: Optional[str] = None, params: Any = None) -> None:
        self.sb = sb
        self.table = table
        self.rpc = rpc
        self.params = params
        self.ops: List[tuple] = []

    def __getattr__(self, name: str):
        if name not in CHAIN_METHODS:
            raise AttributeError(name)

        def step(*args, **kwargs):
            self.ops.append((name, args, kwargs))
            return self

        return step

    def op(self, name: str) -> Optional[tuple]:
        for o in self.ops:
            if o[0] == name:
                return o
        return None

    def execute(self) -> FakeResult:
        self.sb.executed.append(self)
        key = f"rpc:{self.rpc}" if self.rpc else self.table
        err = self.sb.errors.get(key)
        if err is not None:
            raise err
        data = self.sb.data.get(key, [])
        if callable(data):
            data = data(self)
        count = self.sb.counts.get(key, len(data) if isinstance(data, list) else None)
        return FakeResult(data, count)


class FakeSupabase:
    """
    Minimal stand-in for supabase.Client.

    data    {"table" | "rpc:name": rows or callable(query) -> rows}
    counts  {"table": exact count returned with every select}
    errors  {"table" | "rpc:name": exception raised from execute()}
    """

    def __init__(
        self,
        data: Optional[Dict[str, Union[list, dict, Callable]]] = None,
        counts: Optional[Dict[str, int]] = None,
        errors: Optional[Dict[str, Exception]] = None,
    ) -> None:
        self.data = data or {}
        self.counts = counts or {}
        self.errors = errors or {}
        self.executed: List[FakeQuery] = []

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)

    def rpc(self, name: str, params: Any = None) -> FakeQuery:
        return FakeQuery(self, name, rpc=name, params=params)

    def queries(self, table: str) -> List[FakeQuery]:
        return [q for q in self.executed if q.table == table and q.rpc is None]

    def rpc_calls(self, name: str) -> List[FakeQuery]:
        return [q for q in self.executed if q.rpc == name]


class FakeResponse:
    def __init__(self, status_code: int = 200, json_data: Any = None, text: str = "") -> None:
        self.status_code = status_code
        self._json = json_data
        self.text = text

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    def json(self) -> Any:
        if self._json is None:
            raise ValueError("no JSON body")
        return self._json

    def raise_for_status(self) -> None:
        if not self.ok:
            raise requests.HTTPError(f"{self.status_code} error", response=self)


class FakeSession:
    """requests-compatible session answering from a queue; an Exception in the queue is raised."""

    def __init__(self, *responses: Union[FakeResponse, Exception]) -> None:
        self.responses = list(responses)
        self.calls: List[tuple] = []

    def _next(self, method: str, url: str, kwargs: Dict[str, Any]):
        self.calls.append((method, url, kwargs))
        if not self.responses:
            raise AssertionError(f"unexpected {method} {url}")
        nxt = self.responses.pop(0)
        if isinstance(nxt, Exception):
            raise nxt
        return nxt

    def get(self, url: str, **kwargs):
        return self._next("GET", url, kwargs)

    def post(self, url: str, **kwargs):
        return self._next("POST", url, kwargs)


@pytest.fixture
def fake_sb():
    return FakeSupabase()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    # no real keys leak into tests from the developer's shell
    for name in (
        "PAYMENTS_ENABLED", "MIDTRANS_SERVER_KEY", "MIDTRANS__SERVER_KEY", "MIDTRANS_IS_PRODUCTION",
        "TURNSTILE_SECRET_KEY", "TURNSTILE__SECRET_KEY", "GEMINI_API_KEY", "GEMINI__API_KEY",
        "GOOGLE_API_KEY", "DEEPSEEK_API_KEY", "DEEPSEEK__API_KEY", "NCBI_API_KEY", "PUBMED_API_KEY",
        "USDA_FDC_API_KEY", "USDA_API_KEY",
    ):
        monkeypatch.delenv(name, raising=False)
