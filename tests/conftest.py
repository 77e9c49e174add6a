from __future__ import annotations

from collections import defaultdict, deque
from types import SimpleNamespace
from typing import Any, Generator, List, Optional
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient
from supabase import PostgrestAPIError

from app.core.dependencies import get_caller_client, get_optional_caller
from app.core.session import Caller
from app.database.supabase_client import get_session_supabase, get_supabase
from app.main import app
from app.modules.auth.service import clear_auth_cache

USER_A = "11111111-1111-1111-1111-111111111111"
USER_B = "22222222-2222-2222-2222-222222222222"
TUTORIAL_ID = "33333333-3333-3333-3333-333333333333"

ACTIONS = ("select", "insert", "update", "delete")


class FakeQuery:
    """Records a chained PostgREST call; execute() returns the next queued response for its table."""

    def __init__(self, table: str, client: "FakeSupabase"):
        self.table = table
        self.client = client
        self.calls: List[tuple] = []

    def __getattr__(self, name: str):
        if name.startswith("__"):
            raise AttributeError(name)

        def method(*args, **kwargs):
            self.calls.append((name, args, kwargs))
            return self

        return method

    def execute(self):
        queue = self.client.responses[self.table]
        if not queue:
            return SimpleNamespace(data=[])
        item = queue.popleft()
        if isinstance(item, Exception):
            raise item
        return SimpleNamespace(data=item)

    @property
    def action(self) -> Optional[str]:
        for name, _, _ in self.calls:
            if name in ACTIONS:
                return name
        return None

    def args_of(self, name: str) -> Optional[tuple]:
        for call_name, args, _ in self.calls:
            if call_name == name:
                return args
        return None

    def all_args_of(self, name: str) -> List[tuple]:
        return [args for call_name, args, _ in self.calls if call_name == name]

    def kwargs_of(self, name: str) -> Optional[dict]:
        for call_name, _, kwargs in self.calls:
            if call_name == name:
                return kwargs
        return None


class FakeSupabase:
    """Stand-in for supabase.Client covering table(), storage and auth."""

    def __init__(self):
        self.responses = defaultdict(deque)
        self.queries: List[FakeQuery] = []
        self.storage = MagicMock()
        self.auth = MagicMock()
        self.bucket = self.storage.from_.return_value
        self.bucket.get_public_url.side_effect = (
            lambda path: f"https://example.supabase.co/storage/v1/object/public/tutorial-media/{path}"
        )

    def queue(self, table: str, *responses: Any) -> "FakeSupabase":
        """Queue execute() results for table: lists of rows, or exceptions to raise."""
        self.responses[table].extend(responses)
        return self

    def table(self, name: str) -> FakeQuery:
        query = FakeQuery(name, self)
        self.queries.append(query)
        return query

    def rpc(self, name: str, params: dict) -> FakeQuery:
        """Recorded like a table query; queue its results under "rpc:<name>"."""
        query = FakeQuery(f"rpc:{name}", self)
        query.calls.append(("rpc", (name, params), {}))
        self.queries.append(query)
        return query

    def queries_for(self, table: str, action: Optional[str] = None) -> List[FakeQuery]:
        return [q for q in self.queries if q.table == table and (action is None or q.action == action)]


def api_error(code: str, message: str = "error") -> PostgrestAPIError:
    return PostgrestAPIError({"code": code, "message": message, "details": None, "hint": None})


def profile_row(user_id: str = USER_A, full_name: str = "Ada Lovelace") -> dict:
    return {
        "id": user_id,
        "full_name": full_name,
        "bio": None,
        "avatar_url": None,
        "created_at": "2025-11-23T16:11:27+00:00",
        "updated_at": "2025-11-23T16:11:27+00:00",
    }


def tutorial_row(tutorial_id: str = TUTORIAL_ID, user_id: str = USER_A, **overrides) -> dict:
    row = {
        "id": tutorial_id,
        "user_id": user_id,
        "title": "Intro to Watercolor",
        "description": "Learn the basics of watercolor painting step by step.",
        "category": "art",
        "difficulty": "beginner",
        "thumbnail_url": None,
        "video_url": None,
        "resources": [],
        "likes_count": 0,
        "comments_count": 0,
        "enrollments_count": 0,
        "created_at": "2025-11-23T16:11:27+00:00",
        "updated_at": "2025-11-23T16:11:27+00:00",
    }
    row.update(overrides)
    return row


def counters_row(tutorial_id: str = TUTORIAL_ID, likes: int = 0, comments: int = 0, enrollments: int = 0) -> dict:
    return {
        "id": tutorial_id,
        "likes_count": likes,
        "comments_count": comments,
        "enrollments_count": enrollments,
    }


@pytest.fixture(autouse=True)
def reset_auth_cache() -> Generator[None, None, None]:
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture()
def fake_supabase() -> FakeSupabase:
    return FakeSupabase()


@pytest.fixture()
def caller_a() -> Caller:
    return Caller(user_id=USER_A, access_token="token-a", email="a@example.com")


@pytest.fixture()
def caller_b() -> Caller:
    return Caller(user_id=USER_B, access_token="token-b", email="b@example.com")


class ApiClient:
    """TestClient plus a switch for who the request is made as."""

    def __init__(self, test_client: TestClient):
        self.http = test_client
        self.caller = Caller.anonymous()

    def act_as(self, caller: Caller) -> "ApiClient":
        self.caller = caller
        return self

    def __getattr__(self, name: str):
        return getattr(self.http, name)


@pytest.fixture()
def api(fake_supabase: FakeSupabase) -> Generator[ApiClient, None, None]:
    with TestClient(app) as test_client:
        client = ApiClient(test_client)
        app.dependency_overrides[get_optional_caller] = lambda: client.caller
        app.dependency_overrides[get_caller_client] = lambda: fake_supabase
        app.dependency_overrides[get_supabase] = lambda: fake_supabase
        app.dependency_overrides[get_session_supabase] = lambda: fake_supabase
        try:
            yield client
        finally:
            app.dependency_overrides.clear()
