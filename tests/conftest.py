from __future__ import annotations

from pathlib import Path

import pytest

from quotesync.errors import NetworkError


@pytest.fixture(autouse=True)
def _isolate_quotesync_paths(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("QUOTESYNC_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("QUOTESYNC_DB_PATH", str(tmp_path / "quotes.sqlite"))
    monkeypatch.setenv("QUOTESYNC_SESSION_FILE", str(tmp_path / "session.json"))
    for name in (
        "QUOTESYNC_SERVER_URL",
        "QUOTESYNC_FETCH_LIMIT",
        "QUOTESYNC_HTTP_TIMEOUT_S",
        "QUOTESYNC_SYNC_INTERVAL_S",
        "QUOTESYNC_CONFLICT_POLICY",
    ):
        monkeypatch.delenv(name, raising=False)


class FakeRemote:
    """Stands in for ``http_client.request_json`` against a posts-style endpoint."""

    def __init__(self, posts: list[dict] | None = None, next_id: int = 101) -> None:
        self.posts = list(posts or [])
        self.next_id = next_id
        self.calls: list[tuple[str, str, dict | None]] = []
        self.fail_post_titles: set[str] = set()
        self.get_error: Exception | None = None
        self.get_payload: object | None = None
        self.echo_fixed_id: int | None = None

    def __call__(self, method: str, url: str, *, body=None, timeout_s: float = 10.0, headers=None):
        self.calls.append((method, url, body))
        if method == "POST":
            if body and body.get("title") in self.fail_post_titles:
                raise NetworkError("connection reset")
            if self.echo_fixed_id is not None:
                return 201, {**body, "id": self.echo_fixed_id}
            post_id = self.next_id
            self.next_id += 1
            return 201, {**body, "id": post_id}
        if self.get_error is not None:
            raise self.get_error
        if self.get_payload is not None:
            return 200, self.get_payload
        return 200, list(self.posts)


@pytest.fixture
def fake_remote() -> FakeRemote:
    return FakeRemote()
