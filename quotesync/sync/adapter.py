from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any

from ..errors import DecodeError, NetworkError, SyncError
from ..store import SYNCED, Record, RecordStore, now_iso
from . import http_client

logger = logging.getLogger(__name__)

DEFAULT_FETCH_LIMIT = 40

RequestJson = Callable[..., tuple[int, Any]]


def _error_detail(payload: Any) -> str | None:
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if isinstance(error, str):
        return error
    return None


def _raise_for_status(status: int, payload: Any, action: str) -> None:
    if 200 <= status < 300:
        return
    detail = _error_detail(payload)
    suffix = f" ({status}: {detail})" if detail else f" ({status})"
    raise NetworkError(f"{action} failed{suffix}")


def post_to_record(post: dict[str, Any]) -> Record:
    """Map one remote post onto the local record shape.

    The endpoint has no notion of categories, so the post's ``userId`` is
    used as the grouping label.
    """
    remote_id = post.get("id")
    title = post.get("title")
    if remote_id is None or isinstance(remote_id, bool):
        raise DecodeError("remote item is missing id")
    if not isinstance(title, str) or not title.strip():
        raise DecodeError(f"remote item {remote_id} is missing title")
    return Record(
        id=f"server-{remote_id}",
        text=title,
        category=f"User-{post.get('userId')}",
        sync_state=SYNCED,
        updated_at=now_iso(),
        remote_id=str(remote_id),
    )


class RemoteAdapter:
    def __init__(
        self,
        store: RecordStore,
        url: str,
        *,
        fetch_limit: int = DEFAULT_FETCH_LIMIT,
        timeout_s: float = 10.0,
        request_json: RequestJson | None = None,
    ) -> None:
        self.store = store
        self.url = http_client.build_base_url(url)
        self.fetch_limit = fetch_limit
        self.timeout_s = timeout_s
        self._request_json = request_json or http_client.request_json

    def push(self, records: Sequence[Record]) -> int:
        pushed = 0
        for record in records:
            if record.remote_id is not None or record.sync_state == SYNCED:
                continue
            try:
                self._push_one(record)
            except SyncError as exc:
                logger.warning("push of %s failed; leaving it local", record.id, exc_info=exc)
                continue
            pushed += 1
        return pushed

    def _push_one(self, record: Record) -> None:
        body = {"title": record.text, "body": record.category, "userId": 1}
        status, payload = self._request_json(
            "POST", self.url, body=body, timeout_s=self.timeout_s
        )
        _raise_for_status(status, payload, "push")
        if not isinstance(payload, dict) or payload.get("id") is None:
            raise DecodeError("push response has no id")
        try:
            self.store.assign_remote_id(record.id, payload["id"])
        except (KeyError, ValueError) as exc:
            raise DecodeError(f"cannot assign remote id {payload['id']!r}: {exc}") from exc

    def fetch(self) -> list[Record]:
        status, payload = self._request_json("GET", self.url, timeout_s=self.timeout_s)
        _raise_for_status(status, payload, "fetch")
        if not isinstance(payload, list):
            raise DecodeError(f"fetch expected a list, got {type(payload).__name__}")
        records: list[Record] = []
        for item in payload[: self.fetch_limit]:
            if not isinstance(item, dict):
                logger.warning("skipping non-object remote item: %r", item)
                continue
            try:
                records.append(post_to_record(item))
            except DecodeError as exc:
                logger.warning("skipping remote item: %s", exc)
        return records
