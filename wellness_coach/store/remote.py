"""
Hosted table API client — ``RecordStore`` over HTTPS.

Endpoints (relative to ``api_url``)::

    POST   /tables/{table}/fetch           body: {"where": [...], "orderBy": [...]}
    GET    /tables/{table}/records/{id}
    POST   /tables/{table}/records         body: {"records": [{...}]}
    PATCH  /tables/{table}/records         body: {"records": [{"Id": n, ...}]}
    DELETE /tables/{table}/records         body: {"RecordIds": [n]}

Every response is an envelope::

    {"success": true, "message": "", "data": ..., "results": [{"success": true, "data": {...}}]}

Credentials (.env, gitignored)::

    WELLNESS_COACH_PROJECT_ID=...
    WELLNESS_COACH_PUBLIC_KEY=...

Error mapping:
  - transport failure, 5xx, ``success: false``      → ``UpstreamError``
  - HTTP 404, empty ``data`` on get                   → ``NotFoundError``
  - HTTP 400 / 422, failed entry in ``results``       → ``ValidationError``
    (a failed entry whose message says "not found" → ``NotFoundError``)

No retry or backoff is attempted; that belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from wellness_coach.errors import NotFoundError, UpstreamError, ValidationError
from wellness_coach.store.base import (
    ListQuery,
    RecordStore,
    check_kind,
    check_payload,
    check_query,
)
from wellness_coach.store.mapping import REMOTE_TABLES, from_remote, remote_field, to_remote

logger = logging.getLogger(__name__)


class RemoteRecordStore(RecordStore):
    """``RecordStore`` backed by the hosted record-storage service.

    Usage::

        async with RemoteRecordStore(api_url, project_id, public_key) as store:
            clients = await store.list("client")

    Args:
        api_url: Service base URL.
        project_id: Project identifier sent with every request.
        public_key: Public API key sent with every request.
        timeout_seconds: Per-request timeout.
        transport: Optional ``httpx`` transport (tests pass ``MockTransport``).
    """

    def __init__(
        self,
        api_url: str,
        project_id: Optional[str] = None,
        public_key: Optional[str] = None,
        timeout_seconds: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if project_id:
            headers["X-Project-Id"] = project_id
        if public_key:
            headers["X-Public-Key"] = public_key
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers=headers,
            timeout=timeout_seconds,
            transport=transport,
        )

    # ── RecordStore ───────────────────────────────────────────────────────────

    async def list(self, kind: str, query: ListQuery | None = None) -> list[dict[str, Any]]:
        check_kind(kind)
        check_query(kind, query)
        body: dict[str, Any] = {}
        if query is not None and query.field is not None:
            column = remote_field(kind, query.field)
            if query.is_null:
                values = [None]
            else:
                values = [query.value]
            body["where"] = [{"FieldName": column, "Operator": "EqualTo", "Values": values}]
        if query is not None and query.order_by:
            body["orderBy"] = [
                {
                    "fieldName": remote_field(kind, query.order_by),
                    "sorttype": "DESC" if query.descending else "ASC",
                }
            ]
        envelope = await self._send(kind, "POST", f"/tables/{REMOTE_TABLES[kind]}/fetch", json=body)
        return [from_remote(kind, r) for r in envelope.get("data") or []]

    async def get(self, kind: str, record_id: int) -> dict[str, Any]:
        check_kind(kind)
        envelope = await self._send(
            kind, "GET", f"/tables/{REMOTE_TABLES[kind]}/records/{record_id}",
            record_id=record_id,
        )
        data = envelope.get("data")
        if not data:
            raise NotFoundError(kind, record_id)
        return from_remote(kind, data)

    async def create(self, kind: str, data: dict[str, Any]) -> dict[str, Any]:
        payload = to_remote(kind, check_payload(kind, data))
        envelope = await self._send(
            kind, "POST", f"/tables/{REMOTE_TABLES[kind]}/records", json={"records": [payload]}
        )
        return from_remote(kind, _single_result(kind, envelope, None))

    async def update(self, kind: str, record_id: int, patch: dict[str, Any]) -> dict[str, Any]:
        changes = to_remote(kind, check_payload(kind, patch, partial=True), partial=True)
        envelope = await self._send(
            kind,
            "PATCH",
            f"/tables/{REMOTE_TABLES[kind]}/records",
            json={"records": [{"Id": record_id, **changes}]},
            record_id=record_id,
        )
        return from_remote(kind, _single_result(kind, envelope, record_id))

    async def delete(self, kind: str, record_id: int) -> bool:
        check_kind(kind)
        envelope = await self._send(
            kind,
            "DELETE",
            f"/tables/{REMOTE_TABLES[kind]}/records",
            json={"RecordIds": [record_id]},
            record_id=record_id,
        )
        _check_results(kind, envelope, record_id)
        return True

    async def close(self) -> None:
        await self._client.aclose()

    # ── Transport ─────────────────────────────────────────────────────────────

    async def _send(
        self,
        kind: str,
        method: str,
        path: str,
        json: dict[str, Any] | None = None,
        record_id: int | None = None,
    ) -> dict[str, Any]:
        try:
            resp = await self._client.request(method, path, json=json)
        except httpx.HTTPError as exc:
            logger.error("%s %s failed: %s", method, path, exc)
            raise UpstreamError(f"{method} {path} failed: {exc}") from exc

        if resp.status_code == 404 and record_id is not None:
            raise NotFoundError(kind, record_id)
        if resp.status_code in (400, 422):
            raise ValidationError(_message(resp) or f"{kind} payload rejected.")
        if resp.is_error:
            raise UpstreamError(
                f"{method} {path} returned HTTP {resp.status_code}: {_message(resp)}"
            )

        try:
            envelope = resp.json()
        except ValueError as exc:
            raise UpstreamError(f"{method} {path} returned a non-JSON body.") from exc

        if not envelope.get("success", False):
            message = envelope.get("message") or "request failed"
            logger.error("%s %s unsuccessful: %s", method, path, message)
            raise UpstreamError(message)
        return envelope


# ── Private helpers ────────────────────────────────────────────────────────────

def _message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:200]
    return str(body.get("message", "")) if isinstance(body, dict) else ""


def _check_results(kind: str, envelope: dict[str, Any], record_id: int | None) -> None:
    failed = [r for r in envelope.get("results") or [] if not r.get("success")]
    if not failed:
        return
    message = failed[0].get("message") or f"{kind} write rejected."
    logger.error("%d %s record(s) failed: %s", len(failed), kind, failed)
    if record_id is not None and "not found" in message.lower():
        raise NotFoundError(kind, record_id)
    raise ValidationError(message)


def _single_result(kind: str, envelope: dict[str, Any], record_id: int | None) -> dict[str, Any]:
    _check_results(kind, envelope, record_id)
    results = envelope.get("results")
    data = results[0].get("data") if results else envelope.get("data")
    if isinstance(data, list):
        data = data[0] if data else None
    if not data:
        raise UpstreamError(f"{kind} write returned no record.")
    return data
