from datetime import date
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.requests import Request

from app.api.v1.audit import service as audit_service
from app.api.v1.audit.context import AuditContext, build_audit_context, resolve_client_ip
from app.core.enums import AuditAction
from app.core.models import AuditLog


def _request(headers=None, client=("192.168.1.20", 51234)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()],
    }
    if client is not None:
        scope["client"] = client
    return Request(scope)


async def _count(db: AsyncSession) -> int:
    return (await db.execute(select(func.count(AuditLog.id)))).scalar_one()


def test_forwarded_for_first_hop_wins() -> None:
    request = _request({"X-Forwarded-For": " 10.0.0.5 , 172.16.0.1"})
    assert resolve_client_ip(request) == "10.0.0.5"


def test_falls_back_to_peer_address() -> None:
    assert resolve_client_ip(_request()) == "192.168.1.20"
    assert resolve_client_ip(_request({"X-Forwarded-For": " , 172.16.0.1"})) == "192.168.1.20"


def test_unknown_without_request_or_peer() -> None:
    assert resolve_client_ip(None) == "unknown"
    assert resolve_client_ip(_request(client=None)) == "unknown"


def test_context_defaults_to_anonymous() -> None:
    context = build_audit_context(None, None)
    assert context.username == "anonymous"
    assert context.ip == "unknown"


def test_serialize_payload_is_compact_json() -> None:
    payload = {"last_name": "Pop", "grade": Decimal("9.50"), "day": date(2024, 10, 1), "action": AuditAction.CREATE}
    assert audit_service.serialize_payload(payload) == (
        '{"last_name":"Pop","grade":"9.50","day":"2024-10-01","action":"CREATE"}'
    )
    assert audit_service.serialize_payload(None) is None


def test_serialize_payload_falls_back_to_text(caplog) -> None:
    class Opaque:
        def __repr__(self) -> str:
            return "<opaque>"

    payload = {"value": Opaque()}
    with caplog.at_level("WARNING"):
        result = audit_service.serialize_payload(payload)

    assert result == str(payload)
    assert "Could not serialize audit payload" in caplog.text


@pytest.mark.asyncio
async def test_record_uses_explicit_context(db_session: AsyncSession) -> None:
    context = AuditContext(username="admin", ip="10.0.0.5")
    entry = await audit_service.record(
        db_session, context, AuditAction.CREATE, "Student", 42, {"last_name": "Pop"}
    )
    await db_session.commit()

    stored = await db_session.get(AuditLog, entry.id)
    assert stored.username == "admin"
    assert stored.ip == "10.0.0.5"
    assert stored.action == "CREATE"
    assert stored.entity == "Student"
    assert stored.entity_id == 42
    assert '"last_name":"Pop"' in stored.payload_json
    assert stored.timestamp is not None


@pytest.mark.asyncio
async def test_record_without_principal_or_request(db_session: AsyncSession) -> None:
    entry = await audit_service.record(db_session, AuditContext(), AuditAction.DELETE, "Course", 7)
    await db_session.commit()

    assert entry.username == "anonymous"
    assert entry.ip == "unknown"
    assert entry.payload_json is None


@pytest.mark.asyncio
async def test_rollback_discards_entry(db_session: AsyncSession) -> None:
    await audit_service.record(db_session, AuditContext(username="admin"), AuditAction.UPDATE, "Student", 1)
    await db_session.rollback()

    assert await _count(db_session) == 0


@pytest.mark.asyncio
async def test_auth_event_commits_on_its_own(db_session: AsyncSession, session_factory) -> None:
    await audit_service.record_auth_event(db_session, AuditAction.LOGIN_FAILED, None, "10.0.0.9")

    async with session_factory() as other:
        result = await other.execute(select(AuditLog))
        entries = result.scalars().all()
    assert len(entries) == 1
    entry = entries[0]
    assert entry.action == "LOGIN_FAILED"
    assert entry.entity == "Auth"
    assert entry.entity_id is None
    assert entry.payload_json is None
    assert entry.username == "unknown"
    assert entry.ip == "10.0.0.9"


@pytest.mark.asyncio
async def test_entries_cannot_be_updated(db_session: AsyncSession) -> None:
    entry = await audit_service.record(db_session, AuditContext(username="admin"), AuditAction.CREATE, "Student", 1)
    await db_session.commit()

    entry.action = "DELETE"
    with pytest.raises(RuntimeError, match="write-once"):
        await db_session.commit()


@pytest.mark.asyncio
async def test_entries_cannot_be_deleted(db_session: AsyncSession) -> None:
    entry = await audit_service.record(db_session, AuditContext(username="admin"), AuditAction.CREATE, "Student", 1)
    await db_session.commit()

    await db_session.delete(entry)
    with pytest.raises(RuntimeError, match="write-once"):
        await db_session.commit()


@pytest.mark.asyncio
async def test_listing_is_newest_first(db_session: AsyncSession) -> None:
    admin = AuditContext(username="admin", ip="10.0.0.5")
    for entity_id in (1, 2, 3):
        await audit_service.record(db_session, admin, AuditAction.CREATE, "Student", entity_id)
    await audit_service.record(db_session, AuditContext(username="secretar"), AuditAction.CREATE, "Course", 1)
    await db_session.commit()

    page = await audit_service.list_entries_by_username(db_session, "admin", 0, 2)
    assert page.total_elements == 3
    assert page.total_pages == 2
    assert page.first is True and page.last is False
    assert [e.entity_id for e in page.data] == [3, 2]

    page = await audit_service.list_entries_by_entity(db_session, "Course", 1, 0, 50)
    assert [e.username for e in page.data] == ["secretar"]

    page = await audit_service.list_entries(db_session, 0, 50)
    assert page.total_elements == 4
