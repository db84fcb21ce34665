"""Integration tests for per-request commit/rollback through the real get_db.

These use ``db_client``, which keeps get_db in place and points its session
factory at the in-memory test engine.
"""

import logging

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from nested_students.crud.students import crud_student


class FailingCommitSession(AsyncSession):
    async def commit(self) -> None:
        raise RuntimeError("commit failed")


def _file(name: str) -> dict:
    return {"profile": (name, b"\x89PNG", "image/png")}


async def _stored_ids(session_factory) -> list[int]:
    """Read back from a fresh session, i.e. only what was committed."""
    async with session_factory() as session:
        return [s.id for s in await crud_student.get_multi(session)]


# ---------------------------------------------------------------------------
# Commit
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_created_student_is_committed(db_client, session_factory):
    resp = await db_client.post("/students", data={"name": "A"})
    assert resp.status_code == 200
    student_id = resp.json()["id"]

    assert await _stored_ids(session_factory) == [student_id]
    resp = await db_client.get(f"/students/{student_id}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "A"


@pytest.mark.asyncio
async def test_update_and_delete_are_committed(db_client, session_factory):
    a = (await db_client.post("/students", data={"name": "A"})).json()
    b = (await db_client.post("/students", data={"name": "B", "parent": str(a["id"])})).json()

    resp = await db_client.put(f"/students/{b['id']}", data={"name": "B2"})
    assert resp.status_code == 200
    async with session_factory() as session:
        assert (await crud_student.get(session, b["id"])).name == "B2"

    assert (await db_client.delete(f"/students/{a['id']}")).status_code == 200
    assert await _stored_ids(session_factory) == []


@pytest.mark.asyncio
async def test_failed_commit_returns_500_and_persists_nothing(
    db_client, test_engine, session_factory, monkeypatch, caplog
):
    monkeypatch.setattr(
        "nested_students.database.AsyncSessionLocal",
        async_sessionmaker(
            bind=test_engine, class_=FailingCommitSession, expire_on_commit=False
        ),
    )

    with caplog.at_level(logging.ERROR):
        resp = await db_client.post("/students", data={"name": "A"})

    assert resp.status_code == 500
    assert resp.json() == {"detail": "Internal Server Error"}
    assert "commit failed" in caplog.text
    assert await _stored_ids(session_factory) == []


# ---------------------------------------------------------------------------
# Rollback
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_delete_with_missing_child_blob_keeps_records(db_client, blobs, session_factory):
    a = (await db_client.post("/students", data={"name": "A"})).json()
    b = (await db_client.post(
        "/students", data={"name": "B", "parent": str(a["id"])}, files=_file("b.png")
    )).json()
    c = (await db_client.post(
        "/students", data={"name": "C", "parent": str(a["id"])}, files=_file("c.png")
    )).json()
    del blobs.blobs["c.png"]

    resp = await db_client.delete(f"/students/{a['id']}")
    assert resp.status_code == 500

    assert await _stored_ids(session_factory) == [a["id"], b["id"], c["id"]]


@pytest.mark.asyncio
async def test_failure_after_cascade_rolls_back_record_deletes(db_client, blobs, session_factory):
    a = (await db_client.post("/students", data={"name": "A"}, files=_file("a.png"))).json()
    b = (await db_client.post(
        "/students", data={"name": "B", "parent": str(a["id"])}, files=_file("b.png")
    )).json()
    # Children and the parent row are deleted before the parent's own blob.
    del blobs.blobs["a.png"]

    resp = await db_client.delete(f"/students/{a['id']}")
    assert resp.status_code == 500

    assert await _stored_ids(session_factory) == [a["id"], b["id"]]
    # Blob deletions are not compensated
    assert "b.png" not in blobs.blobs
