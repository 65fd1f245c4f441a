"""Milestone submission flow over HTTP."""
import pytest
from sqlalchemy import func, select

from buildathon.models import MilestoneRecord, MilestoneType
from buildathon.models.audit import AuditLog
from buildathon.services import milestones as milestones_service

ADDRESS_A = "0x" + "1234567890" * 4
ADDRESS_B = "0x" + "abcdefABCD" * 4


def _record(db_session, project, *types):
    for milestone_type in types:
        milestones_service.record_submission(db_session, project.id, milestone_type, {})
    db_session.commit()


@pytest.mark.anyio("asyncio")
async def test_end_to_end_progression(client, db_session, make_project):
    project = make_project()
    _record(db_session, project, MilestoneType.REGISTRATION, MilestoneType.TESTNET, MilestoneType.KARMA_GAP)

    early = await client.post(
        "/api/milestones",
        json={"project_id": project.id, "milestone_type": "farcaster", "farcaster_link": "https://warpcast.com/x"},
    )
    assert early.status_code == 400
    error = early.json()["error"]
    assert error["code"] == "PREREQUISITE_NOT_MET"
    assert error["details"]["prerequisite"] == "mainnet"
    assert '"Mainnet"' in error["message"]

    mainnet = await client.post(
        "/api/milestones",
        json={"project_id": project.id, "milestone_type": "mainnet", "contract_address": ADDRESS_A},
    )
    assert mainnet.status_code == 200
    assert mainnet.json()["milestone_type"] == "mainnet"
    assert MilestoneType.MAINNET in milestones_service.completed_types(db_session, project.id)

    final = await client.post(
        "/api/milestones",
        json={
            "project_id": project.id,
            "milestone_type": "final-submission",
            "slides_link": "https://docs.example.com/slides",
            "pitch_deck_link": "https://docs.example.com/deck",
        },
    )
    assert final.status_code == 200
    assert MilestoneType.FARCASTER not in milestones_service.completed_types(db_session, project.id)


@pytest.mark.anyio("asyncio")
async def test_resubmission_updates_single_record(client, db_session, make_project):
    project = make_project()
    _record(db_session, project, MilestoneType.REGISTRATION)

    for address in (ADDRESS_A, ADDRESS_B):
        resp = await client.post(
            "/api/milestones",
            json={"project_id": project.id, "milestone_type": "testnet", "contract_address": address},
        )
        assert resp.status_code == 200

    count = db_session.scalar(
        select(func.count())
        .select_from(MilestoneRecord)
        .where(
            MilestoneRecord.project_id == project.id,
            MilestoneRecord.milestone_type == MilestoneType.TESTNET,
        )
    )
    assert count == 1
    listed = await client.get("/api/milestones", params={"project_id": project.id})
    testnet = [m for m in listed.json() if m["milestone_type"] == "testnet"]
    assert testnet[0]["contract_address"] == ADDRESS_B


def test_record_submission_clears_fields_missing_from_resubmission(db_session, make_project):
    project = make_project()
    first = milestones_service.record_submission(
        db_session,
        project.id,
        MilestoneType.MAINNET,
        {"contract_address": ADDRESS_A, "karma_gap_link": "https://www.karmahq.xyz/project/a"},
    )
    second = milestones_service.record_submission(
        db_session, project.id, MilestoneType.MAINNET, {"contract_address": ADDRESS_B}
    )
    assert first.id == second.id
    assert second.contract_address == ADDRESS_B
    assert second.karma_gap_link is None


@pytest.mark.anyio("asyncio")
async def test_unknown_milestone_type_rejected(client, make_project):
    project = make_project()
    resp = await client.post("/api/milestones", json={"project_id": project.id, "milestone_type": "devnet"})
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "UNKNOWN_MILESTONE_TYPE"


@pytest.mark.anyio("asyncio")
async def test_missing_project_returns_404(client):
    resp = await client.post("/api/milestones", json={"project_id": 999999, "milestone_type": "registration"})
    assert resp.status_code == 404
    assert resp.json()["error"]["code"] == "PROJECT_NOT_FOUND"


@pytest.mark.anyio("asyncio")
async def test_locked_wins_over_invalid_payload(client, make_project):
    project = make_project()
    resp = await client.post(
        "/api/milestones",
        json={"project_id": project.id, "milestone_type": "testnet", "contract_address": "nope"},
    )
    assert resp.status_code == 400
    assert resp.json()["error"]["code"] == "PREREQUISITE_NOT_MET"


@pytest.mark.anyio("asyncio")
async def test_field_errors_are_distinguished(client, db_session, make_project):
    project = make_project()
    _record(db_session, project, MilestoneType.REGISTRATION)

    missing = await client.post("/api/milestones", json={"project_id": project.id, "milestone_type": "testnet"})
    assert missing.status_code == 400
    assert missing.json()["error"]["code"] == "MISSING_REQUIRED_FIELD"
    assert missing.json()["error"]["details"]["field"] == "contract_address"

    zero = await client.post(
        "/api/milestones",
        json={"project_id": project.id, "milestone_type": "testnet", "contract_address": "0x" + "0" * 40},
    )
    assert zero.status_code == 400
    assert zero.json()["error"]["code"] == "MALFORMED_FIELD"


@pytest.mark.anyio("asyncio")
async def test_submission_writes_audit_entry(client, db_session, make_project):
    project = make_project()
    resp = await client.post(
        "/api/milestones", json={"project_id": project.id, "milestone_type": "registration"}
    )
    assert resp.status_code == 200

    audit = db_session.scalars(
        select(AuditLog).where(AuditLog.action == "SUBMIT_MILESTONE").order_by(AuditLog.id.desc())
    ).first()
    assert audit is not None
    assert audit.entity_id == resp.json()["id"]
    assert audit.data_json["milestone_type"] == "registration"


@pytest.mark.anyio("asyncio")
async def test_progress_endpoint(client, db_session, make_project):
    project = make_project()
    _record(db_session, project, MilestoneType.REGISTRATION)

    resp = await client.get("/api/milestones/progress", params={"project_id": project.id})
    assert resp.status_code == 200
    rows = {row["milestone_type"]: row for row in resp.json()}
    assert rows["registration"]["completed"] is True
    assert rows["testnet"]["unlocked"] is True
    assert rows["karma-gap"]["unlocked"] is False
    assert rows["karma-gap"]["blocked_by"] == "Testnet"


@pytest.mark.anyio("asyncio")
async def test_delete_requires_admin_and_keeps_downstream(client, db_session, make_project, admin_cookies):
    project = make_project()
    _record(db_session, project, MilestoneType.REGISTRATION, MilestoneType.TESTNET)
    testnet_id = db_session.scalar(
        select(MilestoneRecord.id).where(
            MilestoneRecord.project_id == project.id,
            MilestoneRecord.milestone_type == MilestoneType.TESTNET,
        )
    )
    registration_id = db_session.scalar(
        select(MilestoneRecord.id).where(
            MilestoneRecord.project_id == project.id,
            MilestoneRecord.milestone_type == MilestoneType.REGISTRATION,
        )
    )

    anonymous = await client.delete(f"/api/milestones/{registration_id}")
    assert anonymous.status_code == 401

    client.cookies.set("admin_session", admin_cookies["admin_session"])
    resp = await client.delete(f"/api/milestones/{registration_id}")
    assert resp.status_code == 204

    assert milestones_service.completed_types(db_session, project.id) == {MilestoneType.TESTNET}
    assert db_session.get(MilestoneRecord, testnet_id) is not None

    again = await client.delete(f"/api/milestones/{registration_id}")
    assert again.status_code == 404


def _lookup_missing_first(monkeypatch, times=1):
    """Make the first ``times`` record lookups miss, as if another request had not committed yet."""

    real_lookup = milestones_service._get_record
    calls = {"n": 0}

    def _lookup(db, project_id, milestone_type):
        calls["n"] += 1
        if calls["n"] <= times:
            return None
        return real_lookup(db, project_id, milestone_type)

    monkeypatch.setattr(milestones_service, "_get_record", _lookup)
    return calls


def test_lost_insert_race_updates_winning_row(db_session, make_project, monkeypatch):
    project = make_project()
    milestones_service.record_submission(
        db_session, project.id, MilestoneType.TESTNET, {"contract_address": ADDRESS_A}
    )
    db_session.commit()

    calls = _lookup_missing_first(monkeypatch)
    record = milestones_service.record_submission(
        db_session, project.id, MilestoneType.TESTNET, {"contract_address": ADDRESS_B}
    )
    db_session.commit()

    assert calls["n"] == 2
    rows = db_session.scalars(
        select(MilestoneRecord).where(
            MilestoneRecord.project_id == project.id,
            MilestoneRecord.milestone_type == MilestoneType.TESTNET,
        )
    ).all()
    assert len(rows) == 1
    assert rows[0].id == record.id
    assert rows[0].contract_address == ADDRESS_B


@pytest.mark.anyio("asyncio")
async def test_unresolvable_insert_race_returns_conflict(client, db_session, make_project, monkeypatch):
    project = make_project()
    _record(db_session, project, MilestoneType.REGISTRATION)
    milestones_service.record_submission(
        db_session, project.id, MilestoneType.TESTNET, {"contract_address": ADDRESS_A}
    )
    db_session.commit()
    audits_before = db_session.scalar(
        select(func.count()).select_from(AuditLog).where(AuditLog.action == "SUBMIT_MILESTONE")
    )

    _lookup_missing_first(monkeypatch, times=2)
    resp = await client.post(
        "/api/milestones",
        json={"project_id": project.id, "milestone_type": "testnet", "contract_address": ADDRESS_B},
    )
    assert resp.status_code == 409
    assert resp.json()["error"]["code"] == "DUPLICATE_RECORD_CONFLICT"

    monkeypatch.undo()
    db_session.expire_all()
    rows = db_session.scalars(
        select(MilestoneRecord).where(
            MilestoneRecord.project_id == project.id,
            MilestoneRecord.milestone_type == MilestoneType.TESTNET,
        )
    ).all()
    assert [row.contract_address for row in rows] == [ADDRESS_A]
    audits_after = db_session.scalar(
        select(func.count()).select_from(AuditLog).where(AuditLog.action == "SUBMIT_MILESTONE")
    )
    assert audits_after == audits_before
