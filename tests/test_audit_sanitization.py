from sqlalchemy import select

from buildathon.models.audit import AuditLog
from buildathon.utils.audit import log_audit, sanitize_payload_for_audit


def test_sanitize_masks_contact_details():
    payload = {
        "team_name": "Celo Builders",
        "wallet_address": "0x1234567890abcdef1234",
        "members": [{"member_email": "ana@example.com", "country": "Brazil"}],
        "user_agent": "Mozilla/5.0",
    }

    sanitized = sanitize_payload_for_audit(payload)

    assert sanitized["team_name"] == "Celo Builders"
    assert sanitized["wallet_address"] == "0x1234***1234"
    assert sanitized["members"][0]["member_email"] == "***@example.com"
    assert sanitized["members"][0]["country"] == "Brazil"
    assert sanitized["user_agent"] == "***"
    assert payload["members"][0]["member_email"] == "ana@example.com"


def test_log_audit_persists_sanitized_entry(db_session):
    log_audit(
        db_session,
        actor="admin",
        action="DELETE_TEAM",
        entity="Team",
        entity_id=42,
        data={"email": "lead@example.com", "short_wallet": "0x1"},
    )
    db_session.flush()

    entry = db_session.scalars(select(AuditLog).where(AuditLog.entity_id == 42)).one()
    assert entry.actor == "admin"
    assert entry.data_json == {"email": "***@example.com", "short_wallet": "0x1"}
    assert entry.at is not None
