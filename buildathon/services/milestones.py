"""Milestone submission services."""
from __future__ import annotations

from typing import Mapping

from fastapi import status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from buildathon.core.logging import get_logger
from buildathon.models import PAYLOAD_FIELDS, MilestoneRecord, MilestoneType, Project
from buildathon.schemas.milestone import MilestoneSubmit
from buildathon.services import milestone_rules as rules
from buildathon.utils.audit import log_audit
from buildathon.utils.errors import reject

logger = get_logger(__name__)


class DuplicateRecordConflict(Exception):
    """A plain insert lost a race on ``(project_id, milestone_type)`` and no row could be updated."""

    def __init__(self, project_id: int, milestone_type: MilestoneType) -> None:
        super().__init__(f"milestone {milestone_type.value} already recorded for project {project_id}")
        self.project_id = project_id
        self.milestone_type = milestone_type


def _get_record(db: Session, project_id: int, milestone_type: MilestoneType) -> MilestoneRecord | None:
    stmt = select(MilestoneRecord).where(
        MilestoneRecord.project_id == project_id,
        MilestoneRecord.milestone_type == milestone_type,
    )
    return db.scalars(stmt).first()


def completed_types(db: Session, project_id: int) -> set[MilestoneType]:
    """Return the milestone types that have a stored record for the project."""

    stmt = select(MilestoneRecord.milestone_type).where(MilestoneRecord.project_id == project_id)
    return set(db.scalars(stmt).all())


def record_submission(
    db: Session,
    project_id: int,
    milestone_type: MilestoneType,
    fields: Mapping[str, str | None],
) -> MilestoneRecord:
    """Create or overwrite the record for ``(project_id, milestone_type)``.

    Every payload column is rewritten; columns absent from ``fields`` are cleared.
    Does not commit.
    """

    values = {name: fields.get(name) for name in PAYLOAD_FIELDS}
    record = _get_record(db, project_id, milestone_type)
    if record is None:
        try:
            with db.begin_nested():
                record = MilestoneRecord(project_id=project_id, milestone_type=milestone_type, **values)
                db.add(record)
                db.flush()
            return record
        except IntegrityError:
            # Another request inserted the same pair first: update its row instead.
            logger.info(
                "Milestone insert lost race, updating existing row",
                extra={"project_id": project_id, "milestone_type": milestone_type.value},
            )
            record = _get_record(db, project_id, milestone_type)
            if record is None:
                raise DuplicateRecordConflict(project_id, milestone_type)

    for name, value in values.items():
        setattr(record, name, value)
    db.flush()
    return record


def submit_milestone(db: Session, payload: MilestoneSubmit, *, actor: str) -> MilestoneRecord:
    """Gate, validate and persist a milestone submission."""

    milestone_type = rules.parse_milestone_type(payload.milestone_type)
    if milestone_type is None:
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "UNKNOWN_MILESTONE_TYPE",
            "Invalid milestone type.",
            {"milestone_type": payload.milestone_type},
        )

    if db.get(Project, payload.project_id) is None:
        raise reject(status.HTTP_404_NOT_FOUND, "PROJECT_NOT_FOUND", "Project not found.")

    gate = rules.is_unlocked(milestone_type, completed_types(db, payload.project_id))
    if not gate.unlocked:
        logger.info(
            "Milestone locked",
            extra={
                "project_id": payload.project_id,
                "milestone_type": milestone_type.value,
                "missing": gate.missing.value if gate.missing else None,
            },
        )
        raise reject(
            status.HTTP_400_BAD_REQUEST,
            "PREREQUISITE_NOT_MET",
            f'Please complete "{gate.reason}" before submitting "{rules.LABELS[milestone_type]}".',
            {"prerequisite": gate.missing.value if gate.missing else None},
        )

    fields, error = rules.validate_payload(milestone_type, payload.model_dump())
    if error is not None:
        logger.info(
            "Milestone payload rejected",
            extra={"project_id": payload.project_id, "field": error.field, "kind": error.kind},
        )
        code = "MISSING_REQUIRED_FIELD" if error.kind == "missing" else "MALFORMED_FIELD"
        raise reject(status.HTTP_400_BAD_REQUEST, code, error.message, {"field": error.field})

    try:
        record = record_submission(db, payload.project_id, milestone_type, fields or {})
    except DuplicateRecordConflict as exc:
        db.rollback()
        raise reject(
            status.HTTP_409_CONFLICT,
            "DUPLICATE_RECORD_CONFLICT",
            "This milestone was submitted concurrently; please retry.",
        ) from exc

    log_audit(
        db,
        actor=actor,
        action="SUBMIT_MILESTONE",
        entity="MilestoneRecord",
        entity_id=record.id,
        data={"project_id": payload.project_id, "milestone_type": milestone_type.value},
    )
    db.commit()
    db.refresh(record)
    logger.info(
        "Milestone recorded",
        extra={"project_id": payload.project_id, "milestone_type": milestone_type.value, "milestone_id": record.id},
    )
    return record


def list_milestones(db: Session, project_id: int) -> list[MilestoneRecord]:
    """Return the project's milestone records, newest first."""

    stmt = (
        select(MilestoneRecord)
        .where(MilestoneRecord.project_id == project_id)
        .order_by(MilestoneRecord.created_at.desc(), MilestoneRecord.id.desc())
    )
    return list(db.scalars(stmt).all())


def project_progress(db: Session, project_id: int) -> list[rules.MilestoneProgress]:
    if db.get(Project, project_id) is None:
        raise reject(status.HTTP_404_NOT_FOUND, "PROJECT_NOT_FOUND", "Project not found.")
    return rules.milestone_progress(completed_types(db, project_id))


def delete_milestone(db: Session, milestone_id: int, *, actor: str) -> None:
    """Remove a milestone record; records of later milestones are left alone."""

    record = db.get(MilestoneRecord, milestone_id)
    if record is None:
        raise reject(status.HTTP_404_NOT_FOUND, "MILESTONE_NOT_FOUND", "Milestone not found.")

    log_audit(
        db,
        actor=actor,
        action="DELETE_MILESTONE",
        entity="MilestoneRecord",
        entity_id=record.id,
        data={"project_id": record.project_id, "milestone_type": record.milestone_type.value},
    )
    db.delete(record)
    db.commit()
    logger.info("Milestone deleted", extra={"milestone_id": milestone_id, "actor": actor})


__all__ = [
    "DuplicateRecordConflict",
    "completed_types",
    "delete_milestone",
    "list_milestones",
    "project_progress",
    "record_submission",
    "submit_milestone",
]
