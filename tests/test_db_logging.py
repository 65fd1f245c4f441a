import json
import logging

from sqlalchemy import text

from buildathon.core.logging import build_formatter
from buildathon.db import get_engine


def test_sqlite_connections_enforce_foreign_keys(db_session):
    assert db_session.execute(text("PRAGMA foreign_keys")).scalar() == 1
    with get_engine().connect() as conn:
        assert conn.execute(text("PRAGMA foreign_keys")).scalar() == 1


def test_json_formatter_renders_extra_fields():
    record = logging.LogRecord(
        name="buildathon.services.milestones",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Milestone recorded",
        args=(),
        exc_info=None,
    )
    record.project_id = 7

    line = json.loads(build_formatter().format(record))

    assert line["message"] == "Milestone recorded"
    assert line["level"] == "INFO"
    assert line["logger"] == "buildathon.services.milestones"
    assert line["project_id"] == 7
    assert "asctime" in line
