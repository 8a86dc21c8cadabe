"""Schema tests — the ORM metadata matches the initial migration."""

from datetime import datetime, timezone

import pytest
from sqlalchemy import UniqueConstraint, text

from devtasks.db.models import Task, User


def test_user_email_unique_constraint_is_named():
    names = {
        c.name for c in User.__table__.constraints if isinstance(c, UniqueConstraint)
    }
    assert names == {"uq_users_email"}


def test_task_status_has_server_default():
    assert Task.__table__.c.status.server_default.arg == "ToDo"


@pytest.mark.asyncio
async def test_raw_insert_without_status_gets_todo(app):
    now = datetime.now(timezone.utc).isoformat()
    async with app.state.engine.begin() as conn:
        await conn.execute(
            text(
                "INSERT INTO users (id, name, email, password_hash, created_at) "
                "VALUES (1, 'Alice', 'alice@x.com', 'x', :now)"
            ),
            {"now": now},
        )
        await conn.execute(
            text(
                "INSERT INTO projects (id, name, owner_id, created_at) "
                "VALUES (1, 'Website', 1, :now)"
            ),
            {"now": now},
        )
        await conn.execute(
            text(
                "INSERT INTO tasks (title, project_id, created_at) "
                "VALUES ('Design', 1, :now)"
            ),
            {"now": now},
        )
        status = (await conn.execute(text("SELECT status FROM tasks"))).scalar_one()

    assert status == "ToDo"
