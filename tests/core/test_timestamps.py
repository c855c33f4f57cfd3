from datetime import timedelta

from sqlalchemy import DateTime
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, select

import src.models  # noqa: F401
from src.auth.models import UserSession
from src.core.utils import utc_now
from src.users.models import User

def _timestamp_columns():
    for table in SQLModel.metadata.tables.values():
        for column in table.columns:
            if column.name.endswith("_at") or column.name == "expiry_date":
                yield table.name, column

def test_timestamp_columns_are_naive_datetime():
    columns = list(_timestamp_columns())
    assert columns
    for table_name, column in columns:
        assert type(column.type) is DateTime, f"{table_name}.{column.name}"
        assert column.type.timezone is False, f"{table_name}.{column.name}"

async def test_naive_utc_values_are_stored(db_session: AsyncSession, test_user: User):
    expires_at = utc_now() + timedelta(days=7)
    db_session.add(UserSession(token="naive-session", user_id=test_user.id, expires_at=expires_at))
    await db_session.commit()

    stored = (await db_session.execute(select(UserSession).where(UserSession.token == "naive-session"))).scalars().one()
    assert stored.expires_at.tzinfo is None
    assert stored.expires_at == expires_at
    assert test_user.created_at.tzinfo is None
