# scripts/check_db.py
import sys
from pathlib import Path

from sqlalchemy import func, select, text

# Ensure project root is on the path when running this script directly
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

import asyncio

from auditsink.infrastructure.database.models import AuditEventRecord
from auditsink.infrastructure.database.session import create_schema, get_engine


async def check_connection():
    engine = get_engine()
    await create_schema(engine)
    async with engine.begin() as conn:
        result = await conn.execute(text("SELECT 1"))
        print("DB Connected:", result.scalar())
        rows = await conn.execute(select(func.count()).select_from(AuditEventRecord))
        print("audit_event rows:", rows.scalar())
    await engine.dispose()


asyncio.run(check_connection())
