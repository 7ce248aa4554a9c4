from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from goalplan.config import settings

_raw_url = settings.database_url

if _raw_url.startswith("postgres://"):
    _raw_url = _raw_url.replace("postgres://", "postgresql+asyncpg://", 1)
elif _raw_url.startswith("postgresql://"):
    _raw_url = _raw_url.replace("postgresql://", "postgresql+asyncpg://", 1)

engine = create_async_engine(_raw_url, pool_pre_ping=True)
async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

SCHEMA = (
    "CREATE TABLE IF NOT EXISTS accounts ("
    " id VARCHAR(64) PRIMARY KEY,"
    " username TEXT NOT NULL UNIQUE,"
    " email TEXT UNIQUE,"
    " full_name TEXT,"
    " phone TEXT,"
    " password_hash TEXT NOT NULL,"
    " failed_login_attempts INTEGER NOT NULL DEFAULT 0,"
    " locked_until TIMESTAMP WITH TIME ZONE,"
    " last_login_at TIMESTAMP WITH TIME ZONE,"
    " member_id TEXT,"
    " membership_tier TEXT NOT NULL DEFAULT 'free',"
    " last_member_sync_at TIMESTAMP WITH TIME ZONE,"
    " created_at TIMESTAMP WITH TIME ZONE NOT NULL,"
    " updated_at TIMESTAMP WITH TIME ZONE NOT NULL"
    ")",
    "CREATE TABLE IF NOT EXISTS savings_goals ("
    " id VARCHAR(64) PRIMARY KEY,"
    " owner_id VARCHAR(64) NOT NULL,"
    " name TEXT NOT NULL,"
    " goal_type TEXT NOT NULL,"
    " target_amount DOUBLE PRECISION NOT NULL,"
    " current_savings DOUBLE PRECISION NOT NULL DEFAULT 0,"
    " target_date DATE NOT NULL,"
    " monthly_capacity DOUBLE PRECISION,"
    " is_active BOOLEAN NOT NULL DEFAULT TRUE,"
    " created_at TIMESTAMP WITH TIME ZONE NOT NULL,"
    " updated_at TIMESTAMP WITH TIME ZONE NOT NULL"
    ")",
    "CREATE INDEX IF NOT EXISTS ix_savings_goals_owner ON savings_goals (owner_id, is_active)",
)


async def init_schema(bind: AsyncEngine = engine) -> None:
    async with bind.begin() as conn:
        for statement in SCHEMA:
            await conn.execute(text(statement))
