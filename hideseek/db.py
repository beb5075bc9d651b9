import pathlib

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from hideseek.config import db_backend, db_name, host, password, port, sqlite_path, user
from hideseek.models.schemas import Base


def database_url(backend: str = db_backend) -> str:
    """Build the async driver URL for the configured backend ("postgres" or "sqlite")."""
    if backend == "sqlite":
        file_path = pathlib.Path(sqlite_path) if sqlite_path else pathlib.Path(__file__).parents[1] / "hideseek.sqlite3"
        return f"sqlite+aiosqlite:///{file_path}"
    return f"postgresql+asyncpg://{user}:{password}@{host}:{port}/{db_name}"


if db_backend == "sqlite":
    engine = create_async_engine(url=database_url("sqlite"), echo=False)
else:
    engine = create_async_engine(database_url("postgres"), pool_size=20, max_overflow=20)

# Centralized session factory to avoid creating it in router modules.
Session = async_sessionmaker(
    class_=AsyncSession,
    autoflush=True,
    expire_on_commit=False,
    bind=engine,
)


async def init_db() -> None:
    """Create all tables that do not exist yet."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
