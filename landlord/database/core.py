from typing import Tuple
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncEngine, AsyncSession
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def build_engine(database_url: str, echo: bool = False) -> Tuple[AsyncEngine, async_sessionmaker]:
    """Create the async engine and its session factory for one store instance."""
    engine = create_async_engine(database_url, echo=echo)
    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False
    )
    return engine, session_factory
