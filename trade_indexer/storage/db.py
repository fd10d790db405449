from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from functools import lru_cache
from trade_indexer.config.settings import DATABASE_URL


@lru_cache(maxsize=None)
def get_engine(database_url: str = DATABASE_URL):
    return create_engine(
        database_url,
        pool_pre_ping=True,
        pool_size=10,
        max_overflow=20
    )


def get_session_factory(database_url: str = DATABASE_URL) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=get_engine(database_url),
    )
