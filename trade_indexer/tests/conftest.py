from dotenv import load_dotenv
import pathlib
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from trade_indexer.sources.indexer.registry import PoolRegistry
from trade_indexer.storage.sink import PersistenceSink
from trade_indexer.storage.trade_store import create_indexes
from trade_indexer.tests.fakes import POOL, TOKEN, FakeRpc

# Automatically load .env from project root
load_dotenv(dotenv_path=pathlib.Path(__file__).parent.parent.parent / ".env")


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'trades.db'}")
    create_indexes(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


@pytest.fixture
def sink(session_factory):
    return PersistenceSink(session_factory)


@pytest.fixture
def registry():
    registry = PoolRegistry()
    registry.add(POOL, TOKEN)
    return registry


@pytest.fixture
def rpc():
    return FakeRpc()
