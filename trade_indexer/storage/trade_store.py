from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session
from typing import Iterator, List, Optional
import logging
from trade_indexer.config.settings import CHECKPOINT_ID, UPSERT_CHUNK_SIZE
from trade_indexer.storage.base import Base
from trade_indexer.storage.models.indexer_state import IndexerState
from trade_indexer.storage.models.trade_record import TradeRecordRow
from trade_indexer.utils.log_utils import chunked
from trade_indexer.utils.types import TradeRecord

log = logging.getLogger(__name__)

_RECORD_COLUMNS = [c.name for c in TradeRecordRow.__table__.columns]


def _insert_for(session: Session):
    """Dialect-specific INSERT that supports ON CONFLICT."""
    if session.get_bind().dialect.name == "sqlite":
        return sqlite_insert
    return pg_insert


def create_indexes(engine) -> None:
    """Create tables and their indexes (block_number, token, pool, timestamp)."""
    Base.metadata.create_all(engine)
    log.info("Indexes on trade_records created")


# ---------------------------------------------------------------------
# write side
# ---------------------------------------------------------------------

def load_checkpoint(session: Session) -> int:
    value = session.execute(
        select(IndexerState.value).where(IndexerState.id == CHECKPOINT_ID)
    ).scalar_one_or_none()
    return int(value) if value is not None else 0


def upsert_checkpoint(session: Session, value: int) -> None:
    """Store the checkpoint; a lower value never replaces a higher one."""
    insert = _insert_for(session)
    stmt = insert(IndexerState.__table__).values(id=CHECKPOINT_ID, value=int(value))
    stmt = stmt.on_conflict_do_update(
        index_elements=["id"],
        set_={"value": stmt.excluded.value},
        where=IndexerState.__table__.c.value < stmt.excluded.value,
    )
    session.execute(stmt)


def bulk_upsert_records(session: Session, records: List[TradeRecord]) -> int:
    """Insert-or-replace trade records keyed by id.

    Writing the same record twice leaves exactly one identical row.
    """
    if not records:
        return 0

    insert = _insert_for(session)
    for chunk in chunked([r._asdict() for r in records], UPSERT_CHUNK_SIZE):
        stmt = insert(TradeRecordRow.__table__).values(chunk)
        stmt = stmt.on_conflict_do_update(
            index_elements=["id"],
            set_={col: stmt.excluded[col] for col in _RECORD_COLUMNS if col != "id"},
        )
        session.execute(stmt)
    return len(records)


# ---------------------------------------------------------------------
# read side
# ---------------------------------------------------------------------

def row_to_record(row: TradeRecordRow) -> TradeRecord:
    return TradeRecord(**{col: getattr(row, col) for col in _RECORD_COLUMNS})


def build_filter(
    token: Optional[str] = None,
    pool: Optional[str] = None,
    min_block: Optional[int] = None,
    since_ms: Optional[int] = None,
) -> list:
    conditions = []
    if token:
        conditions.append(TradeRecordRow.token == token.lower())
    if pool:
        conditions.append(TradeRecordRow.pool == pool.lower())
    if min_block is not None:
        conditions.append(TradeRecordRow.block_number >= min_block)
    if since_ms is not None:
        conditions.append(TradeRecordRow.timestamp >= since_ms)
    return conditions


def find_records(
    session: Session,
    conditions: list,
    skip: int = 0,
    limit: Optional[int] = None,
) -> List[TradeRecord]:
    """Matching records, newest block first."""
    stmt = (
        select(TradeRecordRow)
        .where(*conditions)
        .order_by(TradeRecordRow.block_number.desc(), TradeRecordRow.id.desc())
        .offset(skip)
    )
    if limit is not None:
        stmt = stmt.limit(limit)
    return [row_to_record(row) for row in session.execute(stmt).scalars()]


def count_records(session: Session, conditions: list) -> int:
    stmt = select(func.count()).select_from(TradeRecordRow).where(*conditions)
    return int(session.execute(stmt).scalar_one())


def find_records_after_block(session: Session, block_number: int) -> List[TradeRecord]:
    """Records strictly above `block_number`, oldest first."""
    stmt = (
        select(TradeRecordRow)
        .where(TradeRecordRow.block_number > block_number)
        .order_by(TradeRecordRow.block_number.asc(), TradeRecordRow.id.asc())
    )
    return [row_to_record(row) for row in session.execute(stmt).scalars()]


def latest_block_number(session: Session) -> int:
    value = session.execute(select(func.max(TradeRecordRow.block_number))).scalar_one_or_none()
    return int(value) if value is not None else 0


def _iter_vtru_amounts(session: Session, conditions: list) -> Iterator[str]:
    stmt = (
        select(TradeRecordRow.vtru_amount)
        .where(TradeRecordRow.vtru_amount.is_not(None), *conditions)
        .execution_options(yield_per=1000)
    )
    yield from session.execute(stmt).scalars()


def sum_vtru_amount(session: Session, since_ms: Optional[int] = None) -> int:
    """Exact wei sum of vtru_amount; summed in Python to keep full precision."""
    conditions = build_filter(since_ms=since_ms)
    return sum(int(amount) for amount in _iter_vtru_amounts(session, conditions))
