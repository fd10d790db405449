from sqlalchemy import Column, BigInteger, String
from trade_indexer.storage.base import Base


class IndexerState(Base):
    """Single-value documents such as the scanner checkpoint."""
    __tablename__ = "indexer_state"

    id    = Column(String(64), primary_key=True)    # e.g. "lastCheckedBlock"
    value = Column(BigInteger, nullable=False)
