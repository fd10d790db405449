# models/trade_record.py
from sqlalchemy import Column, BigInteger, String, Text, Index
from trade_indexer.storage.base import Base


class TradeRecordRow(Base):
    __tablename__ = "trade_records"

    id           = Column(String(100), primary_key=True)         # "<tx_hash>_<log_index>"
    token        = Column(String(42),  nullable=True)            # NULL if pool was unknown
    hash         = Column(String(66),  nullable=False)
    block_number = Column(BigInteger,  nullable=False)
    pool         = Column(String(42),  nullable=False)
    client       = Column(String(42),  nullable=False)
    action       = Column(String(4),   nullable=False)           # buy / sell
    token_amount = Column(Text,        nullable=False)           # wei, decimal string
    vtru_amount  = Column(Text,        nullable=True)            # wei, decimal string
    timestamp    = Column(BigInteger,  nullable=False)           # ms

    __table_args__ = (
        Index("ix_trade_records_block_number", "block_number"),
        Index("ix_trade_records_token", "token"),
        Index("ix_trade_records_pool", "pool"),
        Index("ix_trade_records_timestamp", "timestamp"),
    )

    def __repr__(self) -> str:
        return f"<TradeRecord {self.id} {self.action} block={self.block_number}>"
