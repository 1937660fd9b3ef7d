from sqlalchemy import BigInteger, Column, DateTime, Float, Index, Integer, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

# Define the base for declarative models
Base = declarative_base()

TABLE_NAME = "t_options_cboe_snapshot"

# Natural key of a snapshot row; also the upsert conflict target
NATURAL_KEY = ("symbol", "call_put", "expiration", "strike_price", "last_updated_time")

# Columns overwritten when an incoming row collides with a stored one
MEASUREMENT_FIELDS = (
    "volume",
    "matched",
    "routed",
    "bid_size",
    "bid_price",
    "ask_size",
    "ask_price",
    "last_price",
    "etl_in_dt",
)


class OptionSnapshot(Base):
    """
    SQLAlchemy model for the CBOE options symbol-data snapshot table.
    """
    __tablename__ = TABLE_NAME

    id = Column(Integer, primary_key=True, autoincrement=True, comment='Surrogate row identifier, used to address duplicates')
    symbol = Column(Text, nullable=False, comment='Contract / underlying symbol as published')
    call_put = Column(Text, nullable=False, comment='C or P (feed-specific code)')
    expiration = Column(Text, nullable=False, comment='Expiration date exactly as published by the feed')
    strike_price = Column(Float, nullable=False)
    volume = Column(BigInteger, nullable=False)
    matched = Column(BigInteger, nullable=False)
    routed = Column(BigInteger, nullable=False)
    bid_size = Column(BigInteger, nullable=False)
    bid_price = Column(Float, nullable=False)
    ask_size = Column(BigInteger, nullable=False)
    ask_price = Column(Float, nullable=False)
    last_price = Column(Float, nullable=False)
    last_updated_time = Column(DateTime, nullable=False, comment="Source publish timestamp shared by one run's rows")
    etl_in_dt = Column(DateTime, nullable=False, comment='Load wall-clock time, US Eastern')

    __table_args__ = (
        UniqueConstraint(*NATURAL_KEY, name=f'{TABLE_NAME}_uk'),
        Index('idx_options_symbol', 'symbol'),
        Index('idx_options_expiration', 'expiration'),
        Index('idx_options_last_updated', 'last_updated_time'),
        {'comment': 'Options market snapshots downloaded from the CBOE symbol data CSV feeds.'},
    )

    def __repr__(self):
        return (f"<OptionSnapshot(symbol='{self.symbol}', call_put='{self.call_put}', "
                f"expiration='{self.expiration}', strike_price={self.strike_price}, "
                f"last_updated_time='{self.last_updated_time}', etl_in_dt='{self.etl_in_dt}')>")


def init_schema(engine, drop_existing=False):
    """
    Creates the snapshot table and its indexes if they do not exist.

    Args:
        engine: SQLAlchemy engine instance.
        drop_existing: Drop the table first.
    """
    if drop_existing:
        Base.metadata.drop_all(engine)
    Base.metadata.create_all(engine)
