"""SQLAlchemy models for dentbooks database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Category(Base):
    """Income/expense category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False, index=True)
    type = Column(String, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    transactions = relationship("Transaction", back_populates="category")


class Practice(Base):
    """Dental practice (client) model."""

    __tablename__ = "practices"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    address = Column(String, nullable=True)
    city = Column(String, nullable=True)
    state = Column(String, nullable=True)
    zip_code = Column(String, nullable=True)
    tax_id = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False, index=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    transactions = relationship("Transaction", back_populates="practice")
    productions = relationship("Production", back_populates="practice")


class Transaction(Base):
    """Transaction model. Amount is always positive; direction lives in type."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    description = Column(String, nullable=False)
    amount = Column(Numeric(10, 2), nullable=False, index=True)
    type = Column(String, nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    practice_id = Column(Integer, ForeignKey("practices.id"), nullable=True, index=True)
    status = Column(String, default="pending", nullable=False, index=True)
    reconciled = Column(Boolean, default=False, nullable=False)
    payment_method = Column(String, nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    category = relationship("Category", back_populates="transactions")
    practice = relationship("Practice", back_populates="transactions")


class Production(Base):
    """Billed revenue model."""

    __tablename__ = "productions"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    practice_id = Column(Integer, ForeignKey("practices.id"), nullable=False, index=True)
    patient_id = Column(String, nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    practice = relationship("Practice", back_populates="productions")
    collections = relationship("Collection", back_populates="production")


class Collection(Base):
    """Received cash model."""

    __tablename__ = "collections"

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    practice_id = Column(Integer, ForeignKey("practices.id"), nullable=False, index=True)
    production_id = Column(Integer, ForeignKey("productions.id"), nullable=True, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    payment_method = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    production = relationship("Production", back_populates="collections")


class Reconciliation(Base):
    """Append-only reconciliation history model."""

    __tablename__ = "reconciliations"

    id = Column(Integer, primary_key=True)
    practice_id = Column(Integer, ForeignKey("practices.id"), nullable=True, index=True)
    month = Column(Integer, nullable=False)
    year = Column(Integer, nullable=False, index=True)
    bank_balance = Column(Numeric(12, 2), nullable=False)
    book_balance = Column(Numeric(12, 2), nullable=False)
    difference = Column(Numeric(12, 2), nullable=False)
    status = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class TaxEvent(Base):
    """Tax payment/obligation model."""

    __tablename__ = "tax_events"

    id = Column(Integer, primary_key=True)
    quarter = Column(Integer, nullable=True)
    year = Column(Integer, nullable=False, index=True)
    type = Column(String, nullable=False)
    due_date = Column(Date, nullable=True)
    amount = Column(Numeric(12, 2), nullable=True)
    paid_date = Column(Date, nullable=True)
    note = Column(Text, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Setting(Base):
    """Key-value settings model. Values are JSON-encoded text."""

    __tablename__ = "settings"

    key = Column(String, primary_key=True)
    value = Column(Text, nullable=True)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory, declaring the schema."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)
