from sqlalchemy import (create_engine, Column, Integer, String, Boolean, JSON, Numeric)
from sqlalchemy.types import DateTime
from sqlalchemy.pool import StaticPool
from datetime import datetime
from sqlalchemy.orm import declarative_base, sessionmaker

from clinic_billing.config import DATABASE_URL

Base = declarative_base()


class FeeSetting(Base):
    __tablename__ = "fee_settings"

    id = Column(String(50), primary_key=True)
    doctor_ids = Column(JSON, default=list)
    doctor_names = Column(JSON, default=list)
    treatment_types = Column(JSON, default=list)
    category = Column(String(100))
    fee_percentage = Column(Numeric(5, 2), nullable=False)
    is_default = Column(Boolean, default=False, nullable=False)
    description = Column(String(255))
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime)


class TreatmentRecord(Base):
    __tablename__ = "treatments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    patient_id = Column(String(50), nullable=False, index=True)
    doctor_id = Column(String(50), index=True)
    payment_status = Column(String(10), nullable=False)
    dp_amount = Column(Numeric(14, 2), default=0)
    subtotal = Column(Numeric(14, 2), default=0)
    total_discount = Column(Numeric(14, 2), default=0)
    admin_fee = Column(Numeric(14, 2), default=0)
    medication_cost = Column(Numeric(14, 2), default=0)
    total_tindakan = Column(Numeric(14, 2), default=0)
    outstanding_amount = Column(Numeric(14, 2), default=0)
    total_fee = Column(Numeric(14, 2), default=0)
    lines = Column(JSON)
    fee_details = Column(JSON)
    created_at = Column(DateTime, default=datetime.utcnow)


def make_engine(url: str):
    if url == "sqlite://" or (url.startswith("sqlite") and ":memory:" in url):
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(url)


#engine and sessions
engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


#to create tables
Base.metadata.create_all(engine)
