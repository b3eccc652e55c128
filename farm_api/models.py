from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
)
from .database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Animal(Base):
    __tablename__ = "animals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    type = Column(String, nullable=False)  # goat/sheep
    breed = Column(String)
    gender = Column(String, nullable=False)  # male/female
    date_of_birth = Column(Date)
    photos = Column(JSON, default=list)
    status = Column(String, nullable=False, default="active")
    current_weight = Column(Float)
    markings = Column(Text)

    purchase_date = Column(Date)
    purchase_price = Column(Float)
    purchase_location = Column(String)
    previous_owner = Column(String)

    sale_date = Column(Date)
    sale_price = Column(Float)
    buyer_name = Column(String)
    sale_notes = Column(Text)

    death_date = Column(Date)
    death_cause = Column(Text)

    insured = Column(Boolean, nullable=False, default=False)
    insurance_provider = Column(String)
    insurance_policy_number = Column(String)
    insurance_amount = Column(Float)
    insurance_expiry_date = Column(Date)

    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


# Sub-records point at animals by id only; deleting an animal leaves them in place.
class WeightRecord(Base):
    __tablename__ = "weight_records"

    id = Column(Integer, primary_key=True, index=True)
    animal_id = Column(Integer, nullable=False, index=True)
    weight = Column(Float, nullable=False)
    date = Column(Date, nullable=False)
    notes = Column(Text)
    recorded_by = Column(String)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class BreedingRecord(Base):
    __tablename__ = "breeding_records"

    id = Column(Integer, primary_key=True, index=True)
    mother_id = Column(Integer, nullable=False, index=True)
    father_id = Column(Integer, nullable=True, index=True)
    breeding_date = Column(Date, nullable=False)
    expected_delivery_date = Column(Date)
    actual_delivery_date = Column(Date)
    total_kids = Column(Integer)
    male_kids = Column(Integer)
    female_kids = Column(Integer)
    kid_details = Column(JSON)
    breeding_method = Column(String)  # natural/artificial_insemination
    veterinarian_name = Column(String)
    complications = Column(Text)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)


class VaccinationRecord(Base):
    __tablename__ = "vaccination_records"

    id = Column(Integer, primary_key=True, index=True)
    animal_id = Column(Integer, nullable=False, index=True)
    vaccine_name = Column(String, nullable=False)
    vaccine_type = Column(String)
    administration_date = Column(Date, nullable=False)
    next_due_date = Column(Date)
    batch_number = Column(String)
    veterinarian_name = Column(String)
    dosage = Column(String)
    administration_method = Column(String)
    side_effects = Column(Text)
    cost = Column(Float)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class HealthRecord(Base):
    __tablename__ = "health_records"

    id = Column(Integer, primary_key=True, index=True)
    animal_id = Column(Integer, nullable=False, index=True)
    record_type = Column(String, nullable=False)  # checkup/treatment/illness/injury/other
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    veterinarian_name = Column(String)
    diagnosis = Column(Text)
    treatment = Column(Text)
    medications = Column(Text)
    cost = Column(Float)
    next_checkup_date = Column(Date)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String, nullable=False)
    description = Column(Text)
    category = Column(String)
    task_type = Column(String)
    priority = Column(String, nullable=False, default="medium")  # low/medium/high
    status = Column(String, nullable=False, default="pending")  # pending/in-progress/completed
    due_date = Column(Date, nullable=False)
    assigned_to = Column(String, nullable=False)
    notes = Column(Text)
    completed_at = Column(Date)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    # Unique so concurrent first use of a name cannot create two rows
    name = Column(String, unique=True, nullable=False)
    sub_categories = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    date = Column(Date, nullable=False)
    type = Column(String, nullable=False, default="Expense")  # Expense/Income
    description = Column(Text, nullable=False)
    amount = Column(Float, nullable=False)
    paid_by = Column(String)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False, index=True)
    sub_category = Column(String)
    source = Column(String)
    notes = Column(Text)
    created_at = Column(DateTime(timezone=True), default=_utcnow)


class ErrorLog(Base):
    __tablename__ = "error_logs"
    __table_args__ = (
        CheckConstraint(
            "level IN ('info', 'warn', 'error', 'debug')",
            name="ck_error_logs_level",
        ),
    )

    id = Column(Integer, primary_key=True, index=True)
    timestamp = Column(DateTime(timezone=True), default=_utcnow, index=True)
    level = Column(String, nullable=False, index=True)
    message = Column(Text, nullable=False)
    source = Column(String, nullable=False, index=True)
    details = Column(JSON)
    user_id = Column(String)
    ip_address = Column(String)
    user_agent = Column(String)
    created_at = Column(DateTime(timezone=True), default=_utcnow)
