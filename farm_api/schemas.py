from __future__ import annotations

import datetime as dt
from typing import Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Snake_case fields in Python, camelCase keys on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(BaseModel):
    message: str


class BulkDeleteRequest(BaseModel):
    ids: List[Union[int, str]]


class BulkDeleteResponse(CamelModel):
    message: str
    deleted_count: int


# -----------------------------
# Animals
# -----------------------------

AnimalType = Literal["goat", "sheep"]
AnimalGender = Literal["male", "female"]
AnimalStatus = Literal["active", "sold", "dead", "ready_to_sell"]


class AnimalCreate(CamelModel):
    name: str = Field(min_length=1)
    type: AnimalType
    breed: Optional[str] = None
    gender: AnimalGender
    date_of_birth: Optional[dt.date] = None
    photos: List[str] = Field(default_factory=list)
    status: AnimalStatus = "active"
    current_weight: Optional[float] = Field(default=None, ge=0)
    markings: Optional[str] = None

    purchase_date: Optional[dt.date] = None
    purchase_price: Optional[float] = Field(default=None, ge=0)
    purchase_location: Optional[str] = None
    previous_owner: Optional[str] = None

    sale_date: Optional[dt.date] = None
    sale_price: Optional[float] = Field(default=None, ge=0)
    buyer_name: Optional[str] = None
    sale_notes: Optional[str] = None

    death_date: Optional[dt.date] = None
    death_cause: Optional[str] = None

    insured: bool = False
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None
    insurance_amount: Optional[float] = Field(default=None, ge=0)
    insurance_expiry_date: Optional[dt.date] = None

    notes: Optional[str] = None


class AnimalUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1)
    type: Optional[AnimalType] = None
    breed: Optional[str] = None
    gender: Optional[AnimalGender] = None
    date_of_birth: Optional[dt.date] = None
    photos: Optional[List[str]] = None
    status: Optional[AnimalStatus] = None
    current_weight: Optional[float] = Field(default=None, ge=0)
    markings: Optional[str] = None
    purchase_date: Optional[dt.date] = None
    purchase_price: Optional[float] = Field(default=None, ge=0)
    purchase_location: Optional[str] = None
    previous_owner: Optional[str] = None
    sale_date: Optional[dt.date] = None
    sale_price: Optional[float] = Field(default=None, ge=0)
    buyer_name: Optional[str] = None
    sale_notes: Optional[str] = None
    death_date: Optional[dt.date] = None
    death_cause: Optional[str] = None
    insured: Optional[bool] = None
    insurance_provider: Optional[str] = None
    insurance_policy_number: Optional[str] = None
    insurance_amount: Optional[float] = Field(default=None, ge=0)
    insurance_expiry_date: Optional[dt.date] = None
    notes: Optional[str] = None


class AnimalOut(AnimalCreate):
    id: int
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class AnimalSummary(CamelModel):
    total_animals: int
    total_goats: int
    total_sheep: int
    total_males: int
    total_females: int
    active_animals: int
    sold_animals: int
    ready_to_sell: int
    dead_animals: int
    average_weight: float
    total_investment: float
    total_revenue: float
    profit_loss: float


# -----------------------------
# Animal sub-records
# -----------------------------

class WeightRecordCreate(CamelModel):
    animal_id: int
    weight: float = Field(gt=0)
    date: dt.date
    notes: Optional[str] = None
    recorded_by: Optional[str] = None


class WeightRecordOut(WeightRecordCreate):
    id: int
    created_at: Optional[dt.datetime] = None


class KidDetail(CamelModel):
    name: Optional[str] = None
    gender: AnimalGender
    weight: Optional[float] = Field(default=None, ge=0)
    status: Literal["alive", "stillborn", "died_after_birth"]
    animal_id: Optional[int] = None


class BreedingRecordCreate(CamelModel):
    mother_id: int
    father_id: Optional[int] = None
    breeding_date: dt.date
    expected_delivery_date: Optional[dt.date] = None
    actual_delivery_date: Optional[dt.date] = None
    total_kids: Optional[int] = Field(default=None, ge=0)
    male_kids: Optional[int] = Field(default=None, ge=0)
    female_kids: Optional[int] = Field(default=None, ge=0)
    kid_details: Optional[List[KidDetail]] = None
    breeding_method: Optional[Literal["natural", "artificial_insemination"]] = None
    veterinarian_name: Optional[str] = None
    complications: Optional[str] = None
    notes: Optional[str] = None

    @model_validator(mode="after")
    def validate_kid_counts(self):
        if self.total_kids is None:
            return self
        m = self.male_kids or 0
        f = self.female_kids or 0
        if m + f > self.total_kids:
            raise ValueError("maleKids + femaleKids cannot exceed totalKids")
        return self


class BreedingRecordUpdate(BreedingRecordCreate):
    mother_id: Optional[int] = None
    breeding_date: Optional[dt.date] = None


class BreedingRecordOut(BreedingRecordCreate):
    id: int
    created_at: Optional[dt.datetime] = None
    updated_at: Optional[dt.datetime] = None


class VaccinationRecordCreate(CamelModel):
    animal_id: int
    vaccine_name: str = Field(min_length=1)
    vaccine_type: Optional[str] = None
    administration_date: dt.date
    next_due_date: Optional[dt.date] = None
    batch_number: Optional[str] = None
    veterinarian_name: Optional[str] = None
    dosage: Optional[str] = None
    administration_method: Optional[str] = None  # injection, oral, etc.
    side_effects: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0)
    notes: Optional[str] = None


class VaccinationRecordOut(VaccinationRecordCreate):
    id: int
    created_at: Optional[dt.datetime] = None


class HealthRecordCreate(CamelModel):
    animal_id: int
    record_type: Literal["checkup", "treatment", "illness", "injury", "other"]
    date: dt.date
    description: str = Field(min_length=1)
    veterinarian_name: Optional[str] = None
    diagnosis: Optional[str] = None
    treatment: Optional[str] = None
    medications: Optional[str] = None
    cost: Optional[float] = Field(default=None, ge=0)
    next_checkup_date: Optional[dt.date] = None
    notes: Optional[str] = None


class HealthRecordOut(HealthRecordCreate):
    id: int
    created_at: Optional[dt.datetime] = None


class AnimalBackup(CamelModel):
    animals: List[AnimalOut]
    weight_records: List[WeightRecordOut]
    breeding_records: List[BreedingRecordOut]
    vaccination_records: List[VaccinationRecordOut]
    health_records: List[HealthRecordOut]
    export_date: dt.datetime


# -----------------------------
# Tasks
# -----------------------------

TaskPriority = Literal["low", "medium", "high"]
TaskStatus = Literal["pending", "in-progress", "completed"]


class TaskCreate(CamelModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    task_type: Optional[str] = None
    priority: TaskPriority = "medium"
    status: TaskStatus = "pending"
    due_date: dt.date
    assigned_to: str = Field(min_length=1)
    notes: Optional[str] = None


class TaskImport(TaskCreate):
    completed_at: Optional[dt.date] = None


class TaskUpdate(CamelModel):
    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    task_type: Optional[str] = None
    priority: Optional[TaskPriority] = None
    status: Optional[TaskStatus] = None
    due_date: Optional[dt.date] = None
    assigned_to: Optional[str] = Field(default=None, min_length=1)
    notes: Optional[str] = None


class TaskOut(TaskCreate):
    id: int
    completed_at: Optional[dt.date] = None
    created_at: Optional[dt.datetime] = None


class TaskDeleteResponse(CamelModel):
    message: str
    deleted_task: TaskOut


class TaskImportResponse(BaseModel):
    message: str
    count: int


# -----------------------------
# Expenses & categories
# -----------------------------

class ExpenseOut(CamelModel):
    id: int
    date: dt.date
    type: str
    description: str
    amount: float
    paid_by: Optional[str] = None
    category: Optional[str] = None
    sub_category: Optional[str] = None
    source: Optional[str] = None
    notes: Optional[str] = None


class ExpenseIngestOut(ExpenseOut):
    warnings: List[str] = Field(default_factory=list)


class ExpenseImportResponse(CamelModel):
    message: str
    success_count: int
    total_count: int
    errors: Optional[List[str]] = None
    warnings: Optional[List[str]] = None


class ExpenseSummary(CamelModel):
    total_income: float
    total_expenses: float
    balance: float
    transaction_count: int


class CategoryConfig(CamelModel):
    id: Optional[int] = None
    name: str = Field(min_length=1)
    sub_categories: List[str] = Field(default_factory=list)
    created_at: Optional[dt.datetime] = None


class CategoryManagementData(CamelModel):
    categories: List[CategoryConfig]
    last_updated: Optional[dt.datetime] = None


class PopulateCategoriesResponse(BaseModel):
    message: str
    count: int
    categories: CategoryManagementData


# -----------------------------
# Error logs
# -----------------------------

LogLevel = Literal["info", "warn", "error", "debug"]


class ErrorLogOut(CamelModel):
    id: int
    timestamp: Optional[dt.datetime] = None
    level: LogLevel
    message: str
    source: str
    details: Optional[Any] = None
    user_id: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    created_at: Optional[dt.datetime] = None
