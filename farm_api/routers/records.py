from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from ..database import get_db
from .. import models, schemas

router = APIRouter(tags=["animal-records"])


def _insert(db: Session, row):
    db.add(row)
    db.commit()
    db.refresh(row)
    return row


# -----------------------------
# Weight records
# -----------------------------
@router.get("/weight-records", response_model=list[schemas.WeightRecordOut])
def list_weight_records(
    animal_id: int | None = Query(default=None, alias="animalId"),
    db: Session = Depends(get_db),
):
    q = db.query(models.WeightRecord)
    if animal_id is not None:
        q = q.filter(models.WeightRecord.animal_id == animal_id)
    return q.order_by(models.WeightRecord.date.desc()).all()


@router.post("/weight-records", response_model=schemas.WeightRecordOut, status_code=201)
def create_weight_record(payload: schemas.WeightRecordCreate, db: Session = Depends(get_db)):
    return _insert(db, models.WeightRecord(**payload.model_dump()))


# -----------------------------
# Breeding records
# -----------------------------
@router.get("/breeding-records", response_model=list[schemas.BreedingRecordOut])
def list_breeding_records(
    animal_id: int | None = Query(default=None, alias="animalId"),
    db: Session = Depends(get_db),
):
    q = db.query(models.BreedingRecord)
    if animal_id is not None:
        q = q.filter(
            (models.BreedingRecord.mother_id == animal_id)
            | (models.BreedingRecord.father_id == animal_id)
        )
    return q.order_by(models.BreedingRecord.breeding_date.desc()).all()


@router.post("/breeding-records", response_model=schemas.BreedingRecordOut, status_code=201)
def create_breeding_record(payload: schemas.BreedingRecordCreate, db: Session = Depends(get_db)):
    return _insert(db, models.BreedingRecord(**payload.model_dump()))


@router.put("/breeding-records/{record_id}", response_model=schemas.BreedingRecordOut)
def update_breeding_record(
    record_id: int,
    payload: schemas.BreedingRecordUpdate,
    db: Session = Depends(get_db),
):
    record = db.get(models.BreedingRecord, record_id)
    if not record:
        raise HTTPException(404, "Record not found")

    for name, value in payload.model_dump(exclude_unset=True).items():
        setattr(record, name, value)

    db.commit()
    db.refresh(record)
    return record


# -----------------------------
# Vaccination records
# -----------------------------
@router.get("/vaccination-records", response_model=list[schemas.VaccinationRecordOut])
def list_vaccination_records(
    animal_id: int | None = Query(default=None, alias="animalId"),
    db: Session = Depends(get_db),
):
    q = db.query(models.VaccinationRecord)
    if animal_id is not None:
        q = q.filter(models.VaccinationRecord.animal_id == animal_id)
    return q.order_by(models.VaccinationRecord.administration_date.desc()).all()


@router.post("/vaccination-records", response_model=schemas.VaccinationRecordOut, status_code=201)
def create_vaccination_record(payload: schemas.VaccinationRecordCreate, db: Session = Depends(get_db)):
    return _insert(db, models.VaccinationRecord(**payload.model_dump()))


# -----------------------------
# Health records
# -----------------------------
@router.get("/health-records", response_model=list[schemas.HealthRecordOut])
def list_health_records(
    animal_id: int | None = Query(default=None, alias="animalId"),
    db: Session = Depends(get_db),
):
    q = db.query(models.HealthRecord)
    if animal_id is not None:
        q = q.filter(models.HealthRecord.animal_id == animal_id)
    return q.order_by(models.HealthRecord.date.desc()).all()


@router.post("/health-records", response_model=schemas.HealthRecordOut, status_code=201)
def create_health_record(payload: schemas.HealthRecordCreate, db: Session = Depends(get_db)):
    return _insert(db, models.HealthRecord(**payload.model_dump()))
