from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..services.summary import summarize
from .. import models, schemas
from .expenses import backup_filename

router = APIRouter(prefix="/animals", tags=["animals"])


@router.get("", response_model=list[schemas.AnimalOut])
def list_animals(
    status: str | None = None,
    db: Session = Depends(get_db),
):
    q = db.query(models.Animal)
    if status:
        q = q.filter(models.Animal.status == status)
    return q.order_by(models.Animal.id.desc()).all()


@router.post("", response_model=schemas.AnimalOut, status_code=201)
def create_animal(payload: schemas.AnimalCreate, db: Session = Depends(get_db)):
    animal = models.Animal(**payload.model_dump())
    db.add(animal)
    db.commit()
    db.refresh(animal)
    return animal


@router.get("/summary", response_model=schemas.AnimalSummary)
def animal_summary(db: Session = Depends(get_db)):
    animals = db.query(models.Animal).all()
    weight_records = db.query(models.WeightRecord).all()
    return summarize(animals, weight_records)


@router.get("/backup")
def backup_animals(db: Session = Depends(get_db)):
    animals = db.query(models.Animal).order_by(models.Animal.id.desc()).all()
    weights = db.query(models.WeightRecord).order_by(models.WeightRecord.date.desc()).all()
    breedings = db.query(models.BreedingRecord).order_by(models.BreedingRecord.breeding_date.desc()).all()
    vaccinations = (
        db.query(models.VaccinationRecord)
        .order_by(models.VaccinationRecord.administration_date.desc())
        .all()
    )
    health = db.query(models.HealthRecord).order_by(models.HealthRecord.date.desc()).all()

    backup = schemas.AnimalBackup(
        animals=[schemas.AnimalOut.model_validate(a) for a in animals],
        weight_records=[schemas.WeightRecordOut.model_validate(w) for w in weights],
        breeding_records=[schemas.BreedingRecordOut.model_validate(b) for b in breedings],
        vaccination_records=[schemas.VaccinationRecordOut.model_validate(v) for v in vaccinations],
        health_records=[schemas.HealthRecordOut.model_validate(h) for h in health],
        export_date=datetime.now(timezone.utc),
    )
    return JSONResponse(
        content=jsonable_encoder(backup),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename("animals")}"'},
    )


@router.get("/{animal_id}", response_model=schemas.AnimalOut)
def get_animal(animal_id: int, db: Session = Depends(get_db)):
    animal = db.get(models.Animal, animal_id)
    if not animal:
        raise HTTPException(404, "Animal not found")
    return animal


@router.put("/{animal_id}", response_model=schemas.AnimalOut)
def update_animal(
    animal_id: int,
    payload: schemas.AnimalUpdate,
    db: Session = Depends(get_db),
):
    animal = db.get(models.Animal, animal_id)
    if not animal:
        raise HTTPException(404, "Animal not found")

    for name, value in payload.model_dump(exclude_unset=True).items():
        setattr(animal, name, value)

    db.commit()
    db.refresh(animal)
    return animal


@router.delete("/{animal_id}", response_model=schemas.MessageResponse)
def delete_animal(animal_id: int, db: Session = Depends(get_db)):
    """
    Hard-delete an animal record.

    Weight, breeding, vaccination and health records keep their animalId
    and are not removed.
    """
    animal = db.get(models.Animal, animal_id)
    if not animal:
        raise HTTPException(404, "Animal not found")

    db.delete(animal)
    db.commit()
    return {"message": "Animal deleted successfully"}
