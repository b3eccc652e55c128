from __future__ import annotations

from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..errors import ValidationError
from .. import models, schemas
from .expenses import backup_filename

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.get("", response_model=list[schemas.TaskOut])
def list_tasks(db: Session = Depends(get_db)):
    return db.query(models.Task).order_by(models.Task.id.desc()).all()


@router.post("", response_model=schemas.TaskOut, status_code=201)
def create_task(payload: schemas.TaskCreate, db: Session = Depends(get_db)):
    task = models.Task(**payload.model_dump())
    if task.status == "completed":
        task.completed_at = date.today()
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


@router.post("/bulk-delete", response_model=schemas.BulkDeleteResponse)
def bulk_delete_tasks(payload: schemas.BulkDeleteRequest, db: Session = Depends(get_db)):
    numeric_ids = [int(i) for i in payload.ids if str(i).strip().isdigit()]
    if not numeric_ids:
        raise ValidationError("No valid IDs provided")
    deleted = (
        db.query(models.Task)
        .filter(models.Task.id.in_(numeric_ids))
        .delete(synchronize_session=False)
    )
    db.commit()
    return schemas.BulkDeleteResponse(message="Tasks deleted successfully", deleted_count=deleted)


@router.get("/backup")
def backup_tasks(db: Session = Depends(get_db)):
    tasks = db.query(models.Task).order_by(models.Task.id.desc()).all()
    return JSONResponse(
        content=jsonable_encoder([schemas.TaskOut.model_validate(t) for t in tasks]),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename("tasks")}"'},
    )


@router.post("/import", response_model=schemas.TaskImportResponse)
def import_tasks(payload: list[schemas.TaskImport], db: Session = Depends(get_db)):
    # All-or-nothing, unlike the per-row expense import
    try:
        tasks = [models.Task(**item.model_dump()) for item in payload]
        db.add_all(tasks)
        db.commit()
    except Exception:
        db.rollback()
        raise
    return {"message": "Tasks imported successfully", "count": len(tasks)}


@router.put("/{task_id}", response_model=schemas.TaskOut)
def update_task(task_id: int, payload: schemas.TaskUpdate, db: Session = Depends(get_db)):
    task = db.get(models.Task, task_id)
    if not task:
        raise HTTPException(404, "Task not found")

    # Only update fields that were actually provided
    for name, value in payload.model_dump(exclude_unset=True).items():
        setattr(task, name, value)

    if payload.status == "completed":
        task.completed_at = date.today()
    elif payload.status is not None:
        task.completed_at = None

    db.commit()
    db.refresh(task)
    return task


@router.delete("/{task_id}", response_model=schemas.TaskDeleteResponse)
def delete_task(task_id: int, db: Session = Depends(get_db)):
    task = db.get(models.Task, task_id)
    if not task:
        raise HTTPException(404, "Task not found")

    deleted = schemas.TaskOut.model_validate(task)
    db.delete(task)
    db.commit()
    return schemas.TaskDeleteResponse(message="Task deleted successfully", deleted_task=deleted)
