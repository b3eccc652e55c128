from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Body, Depends
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session

from ..database import get_db
from ..error_logger import ErrorLogger, get_error_logger
from ..services import categories as category_service
from ..services.expenses import ExpenseService, IngestResult
from ..services.summary import summarize_expenses
from .. import models, schemas

router = APIRouter(prefix="/expenses", tags=["expenses"])


def get_expense_service(
    db: Session = Depends(get_db),
    error_logger: ErrorLogger = Depends(get_error_logger),
) -> ExpenseService:
    return ExpenseService(db, error_logger)


def _with_warnings(result: IngestResult) -> schemas.ExpenseIngestOut:
    return schemas.ExpenseIngestOut(**result.expense.model_dump(), warnings=result.warnings)


def backup_filename(prefix: str) -> str:
    timestamp = datetime.now(timezone.utc).isoformat().replace(":", "-").replace(".", "-")
    return f"{prefix}-backup-{timestamp}.json"


@router.get("", response_model=list[schemas.ExpenseOut])
def list_expenses(service: ExpenseService = Depends(get_expense_service)):
    return service.list_expenses()


@router.post("", response_model=schemas.ExpenseIngestOut, status_code=201)
def add_expense(
    payload: Any = Body(...),
    service: ExpenseService = Depends(get_expense_service),
):
    return _with_warnings(service.ingest(payload))


@router.post("/import", response_model=schemas.ExpenseImportResponse, response_model_exclude_none=True)
def import_expenses(
    payload: Any = Body(...),
    service: ExpenseService = Depends(get_expense_service),
):
    return service.import_many(payload)


@router.post("/bulk-delete", response_model=schemas.BulkDeleteResponse)
def bulk_delete_expenses(
    payload: schemas.BulkDeleteRequest,
    service: ExpenseService = Depends(get_expense_service),
):
    deleted = service.bulk_delete(payload.ids)
    return schemas.BulkDeleteResponse(message="Expenses deleted successfully", deleted_count=deleted)


@router.get("/backup")
def backup_expenses(service: ExpenseService = Depends(get_expense_service)):
    return JSONResponse(
        content=jsonable_encoder(service.list_expenses()),
        headers={"Content-Disposition": f'attachment; filename="{backup_filename("expenses")}"'},
    )


@router.get("/summary", response_model=schemas.ExpenseSummary)
def expense_summary(db: Session = Depends(get_db)):
    return summarize_expenses(db.query(models.Expense).all())


@router.get("/categories", response_model=schemas.CategoryManagementData)
def get_categories(db: Session = Depends(get_db)):
    return category_service.list_categories(db)


@router.post("/categories", response_model=schemas.MessageResponse)
def save_categories(
    payload: schemas.CategoryManagementData,
    db: Session = Depends(get_db),
    error_logger: ErrorLogger = Depends(get_error_logger),
):
    category_service.save_categories(db, payload.categories, error_logger)
    return {"message": "Categories saved successfully"}


@router.post("/populate-categories", response_model=schemas.PopulateCategoriesResponse)
def populate_categories(
    db: Session = Depends(get_db),
    error_logger: ErrorLogger = Depends(get_error_logger),
):
    data = category_service.populate_from_expenses(db, error_logger)
    return schemas.PopulateCategoriesResponse(
        message="Categories populated successfully",
        count=len(data.categories),
        categories=data,
    )


@router.put("/{expense_id}", response_model=schemas.ExpenseIngestOut)
def update_expense(
    expense_id: int,
    payload: Any = Body(...),
    service: ExpenseService = Depends(get_expense_service),
):
    return _with_warnings(service.update(expense_id, payload))


@router.delete("/{expense_id}", response_model=schemas.MessageResponse)
def delete_expense(expense_id: int, service: ExpenseService = Depends(get_expense_service)):
    service.delete(expense_id)
    return {"message": "Expense deleted successfully"}
