"""
Expense ingestion.

Incoming rows come from the web form (camelCase keys) and from spreadsheet
imports (human column labels such as "Paid By"). ``FIELD_ALIASES`` lists the
accepted keys for every field, in order of preference, and
``normalize_fields`` is the only place that reads them.
"""
from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..error_logger import ErrorLogger
from ..errors import (
    FarmError,
    NotFoundError,
    StoreFailure,
    ValidationError,
    expense_not_found,
    missing_required_fields,
)
from .categories import CategoryResolver

logger = logging.getLogger(__name__)

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date", "Date"),
    "type": ("type", "Type"),
    "description": ("description", "Description"),
    "amount": ("amount", "Amount"),
    "paid_by": ("paidBy", "Paid By"),
    "category": ("category", "Category"),
    "sub_category": ("subCategory", "Sub-Category"),
    "source": ("source", "Source"),
    "notes": ("notes", "Notes"),
}

REQUIRED_FIELDS = ("description", "amount", "category")
TEXT_FIELDS = ("description", "category", "paid_by", "sub_category", "source", "notes")
# Matched exactly against stored category names, so never trimmed
UNTRIMMED_FIELDS = {"category"}
EXPENSE_TYPES = {"expense": "Expense", "income": "Income"}

ISO_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
US_DATE_RE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def normalize_fields(raw: Mapping[str, Any]) -> dict[str, Any]:
    """Collapse aliased input keys into internal field names.

    Absent, ``None`` and blank-string values are skipped, so a blank
    camelCase key does not hide a filled-in human label.
    """
    out: dict[str, Any] = {}
    for name, keys in FIELD_ALIASES.items():
        for key in keys:
            value = raw.get(key)
            if _present(value):
                if isinstance(value, str) and name not in UNTRIMMED_FIELDS:
                    value = value.strip()
                out[name] = value
                break
    return out


def normalize_date(value: Any, today: Optional[date] = None) -> tuple[str, Optional[str]]:
    """
    Return ``(iso_date, warning)``.

    ``YYYY-MM-DD`` passes through and ``M/D/YYYY`` is zero-padded into
    ``YYYY-MM-DD``. Anything else, including impossible calendar dates,
    becomes today's date and a warning message.
    """
    today = today or date.today()
    if not _present(value):
        return today.isoformat(), None
    if isinstance(value, date):
        return value.isoformat()[:10], None

    text = str(value).strip()
    iso = None
    if ISO_DATE_RE.match(text):
        iso = text
    else:
        m = US_DATE_RE.match(text)
        if m:
            month, day, year = m.groups()
            iso = f"{year}-{int(month):02d}-{int(day):02d}"

    if iso is not None:
        try:
            date.fromisoformat(iso)
            return iso, None
        except ValueError:
            pass

    return today.isoformat(), f"Invalid date format: {text}, using {today.isoformat()}"


def parse_amount(value: Any) -> float:
    if isinstance(value, bool):
        raise ValidationError("Invalid amount")
    if isinstance(value, str):
        value = value.replace("$", "").replace(",", "").strip()
    try:
        amount = float(value)
    except (TypeError, ValueError):
        raise ValidationError("Invalid amount")
    if not math.isfinite(amount):
        raise ValidationError("Invalid amount")
    if amount < 0:
        raise ValidationError("Amount must not be negative")
    return amount


def normalize_type(value: Any) -> str:
    if not _present(value):
        return "Expense"
    canonical = EXPENSE_TYPES.get(str(value).strip().lower())
    if canonical is None:
        raise ValidationError("type must be one of: Expense, Income")
    return canonical


def coerce_text_fields(fields: dict[str, Any]) -> None:
    """Turn numeric text fields into strings in place; reject lists, objects and booleans."""
    for name in TEXT_FIELDS:
        if name not in fields:
            continue
        value = fields[name]
        if isinstance(value, str):
            continue
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            fields[name] = str(value)
            continue
        raise ValidationError(f"{FIELD_ALIASES[name][0]} must be text")


@dataclass
class IngestResult:
    expense: schemas.ExpenseOut
    warnings: list[str] = field(default_factory=list)


def _to_out(expense: models.Expense, category_name: Optional[str]) -> schemas.ExpenseOut:
    return schemas.ExpenseOut(
        id=expense.id,
        date=expense.date,
        type=expense.type,
        description=expense.description,
        amount=expense.amount,
        paid_by=expense.paid_by,
        category=category_name,
        sub_category=expense.sub_category,
        source=expense.source,
        notes=expense.notes,
    )


class ExpenseService:
    SOURCE = "expenses.ingest"

    def __init__(self, db: Session, error_logger: ErrorLogger, resolver: Optional[CategoryResolver] = None):
        self.db = db
        self.error_logger = error_logger
        self.resolver = resolver or CategoryResolver(db, error_logger)

    # -----------------------------
    # Validation
    # -----------------------------
    def _prepare(self, raw: Any) -> tuple[dict[str, Any], list[str]]:
        if not isinstance(raw, Mapping):
            raise ValidationError("Expected an expense object")

        fields = normalize_fields(raw)
        coerce_text_fields(fields)

        amount = None
        if "amount" in fields:
            amount = parse_amount(fields["amount"])
        missing = [
            name for name in REQUIRED_FIELDS
            if (amount if name == "amount" else fields.get(name)) in (None, "", 0)
        ]
        if missing:
            raise ValidationError(missing_required_fields(missing))

        fields["amount"] = amount
        fields["type"] = normalize_type(fields.get("type"))

        warnings: list[str] = []
        iso, warning = normalize_date(fields.get("date"))
        fields["date"] = date.fromisoformat(iso)
        if warning:
            warnings.append(warning)
            self.error_logger.warn(warning, self.SOURCE, {"description": fields["description"]})

        return fields, warnings

    # -----------------------------
    # Writes
    # -----------------------------
    def ingest(self, raw: Any) -> IngestResult:
        """Validate, resolve the category and insert one expense row."""
        fields, warnings = self._prepare(raw)

        category_id = self.resolver.resolve(fields["category"], fields.get("sub_category"))

        expense = models.Expense(
            date=fields["date"],
            type=fields["type"],
            description=fields["description"],
            amount=fields["amount"],
            paid_by=fields.get("paid_by"),
            category_id=category_id,
            sub_category=fields.get("sub_category"),
            source=fields.get("source"),
            notes=fields.get("notes"),
        )

        self.error_logger.info(
            "Inserting expense data",
            self.SOURCE,
            {"amount": fields["amount"], "categoryId": category_id},
        )
        try:
            self.db.add(expense)
            self.db.commit()
            self.db.refresh(expense)
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.error_logger.error(
                "Database insert error for expense",
                self.SOURCE,
                {"description": fields["description"], "error": str(exc)},
            )
            raise StoreFailure("Failed to add expense") from exc

        return IngestResult(expense=_to_out(expense, fields["category"]), warnings=warnings)

    def import_many(self, rows: Any) -> schemas.ExpenseImportResponse:
        """Ingest each row on its own; one bad row never aborts the batch."""
        if not isinstance(rows, list):
            raise ValidationError("Expected array of expenses")

        success_count = 0
        errors: list[str] = []
        warnings: list[str] = []

        for index, row in enumerate(rows):
            try:
                result = self.ingest(row)
            except (FarmError, SQLAlchemyError) as exc:
                if isinstance(exc, SQLAlchemyError):
                    self.db.rollback()
                reason = exc.message if isinstance(exc, FarmError) else "Database error"
                label = normalize_fields(row).get("description") if isinstance(row, Mapping) else None
                logger.warning("Error importing expense #%d (%s): %s", index, label, reason)
                errors.append(f"Failed to import #{index + 1} ({label or 'no description'}): {reason}")
                continue
            success_count += 1
            warnings.extend(result.warnings)

        message = "Import completed"
        if errors:
            message = f"Import completed with {len(errors)} errors"

        return schemas.ExpenseImportResponse(
            message=message,
            success_count=success_count,
            total_count=len(rows),
            errors=errors or None,
            warnings=warnings or None,
        )

    def update(self, expense_id: int, raw: Any) -> IngestResult:
        """Apply the fields present in ``raw`` to an existing expense."""
        if not isinstance(raw, Mapping):
            raise ValidationError("Expected an expense object")

        expense = self.db.get(models.Expense, expense_id)
        if expense is None:
            raise NotFoundError(expense_not_found(expense_id))

        fields = normalize_fields(raw)
        coerce_text_fields(fields)
        warnings: list[str] = []

        if "amount" in fields:
            fields["amount"] = parse_amount(fields["amount"])
            if fields["amount"] == 0:
                raise ValidationError(missing_required_fields(["amount"]))
        if "type" in fields:
            fields["type"] = normalize_type(fields["type"])
        if "date" in fields:
            iso, warning = normalize_date(fields["date"])
            fields["date"] = date.fromisoformat(iso)
            if warning:
                warnings.append(warning)
                self.error_logger.warn(warning, "expenses.update", {"id": expense_id})

        category_name = fields.pop("category", None)
        if category_name is not None:
            expense.category_id = self.resolver.resolve(category_name, fields.get("sub_category"))

        for name in ("date", "type", "description", "amount", "paid_by", "sub_category", "source", "notes"):
            if name in fields:
                setattr(expense, name, fields[name])

        try:
            self.db.commit()
            self.db.refresh(expense)
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.error_logger.error(
                "Database update error for expense",
                "expenses.update",
                {"id": expense_id, "error": str(exc)},
            )
            raise StoreFailure("Failed to update expense") from exc

        if category_name is None:
            category = self.db.get(models.Category, expense.category_id)
            category_name = category.name if category else None

        return IngestResult(expense=_to_out(expense, category_name), warnings=warnings)

    def delete(self, expense_id: int) -> None:
        expense = self.db.get(models.Expense, expense_id)
        if expense is None:
            raise NotFoundError(expense_not_found(expense_id))
        self.db.delete(expense)
        self.db.commit()

    def bulk_delete(self, ids: list[Any]) -> int:
        numeric_ids = []
        for raw_id in ids:
            try:
                numeric_ids.append(int(raw_id))
            except (TypeError, ValueError):
                continue
        if not numeric_ids:
            raise ValidationError("No valid IDs provided")

        deleted = (
            self.db.query(models.Expense)
            .filter(models.Expense.id.in_(numeric_ids))
            .delete(synchronize_session=False)
        )
        self.db.commit()
        return deleted

    # -----------------------------
    # Reads
    # -----------------------------
    def list_expenses(self) -> list[schemas.ExpenseOut]:
        rows = (
            self.db.query(models.Expense, models.Category.name)
            .outerjoin(models.Category, models.Expense.category_id == models.Category.id)
            .order_by(models.Expense.date.desc(), models.Expense.id.desc())
            .all()
        )
        return [_to_out(expense, category_name) for expense, category_name in rows]
