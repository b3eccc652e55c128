from __future__ import annotations

from datetime import datetime, timezone
from typing import Iterable, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..error_logger import ErrorLogger
from ..errors import CategoryCreationError, StoreFailure

DEFAULT_SUB_CATEGORY = "General"

# Spellings seen in imported spreadsheets, keyed by lowercase form
SUB_CATEGORY_SPELLINGS = {
    "misc": "Misc",
    "plubming": "Plumbing",
    "solar": "Solar",
    "doors": "Doors",
    "electric": "Electric",
}


class CategoryResolver:
    """Maps a category name to its row id, creating the row on first use."""

    SOURCE = "categories.resolve"

    def __init__(self, db: Session, error_logger: ErrorLogger):
        self.db = db
        self.error_logger = error_logger

    def _find(self, name: str) -> Optional[models.Category]:
        return (
            self.db.query(models.Category)
            .filter(models.Category.name == name)
            .first()
        )

    def resolve(self, name: str, default_sub_category: Optional[str] = None) -> int:
        """
        Return the id of the category called ``name``.

        Lookup is an exact, case-sensitive match. A missing category is
        inserted with ``[default_sub_category or "General"]`` as its only
        sub-category. If another writer inserts the same name first, the
        unique constraint rejects our row and the winner's id is returned.

        Raises:
            CategoryCreationError: the category could not be created
            StoreFailure: the lookup itself failed
        """
        try:
            existing = self._find(name)
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.error_logger.error(f"Error fetching category {name}", self.SOURCE, {"error": str(exc)})
            raise StoreFailure("Failed to look up category") from exc

        if existing is not None:
            self.error_logger.info(f"Found category {name} with ID: {existing.id}", self.SOURCE)
            return existing.id

        category = models.Category(
            name=name,
            sub_categories=[default_sub_category or DEFAULT_SUB_CATEGORY],
        )
        try:
            self.db.add(category)
            self.db.commit()
        except IntegrityError as exc:
            self.db.rollback()
            winner = self._find(name)
            if winner is None:
                self.error_logger.error(f"Error creating category {name}", self.SOURCE, {"error": str(exc)})
                raise CategoryCreationError("Failed to create category") from exc
            self.error_logger.info(
                f"Category {name} was created concurrently, reusing ID: {winner.id}", self.SOURCE
            )
            return winner.id
        except SQLAlchemyError as exc:
            self.db.rollback()
            self.error_logger.error(f"Error creating category {name}", self.SOURCE, {"error": str(exc)})
            raise CategoryCreationError("Failed to create category") from exc

        self.error_logger.info(f"Created new category: {name} with ID: {category.id}", self.SOURCE)
        return category.id


def list_categories(db: Session) -> schemas.CategoryManagementData:
    categories = db.query(models.Category).order_by(models.Category.id.asc()).all()
    return schemas.CategoryManagementData(
        categories=[schemas.CategoryConfig.model_validate(c) for c in categories],
        last_updated=datetime.now(timezone.utc),
    )


def save_categories(
    db: Session,
    configs: Iterable[schemas.CategoryConfig],
    error_logger: ErrorLogger,
) -> None:
    """
    Upsert categories by name.

    Names already stored get their sub-category list replaced, new names are
    inserted. Stored categories missing from ``configs`` are removed unless
    an expense still points at them.
    """
    wanted: dict[str, list[str]] = {}
    for cfg in configs:
        name = cfg.name.strip()
        if name:
            wanted[name] = list(cfg.sub_categories)

    try:
        existing = {c.name: c for c in db.query(models.Category).all()}
        referenced = {
            row[0] for row in db.query(models.Expense.category_id).distinct().all()
        }

        for name, sub_categories in wanted.items():
            if name in existing:
                existing[name].sub_categories = sub_categories
            else:
                db.add(models.Category(name=name, sub_categories=sub_categories))

        for name, category in existing.items():
            if name not in wanted and category.id not in referenced:
                db.delete(category)

        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        error_logger.error("Error writing categories", "categories.save", {"error": str(exc)})
        raise StoreFailure("Failed to save categories") from exc


def _clean_sub_categories(raw: Iterable[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for sub in raw:
        sub = (sub or "").strip()
        if not sub:
            continue
        sub = SUB_CATEGORY_SPELLINGS.get(sub.lower(), sub)
        if sub.lower() in seen:
            continue
        seen.add(sub.lower())
        out.append(sub)
    return sorted(out) or [DEFAULT_SUB_CATEGORY]


def populate_from_expenses(db: Session, error_logger: ErrorLogger) -> schemas.CategoryManagementData:
    """Rebuild the category table from the names used by stored expenses."""
    rows = (
        db.query(models.Category.name, models.Expense.sub_category)
        .join(models.Expense, models.Expense.category_id == models.Category.id)
        .all()
    )

    by_category: dict[str, list[str]] = {}
    for name, sub in rows:
        name = (name or "").strip()
        if not name:
            continue
        by_category.setdefault(name, []).append(sub or DEFAULT_SUB_CATEGORY)

    configs = [
        schemas.CategoryConfig(name=name, sub_categories=_clean_sub_categories(subs))
        for name, subs in sorted(by_category.items())
    ]
    save_categories(db, configs, error_logger)
    return schemas.CategoryManagementData(
        categories=configs,
        last_updated=datetime.now(timezone.utc),
    )
