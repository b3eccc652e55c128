from datetime import date

import pytest

from farm_api import models
from farm_api.error_logger import ErrorLogger
from farm_api.errors import ValidationError
from farm_api.services.expenses import (
    ExpenseService,
    normalize_date,
    normalize_fields,
    normalize_type,
    parse_amount,
)


def _expense(**overrides):
    body = {
        "date": "2026-01-05",
        "type": "Expense",
        "description": "Hay bales",
        "amount": 120.5,
        "paidBy": "Asha",
        "category": "Feed",
        "subCategory": "Hay",
        "source": "Co-op",
        "notes": "",
    }
    body.update(overrides)
    return body


@pytest.fixture
def service(db, error_logger):
    return ExpenseService(db, error_logger)


# -----------------------------
# Normalization helpers
# -----------------------------

def test_normalize_date_formats():
    today = date(2026, 10, 18)
    assert normalize_date("2024-01-05", today) == ("2024-01-05", None)
    assert normalize_date("1/5/2024", today) == ("2024-01-05", None)
    assert normalize_date("12/31/2023", today) == ("2023-12-31", None)
    assert normalize_date(None, today) == ("2026-10-18", None)


def test_normalize_date_falls_back_to_today_with_warning():
    today = date(2026, 10, 18)
    iso, warning = normalize_date("not-a-date", today)
    assert iso == "2026-10-18"
    assert "not-a-date" in warning

    iso, warning = normalize_date("13/45/2024", today)
    assert iso == "2026-10-18"
    assert warning


def test_normalize_fields_prefers_camel_case_over_labels():
    fields = normalize_fields(
        {"Paid By": "Label", "paidBy": "Camel", "Sub-Category": "Hay", "Description": "Feed run"}
    )
    assert fields["paid_by"] == "Camel"
    assert fields["sub_category"] == "Hay"
    assert fields["description"] == "Feed run"


def test_normalize_fields_skips_blank_camel_case_value():
    fields = normalize_fields({"paidBy": "  ", "Paid By": "Label"})
    assert fields["paid_by"] == "Label"
    assert "notes" not in fields


def test_parse_amount_and_type():
    assert parse_amount("$1,200.50") == 1200.5
    assert parse_amount(3) == 3.0
    with pytest.raises(ValidationError):
        parse_amount("abc")
    with pytest.raises(ValidationError):
        parse_amount(-1)

    assert normalize_type(None) == "Expense"
    assert normalize_type("income") == "Income"
    with pytest.raises(ValidationError):
        normalize_type("refund")


# -----------------------------
# Ingestion
# -----------------------------

def test_ingest_stores_category_id_and_returns_name(service, db):
    result = service.ingest(_expense())

    assert result.warnings == []
    assert result.expense.category == "Feed"
    assert result.expense.date == date(2026, 1, 5)

    row = db.get(models.Expense, result.expense.id)
    category = db.get(models.Category, row.category_id)
    assert category.name == "Feed"
    assert category.sub_categories == ["Hay"]


def test_ingest_accepts_spreadsheet_labels(service):
    result = service.ingest(
        {
            "Date": "3/7/2025",
            "Type": "Income",
            "Description": "Kid sale",
            "Amount": "250",
            "Paid By": "Market",
            "Category": "Sales",
            "Sub-Category": "Goats",
        }
    )
    out = result.expense
    assert out.date == date(2025, 3, 7)
    assert out.type == "Income"
    assert out.amount == 250.0
    assert out.paid_by == "Market"
    assert out.sub_category == "Goats"


def test_ingest_unparsable_date_uses_today_and_logs_warning(service, db):
    result = service.ingest(_expense(date="not-a-date"))

    assert result.expense.date == date.today()
    assert len(result.warnings) == 1

    warnings = ErrorLogger.get_logs(db, level="warn")
    assert any("not-a-date" in entry.message for entry in warnings)


def test_missing_amount_fails_before_any_store_access(service, db):
    with pytest.raises(ValidationError) as exc:
        service.ingest(_expense(amount=None, category="Brand New"))

    assert "amount" in exc.value.message
    assert db.query(models.Category).count() == 0
    assert db.query(models.Expense).count() == 0


@pytest.mark.parametrize("field", ["description", "category"])
def test_missing_required_text_field(service, field):
    with pytest.raises(ValidationError):
        service.ingest(_expense(**{field: ""}))


def test_zero_amount_is_rejected(service):
    with pytest.raises(ValidationError):
        service.ingest(_expense(amount=0))


@pytest.mark.parametrize("key", ["paidBy", "subCategory", "source", "notes"])
def test_non_text_optional_field_fails_before_store_access(service, db, key):
    with pytest.raises(ValidationError) as exc:
        service.ingest(_expense(**{key: ["a", "b"]}, category="Brand New"))

    assert key in exc.value.message
    assert db.query(models.Category).count() == 0
    assert db.query(models.Expense).count() == 0


def test_numeric_text_fields_are_stored_as_strings(service):
    out = service.ingest(_expense(notes=42, source=7.5)).expense
    assert out.notes == "42"
    assert out.source == "7.5"


def test_update_rejects_non_text_field_before_resolving(service, db):
    created = service.ingest(_expense()).expense

    with pytest.raises(ValidationError):
        service.update(created.id, {"category": "Vet", "paidBy": {"name": "x"}})

    assert db.query(models.Category).filter(models.Category.name == "Vet").count() == 0


def test_import_many_rejects_non_text_row_as_validation_error(service, db):
    report = service.import_many([_expense(paidBy=["a"], category="Brand New"), _expense()])

    assert report.success_count == 1
    assert report.errors == ["Failed to import #1 (Hay bales): paidBy must be text"]
    assert db.query(models.Category).filter(models.Category.name == "Brand New").count() == 0


def test_import_many_reports_partial_success(service, db):
    report = service.import_many([_expense(), _expense(description=None)])

    assert report.success_count == 1
    assert report.total_count == 2
    assert report.errors and len(report.errors) == 1
    assert report.message == "Import completed with 1 errors"
    assert db.query(models.Expense).count() == 1


def test_import_many_rejects_non_list(service):
    with pytest.raises(ValidationError):
        service.import_many({"description": "x"})


def test_update_reresolves_category(service, db):
    created = service.ingest(_expense()).expense

    result = service.update(created.id, {"category": "Vet", "amount": 80, "date": "2/1/2026"})

    assert result.expense.category == "Vet"
    assert result.expense.amount == 80
    assert result.expense.date == date(2026, 2, 1)
    assert result.expense.description == "Hay bales"
    assert db.query(models.Category).filter(models.Category.name == "Vet").count() == 1


def test_update_keeps_category_name_when_not_sent(service):
    created = service.ingest(_expense()).expense
    result = service.update(created.id, {"notes": "paid in cash"})
    assert result.expense.category == "Feed"
    assert result.expense.notes == "paid in cash"


# -----------------------------
# HTTP surface
# -----------------------------

def test_post_expense_returns_201(client):
    r = client.post("/api/expenses", json=_expense())
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["category"] == "Feed"
    assert data["paidBy"] == "Asha"
    assert data["date"] == "2026-01-05"
    assert data["warnings"] == []
    assert "categoryId" not in data


def test_post_expense_missing_amount_is_400(client):
    body = _expense()
    del body["amount"]
    r = client.post("/api/expenses", json=body)
    assert r.status_code == 400
    assert r.json() == {"error": "Missing required fields: amount"}

    cats = client.get("/api/expenses/categories").json()
    assert cats["categories"] == []


def test_post_expense_with_list_field_is_400(client, db):
    r = client.post(
        "/api/expenses",
        json={"description": "Hay", "amount": 5, "category": "Brand New", "paidBy": ["a", "b"]},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "paidBy must be text"}
    assert db.query(models.Category).count() == 0


def test_import_endpoint(client):
    r = client.post("/api/expenses/import", json=[_expense(), _expense(description="")])
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["successCount"] == 1
    assert data["totalCount"] == 2
    assert data["errors"]

    ok = client.post("/api/expenses/import", json=[_expense()])
    assert ok.json() == {"message": "Import completed", "successCount": 1, "totalCount": 1}

    bad = client.post("/api/expenses/import", json={"not": "a list"})
    assert bad.status_code == 400
    assert bad.json() == {"error": "Expected array of expenses"}


def test_list_update_delete_expense(client):
    created = client.post("/api/expenses", json=_expense()).json()

    listed = client.get("/api/expenses").json()
    assert [e["id"] for e in listed] == [created["id"]]
    assert listed[0]["category"] == "Feed"

    u = client.put(f"/api/expenses/{created['id']}", json={"category": "Vet"})
    assert u.status_code == 200, u.text
    assert u.json()["category"] == "Vet"

    assert client.put("/api/expenses/9999", json={"notes": "x"}).status_code == 404

    d = client.delete(f"/api/expenses/{created['id']}")
    assert d.status_code == 200
    assert d.json() == {"message": "Expense deleted successfully"}

    missing = client.delete(f"/api/expenses/{created['id']}")
    assert missing.status_code == 404
    assert missing.json() == {"error": f"Expense {created['id']} not found"}


def test_bulk_delete_expenses(client):
    a = client.post("/api/expenses", json=_expense()).json()
    b = client.post("/api/expenses", json=_expense(description="Straw")).json()

    r = client.post("/api/expenses/bulk-delete", json={"ids": [str(a["id"]), b["id"], "x"]})
    assert r.status_code == 200, r.text
    assert r.json() == {"message": "Expenses deleted successfully", "deletedCount": 2}

    none_valid = client.post("/api/expenses/bulk-delete", json={"ids": ["x"]})
    assert none_valid.status_code == 400
    assert none_valid.json() == {"error": "No valid IDs provided"}

    not_list = client.post("/api/expenses/bulk-delete", json={"ids": "1"})
    assert not_list.status_code == 400


def test_backup_and_summary(client):
    client.post("/api/expenses", json=_expense(amount=100))
    client.post("/api/expenses", json=_expense(type="Income", amount=250, category="Sales"))

    backup = client.get("/api/expenses/backup")
    assert backup.status_code == 200
    assert "expenses-backup-" in backup.headers["content-disposition"]
    assert len(backup.json()) == 2

    summary = client.get("/api/expenses/summary").json()
    assert summary == {
        "totalIncome": 250.0,
        "totalExpenses": 100.0,
        "balance": 150.0,
        "transactionCount": 2,
    }
