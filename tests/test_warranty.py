"""Tests for the warranty certificate generator."""

from datetime import date

from app.services.warranty import WarrantyData, WarrantyGenerator, generate_warranty_pdf, warranty_file_name


def _data(**overrides):
    values = {
        "customer_name": "Jane Doe",
        "address": "12 Maple Street",
        "city": "Ottawa",
        "postal_code": "K1A 0B1",
        "installation_date": date(2025, 2, 14),
    }
    values.update(overrides)
    return WarrantyData(**values)


def test_generates_pdf_bytes():
    pdf = generate_warranty_pdf(_data(), issued=date(2025, 3, 1))
    assert pdf.startswith(b"%PDF")
    assert len(pdf) > 1000


def test_missing_installation_date_still_renders():
    pdf = WarrantyGenerator().generate_warranty(_data(installation_date=None, city="", postal_code=""))
    assert pdf.startswith(b"%PDF")


def test_warranty_file_name():
    assert warranty_file_name("Jane  Doe") == "Warranty_Certificate_Jane_Doe.pdf"
    assert warranty_file_name("") == "Warranty_Certificate_Customer.pdf"
