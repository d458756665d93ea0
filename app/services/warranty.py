"""
Warranty certificate generation

Renders a two-page letter-size PDF: the certificate itself and the warranty
terms.
"""

from dataclasses import dataclass
from datetime import date, datetime
from io import BytesIO
from typing import Optional, Union

from reportlab.lib.colors import HexColor
from reportlab.lib.pagesizes import letter
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

from app.core.config import settings
from app.services.status_rules import format_date_long

WARRANTY_TERMS = (
    "{company} provides 50 years Limited Warranty for steel substrate from the date of completion "
    "and hereby warrants against rust perforation and leakage, manufacturing defects and wind damage "
    "in wind forces up to 140 km/hour. The coating will not peel, crack, chalk or flake to the extent "
    "that all the conditions listed below are met and adhered to.\n"
    "{company} warrants: (i) the services will be performed in a good and workmanlike manner, and "
    "defects in workmanship solely attributable to the services will be repaired at no additional "
    "charge within 10 years of the services being provided, and (ii) the product will remain free "
    "from manufacturing defects and will not perforate by rust corrosion for 50 years from the date "
    "of installation. \"Perforate by rust\" means a hole that completely or significantly penetrates "
    "the product, caused by corrosion from the inside or underside of the sheets, which results in a "
    "leak. The warranty is void on any roof areas that are less than 2-1/2 /12 pitch. Any use of this "
    "product other than what is intended voids this warranty.\n"
    "The warranty does not include damage caused by snow and ice falling off the roof, moisture due "
    "to heat loss from poorly insulated attic space causing ice dams or condensation, growth of fungi "
    "or mold, deterioration of the surface coating caused by abnormal atmospheric conditions "
    "(ultraviolet rays, pollution, hail, salt, high-pressure water spray, corrosive chemicals, animal "
    "excrement or airborne contaminants), water run-off from lead or copper flashing, failure to "
    "provide free drainage or to remove debris, acts of God, work performed by other contractors, "
    "abuse, vandalism, fire, war or structural settling of the building.\n"
    "Claims must be made in writing without delay after a defect is discovered, together with a copy "
    "of the original invoice (proof of payment) and a copy of this warranty certificate."
)


@dataclass(frozen=True)
class WarrantyData:
    customer_name: str
    address: str
    city: str
    postal_code: str
    installation_date: Optional[Union[date, datetime, str]] = None


def warranty_file_name(customer_name: str) -> str:
    safe_name = "_".join(customer_name.split()) or "Customer"
    return f"Warranty_Certificate_{safe_name}.pdf"


def generate_warranty_pdf(data: WarrantyData, issued: Optional[date] = None) -> bytes:
    """Render the warranty certificate and return the PDF bytes."""
    buffer = BytesIO()
    pdf_canvas = canvas.Canvas(buffer, pagesize=letter)
    pdf_canvas.setTitle(f"Warranty Certificate - {data.customer_name}")
    width, height = letter

    margin = 50
    green = HexColor("#388E3D")
    dark_gray = HexColor("#333333")
    light_gray = HexColor("#808080")
    panel = HexColor("#F2F7F2")

    company = settings.COMPANY_NAME
    install_date = format_date_long(data.installation_date or date.today())
    issue_date = format_date_long(issued or date.today())
    full_address = ", ".join(part for part in (data.address, data.city, data.postal_code) if part)

    # Page 1: certificate
    y = height - 60
    pdf_canvas.setFont("Helvetica-Bold", 24)
    pdf_canvas.setFillColor(green)
    pdf_canvas.drawString(margin, y, company.upper())

    y -= 30
    pdf_canvas.setFont("Helvetica-Bold", 16)
    pdf_canvas.setFillColor(dark_gray)
    pdf_canvas.drawString(margin, y, "WARRANTY CERTIFICATE")

    y -= 20
    pdf_canvas.setStrokeColor(green)
    pdf_canvas.setLineWidth(2)
    pdf_canvas.line(margin, y, width - margin, y)

    y -= 50
    for caption, value in (
        ("PURCHASER", data.customer_name),
        ("INSTALLATION ADDRESS", full_address),
        ("DATE OF INSTALLATION", install_date),
        ("COMPLETED BY", company),
    ):
        pdf_canvas.setFont("Helvetica-Bold", 10)
        pdf_canvas.setFillColor(light_gray)
        pdf_canvas.drawString(margin, y, caption)
        y -= 18
        pdf_canvas.setFont("Helvetica-Bold", 14)
        pdf_canvas.setFillColor(dark_gray)
        pdf_canvas.drawString(margin, y, value)
        y -= 40

    y -= 20
    pdf_canvas.setFillColor(panel)
    pdf_canvas.setStrokeColor(green)
    pdf_canvas.setLineWidth(1)
    pdf_canvas.rect(margin, y - 40, width - 2 * margin, 50, fill=1, stroke=1)
    statement = (
        f"This certificate verifies that the above property has been issued a "
        f"50-Year Limited Warranty by {company}."
    )
    pdf_canvas.setFont("Helvetica", 11)
    pdf_canvas.setFillColor(dark_gray)
    text_y = y - 12
    for line in simpleSplit(statement, "Helvetica", 11, width - 2 * margin - 20):
        pdf_canvas.drawString(margin + 10, text_y, line)
        text_y -= 14

    y -= 100
    pdf_canvas.setFont("Helvetica-Bold", 10)
    pdf_canvas.setFillColor(light_gray)
    pdf_canvas.drawString(margin, y, "AUTHORIZED SIGNATURE")
    pdf_canvas.drawString(350, y, "DATE ISSUED")
    pdf_canvas.setFont("Helvetica-Bold", 14)
    pdf_canvas.setFillColor(dark_gray)
    pdf_canvas.drawString(350, y - 18, issue_date)
    pdf_canvas.setStrokeColor(dark_gray)
    pdf_canvas.line(margin, y - 30, 250, y - 30)

    _draw_footer(pdf_canvas, width, margin, green, light_gray, f"{company} • Warranty Certificate")
    pdf_canvas.showPage()

    # Page 2: terms
    y = height - 60
    pdf_canvas.setFont("Helvetica-Bold", 16)
    pdf_canvas.setFillColor(green)
    pdf_canvas.drawString(margin, y, "WARRANTY TERMS & CONDITIONS")
    y -= 15
    pdf_canvas.setStrokeColor(green)
    pdf_canvas.setLineWidth(1)
    pdf_canvas.line(margin, y, width - margin, y)
    y -= 30

    pdf_canvas.setFont("Helvetica", 9)
    pdf_canvas.setFillColor(dark_gray)
    for paragraph in WARRANTY_TERMS.format(company=company).split("\n"):
        for line in simpleSplit(paragraph, "Helvetica", 9, width - 2 * margin):
            if y < 80:
                break
            pdf_canvas.drawString(margin, y, line)
            y -= 12
        y -= 8

    _draw_footer(pdf_canvas, width, margin, green, light_gray, f"{company} • {settings.COMPANY_EMAIL}")
    pdf_canvas.showPage()
    pdf_canvas.save()
    return buffer.getvalue()


def _draw_footer(pdf_canvas, width, margin, line_color, text_color, text):
    pdf_canvas.setStrokeColor(line_color)
    pdf_canvas.setLineWidth(1)
    pdf_canvas.line(margin, 60, width - margin, 60)
    pdf_canvas.setFont("Helvetica", 10)
    pdf_canvas.setFillColor(text_color)
    pdf_canvas.drawString(margin, 40, text)


class WarrantyGenerator:
    """Document generator collaborator used by the job service"""

    def generate_warranty(self, data: WarrantyData) -> bytes:
        return generate_warranty_pdf(data)
