"""
Reporting utilities (text/PDF) for ShipRate.
"""

from shiprate_app.reports.simple_text_report import build_rating_summary_text
from shiprate_app.reports.pdf_report import export_rating_to_pdf, rating_pdf_file_name

__all__ = [
    "build_rating_summary_text",
    "export_rating_to_pdf",
    "rating_pdf_file_name",
]
