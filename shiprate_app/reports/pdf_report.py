"""
PDF export of a single rating.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING
from xml.sax.saxutils import escape

from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from shiprate_app.config.criteria import CRITERIA, CRITERION_LABELS

if TYPE_CHECKING:
    from shiprate_app.models import Rating, Ship


def rating_pdf_file_name(ship_name: str) -> str:
    """``ShipRate_<first word of the ship name>.pdf``."""
    words = (ship_name or "").split()
    first = re.sub(r"[^\w]", "", words[0]) if words else ""
    return f"ShipRate_{first or 'ship'}.pdf"


def _fmt_date(value) -> str:
    return value.strftime("%d/%m/%Y") if value is not None else "-"


def export_rating_to_pdf(filepath: Path, ship: "Ship", rating: "Rating") -> Path:
    """
    Generate a PDF report for one rating of a ship.

    ``filepath`` may be a directory, in which case the file name comes from
    :func:`rating_pdf_file_name`. Returns the written path.
    """
    filepath = Path(filepath)
    if filepath.is_dir():
        filepath = filepath / rating_pdf_file_name(ship.display_name)

    doc = SimpleDocTemplate(
        str(filepath),
        pagesize=A4,
        rightMargin=2 * cm,
        leftMargin=2 * cm,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        "CustomTitle",
        parent=styles["Heading1"],
        fontSize=16,
    )

    story = []
    story.append(Paragraph("ShipRate - Ship Rating Report", title_style))
    story.append(Spacer(1, 0.5 * cm))

    imo = f" (IMO: {escape(ship.code)})" if ship.code else ""
    story.append(Paragraph(f"Ship: {escape(ship.display_name)}{imo}", styles["Normal"]))
    story.append(Paragraph(f"Pilot: {escape(rating.evaluator_display_name or '-')}", styles["Normal"]))
    story.append(Paragraph(f"Rated on: {_fmt_date(rating.submitted_at)}", styles["Normal"]))
    story.append(Paragraph(
        f"Disembarkation: {_fmt_date(rating.disembarkation_date)} - "
        f"Cabin: {escape(rating.cabin_type or '-')}",
        styles["Normal"],
    ))
    story.append(Spacer(1, 0.5 * cm))

    data = [["Criterion", "Score", "Observation"]]
    for criterion in CRITERIA:
        entry = rating.criteria_scores.get(criterion)
        score = f"{entry.score:.1f}" if entry and entry.score > 0 else "n/a"
        observation = Paragraph(escape(entry.observation), styles["Normal"]) if entry else ""
        data.append([CRITERION_LABELS[criterion], score, observation])
    data.append(["Overall", f"{rating.average_score:.1f}", ""])

    table = Table(data, colWidths=[6 * cm, 2 * cm, 9 * cm])
    table.setStyle(
        TableStyle(
            [
                ("BACKGROUND", (0, 0), (-1, 0), "#3F51B5"),
                ("TEXTCOLOR", (0, 0), (-1, 0), "white"),
                ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, 0), 10),
                ("BOTTOMPADDING", (0, 0), (-1, 0), 8),
                ("BACKGROUND", (0, 1), (-1, -1), "#E8EAF6"),
                ("GRID", (0, 0), (-1, -1), 0.5, "gray"),
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 9),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    story.append(table)

    info = rating.ship_info.to_dict()
    info.update({f"bridge_{k}": v for k, v in rating.bridge_info.to_dict().items()})
    if info:
        story.append(Spacer(1, 0.5 * cm))
        story.append(Paragraph("<b>Ship information</b>", styles["Heading3"]))
        for key, value in info.items():
            if isinstance(value, bool):
                value = "Yes" if value else "No"
            label = key.replace("_", " ").capitalize()
            story.append(Paragraph(f"{label}: {escape(str(value))}", styles["Normal"]))

    if rating.general_observation:
        story.append(Spacer(1, 0.5 * cm))
        story.append(Paragraph("<b>General observation</b>", styles["Heading3"]))
        story.append(Paragraph(escape(rating.general_observation), styles["Normal"]))

    doc.build(story)
    return filepath
