"""
Reporting Module

Two pure exporters turn already-fetched rows into downloadable bytes:

    export_csv(headers, rows)            -> bytes (UTF-8 CSV)
    export_pdf(title, headers, rows)     -> bytes (paginated table, reportlab)

``build_report`` collects the rows for one of the standard company reports
(project summary, resource inventory, team roster, project outputs).
"""
import csv
import io
import logging
from datetime import date
from enum import Enum
from typing import Callable, Dict, List, NamedTuple, Optional, Sequence
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle
from sqlmodel import Session

from agrocoop.models.user import User
from agrocoop.services.accounts import list_members
from agrocoop.services.projects import list_projects
from agrocoop.services.resources import list_resources

logger = logging.getLogger(__name__)

HEADER_COLOR = colors.Color(88 / 255, 32 / 255, 37 / 255)
STRIPE_COLOR = colors.Color(240 / 255, 240 / 255, 240 / 255)


class Report(NamedTuple):
    slug: str
    title: str
    csv_headers: List[str]
    csv_rows: List[list]
    pdf_headers: List[str]
    pdf_rows: List[list]


# --- Exporters ---

def export_csv(headers: Sequence[str], rows: Sequence[Sequence]) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    return buffer.getvalue().encode("utf-8")


def export_pdf(title: str, headers: Sequence[str], rows: Sequence[Sequence],
               generated_on: Optional[date] = None) -> bytes:
    """Render a titled, striped table; the header row repeats on every page."""
    generated_on = generated_on or date.today()
    styles = getSampleStyleSheet()
    cell_style = styles["BodyText"].clone("cell", fontSize=10, leading=12)
    head_style = cell_style.clone("head", fontName="Helvetica-Bold", textColor=colors.white)

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer, pagesize=A4, title=title,
        leftMargin=14 * mm, rightMargin=14 * mm, topMargin=16 * mm, bottomMargin=16 * mm,
    )

    def cell(value, style):
        if isinstance(value, Enum):
            value = value.value
        return Paragraph(escape("" if value is None else str(value)), style)

    data = [[cell(h, head_style) for h in headers]]
    data += [[cell(v, cell_style) for v in row] for row in rows]

    table = Table(data, colWidths=[doc.width / max(len(headers), 1)] * len(headers), repeatRows=1)
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_COLOR),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, STRIPE_COLOR]),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("TOPPADDING", (0, 0), (-1, -1), 3),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
        ("LEFTPADDING", (0, 0), (-1, -1), 3),
        ("RIGHTPADDING", (0, 0), (-1, -1), 3),
    ]))

    story = [
        Paragraph(escape(title), styles["Title"]),
        Paragraph(f"Report generated on: {generated_on.strftime('%B %d, %Y')}", styles["Normal"]),
        Spacer(1, 5 * mm),
        table,
    ]
    doc.build(story)
    return buffer.getvalue()


def report_filename(report: Report, fmt: str, today: Optional[date] = None) -> str:
    if fmt == "pdf":
        stamp = (today or date.today()).isoformat()
        return f"{'_'.join(report.title.lower().split())}_{stamp}.pdf"
    return f"{report.slug}.csv"


# --- Report builders ---

def _projects_report(db: Session, actor: User) -> Report:
    projects = list_projects(db, actor)
    return Report(
        slug="project_summary_report",
        title="Project Summary Report",
        csv_headers=["Project_ID", "Title", "Status", "Progress_Percent", "Team_Member_Count"],
        csv_rows=[[p.id, p.title, p.status, p.progress, len(p.team or [])] for p in projects],
        pdf_headers=["Project ID", "Title", "Status", "Progress (%)", "Team Size"],
        pdf_rows=[[p.id, p.title, p.status, f"{p.progress}%", len(p.team or [])] for p in projects],
    )


def _resources_report(db: Session, actor: User) -> Report:
    resources = list_resources(db, actor)
    rows = [[r.id, r.name, r.category, f"{r.quantity:g}", r.unit, r.status] for r in resources]
    return Report(
        slug="resource_inventory_report",
        title="Resource Inventory Report",
        csv_headers=["Resource_ID", "Name", "Category", "Quantity", "Unit", "Status"],
        csv_rows=rows,
        pdf_headers=["Resource ID", "Name", "Category", "Quantity", "Unit", "Status"],
        pdf_rows=rows,
    )


def _members_report(db: Session, actor: User) -> Report:
    members = list_members(db, actor)
    rows = [[m.id, m.display_name, m.email, m.role] for m in members]
    return Report(
        slug="team_roster_report",
        title="Team Roster Report",
        csv_headers=["Member_ID", "Name", "Email", "Role"],
        csv_rows=rows,
        pdf_headers=["Member ID", "Name", "Email", "Role"],
        pdf_rows=rows,
    )


def _outputs_report(db: Session, actor: User) -> Report:
    csv_rows, pdf_rows = [], []
    for project in list_projects(db, actor):
        for output in project.outputs or []:
            day = (output.get("date") or "")[:10]
            quantity = f"{output['quantity']:g}"
            csv_rows.append([project.id, project.title, day, output["description"], quantity, output["unit"]])
            pdf_rows.append([project.title, day, output["description"], quantity, output["unit"]])
    return Report(
        slug="project_outputs_report",
        title="Project Outputs Report",
        csv_headers=["Project_ID", "Project_Title", "Output_Date", "Output_Description", "Quantity", "Unit"],
        csv_rows=csv_rows,
        pdf_headers=["Project", "Date", "Description", "Quantity", "Unit"],
        pdf_rows=pdf_rows,
    )


REPORT_BUILDERS: Dict[str, Callable[[Session, User], Report]] = {
    "projects": _projects_report,
    "resources": _resources_report,
    "members": _members_report,
    "outputs": _outputs_report,
}


def build_report(db: Session, actor: User, kind: str) -> Optional[Report]:
    builder = REPORT_BUILDERS.get(kind)
    if builder is None:
        return None
    return builder(db, actor)


def render_report(report: Report, fmt: str) -> bytes:
    logger.info("Rendering %s as %s (%d rows)", report.slug, fmt, len(report.csv_rows))
    if fmt == "pdf":
        return export_pdf(report.title, report.pdf_headers, report.pdf_rows)
    return export_csv(report.csv_headers, report.csv_rows)
