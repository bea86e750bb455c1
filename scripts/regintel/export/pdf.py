"""
PDF exports for regulatory updates, legal decisions, historical documents,
knowledge articles and newsletters.

Documents are drawn line by line on an A4 reportlab canvas. Every function
accepts a record or a plain dict and returns the PDF as bytes.
"""

import io
import logging
from datetime import datetime
from typing import Any, Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

logger = logging.getLogger(__name__)

MARGIN = 50
MAX_CHARS_PER_LINE = 80
LINE_GAP = 5
PLATFORM_NAME = "Regulatory Intelligence Platform"

BLACK = (0, 0, 0)
GREY = (0.5, 0.5, 0.5)
DARK_GREY = (0.2, 0.2, 0.2)
RED = (0.8, 0, 0)
BLUE = (0, 0, 0.8)
GREEN = (0, 0.6, 0)
PURPLE = (0.6, 0, 0.6)
ORANGE = (0.8, 0.4, 0)
SLATE = (0.4, 0.4, 0.8)
LEAF = (0.2, 0.6, 0.2)

DEFAULT_VERDICT = "The action is dismissed. The claimant bears the costs of the proceedings."
DEFAULT_DAMAGES = "The defendant is not liable for damages."
DEFAULT_SUMMARY = "The claimant seeks damages on account of a defective medical device."
DEFAULT_OUTCOME = "The legal requirements for a damages claim are not met."


def split_text_into_lines(text: Optional[str], max_chars: int = MAX_CHARS_PER_LINE) -> list[str]:
    """
    Word-wrap text to lines of at most ``max_chars`` characters.

    Existing line breaks are kept. Words longer than a full line are split.
    """
    lines: list[str] = []
    for paragraph in (text or "").splitlines():
        current = ""
        for word in paragraph.split():
            while len(word) > max_chars:
                if current:
                    lines.append(current)
                    current = ""
                lines.append(word[:max_chars])
                word = word[max_chars:]
            if not current:
                current = word
            elif len(current) + 1 + len(word) <= max_chars:
                current = f"{current} {word}"
            else:
                lines.append(current)
                current = word
        if current:
            lines.append(current)
    return lines


def _as_dict(item: Any) -> dict:
    if item is None:
        return {}
    if hasattr(item, "to_dict"):
        return item.to_dict()
    return dict(item)


def _format_date(value: Optional[str], default: str = "Unknown") -> str:
    if not value:
        return default
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00")).strftime("%d.%m.%Y")
    except ValueError:
        return str(value)


def _join(values: Any, default: str = "None") -> str:
    if not values:
        return default
    if isinstance(values, str):
        return values
    return ", ".join(str(v) for v in values)


class PDFWriter:
    """Sequential text layout on an A4 canvas with automatic page breaks."""

    def __init__(self, title: str = "") -> None:
        self.buffer = io.BytesIO()
        self.canvas = canvas.Canvas(self.buffer, pagesize=A4)
        if title:
            self.canvas.setTitle(title)
        self.width, self.height = A4
        self.y = self.height - MARGIN

    def _ensure_space(self, needed: float) -> None:
        if self.y - needed < MARGIN:
            self.canvas.showPage()
            self.y = self.height - MARGIN

    def text(self, text: str, size: int = 12, bold: bool = False, color: tuple = BLACK) -> None:
        self._ensure_space(size)
        self.canvas.setFont("Helvetica-Bold" if bold else "Helvetica", size)
        self.canvas.setFillColorRGB(*color)
        self.canvas.drawString(MARGIN, self.y, text)
        self.y -= size + LINE_GAP

    def heading(self, text: str, color: tuple = BLUE, size: int = 14) -> None:
        self.text(text, size=size, bold=True, color=color)

    def paragraph(self, text: Optional[str], size: int = 11) -> None:
        for line in split_text_into_lines(text):
            self.text(line, size=size)

    def new_line(self, count: int = 1) -> None:
        self.y -= 15 * count

    def footer(self, status: str) -> None:
        self.new_line(2)
        self.text(f"Generated by {PLATFORM_NAME}", size=10, color=GREY)
        self.text(f"Date: {datetime.now().strftime('%d.%m.%Y')}", size=10, color=GREY)
        self.text(f"Status: {status}", size=10, color=GREY)

    def finish(self) -> bytes:
        self.canvas.save()
        return self.buffer.getvalue()


def legal_decision_pdf(legal_case: Any) -> bytes:
    """Render a court decision in the usual judgment layout."""
    case = _as_dict(legal_case)
    court = case.get("court") or "Federal Court of Justice"
    writer = PDFWriter(title=case.get("title") or "Legal Decision")

    writer.text(court.upper(), size=16, bold=True, color=DARK_GREY)
    writer.text(f"Case number: {case.get('case_number') or 'Unknown'}", bold=True)
    writer.new_line()
    writer.text("JUDGMENT", size=18, bold=True, color=RED)
    writer.new_line()

    writer.text("In the matter of:", bold=True)
    writer.paragraph(case.get("title") or "Medical device liability", size=12)
    writer.new_line()
    writer.text(f"{court}, decided on {_format_date(case.get('decision_date'))}")
    writer.text(f"Jurisdiction: {case.get('jurisdiction') or 'Unknown'}")
    writer.new_line(2)

    writer.heading("VERDICT:", BLUE)
    writer.paragraph(case.get("verdict") or DEFAULT_VERDICT, size=12)
    writer.new_line(2)

    writer.heading("DAMAGES:", GREEN)
    writer.paragraph(case.get("damages") or DEFAULT_DAMAGES, size=12)
    writer.new_line(2)

    writer.heading("REASONS:", PURPLE)
    writer.new_line()
    writer.text("I. FACTS", bold=True)
    writer.paragraph(case.get("summary") or DEFAULT_SUMMARY)
    writer.new_line()
    writer.text("II. LEGAL ASSESSMENT", bold=True)
    writer.text("The court assessed the matter as follows:", size=11)
    writer.new_line()
    writer.text("1. PRODUCT LIABILITY", size=11, bold=True)
    writer.text("The requirements of product liability were examined.", size=10)
    writer.new_line()
    writer.text("2. CAUSATION", size=11, bold=True)
    writer.text("The causal link between product defect and damage was examined.", size=10)
    writer.new_line()
    writer.text("GROUNDS FOR DECISION:", bold=True)
    writer.paragraph(case.get("outcome") or DEFAULT_OUTCOME)

    if case.get("content"):
        writer.new_line()
        writer.heading("FULL TEXT:", SLATE, size=12)
        writer.paragraph(case["content"], size=10)

    writer.new_line(2)
    writer.text(f"Issued by: {court}", size=9, color=GREY)
    writer.footer("Legal decision")
    return writer.finish()


def full_decision_text(legal_case: Any) -> str:
    """Plain-text rendering of a court decision."""
    case = _as_dict(legal_case)
    court = case.get("court") or "Federal Court of Justice"
    return "\n".join([
        court.upper(),
        case.get("case_number") or "Unknown",
        "",
        "JUDGMENT",
        "",
        "In the matter of",
        "",
        case.get("title") or "Medical device liability",
        "",
        f"{court}, decided on {_format_date(case.get('decision_date'))}",
        "",
        "VERDICT:",
        case.get("verdict") or DEFAULT_VERDICT,
        "",
        "DAMAGES:",
        case.get("damages") or DEFAULT_DAMAGES,
        "",
        "REASONS:",
        "",
        "I. FACTS",
        case.get("summary") or DEFAULT_SUMMARY,
        "",
        "II. LEGAL ASSESSMENT",
        "1. PRODUCT LIABILITY",
        "The requirements of product liability were examined.",
        "",
        "2. CAUSATION",
        "The causal link between product defect and damage was examined.",
        "",
        "3. CONTRIBUTORY NEGLIGENCE",
        "Contributory negligence of the claimant was examined.",
        "",
        "GROUNDS FOR DECISION:",
        case.get("outcome") or DEFAULT_OUTCOME,
        "",
        f"Issued by: {court}",
        "",
    ])


def historical_document_pdf(record: Any) -> bytes:
    doc = _as_dict(record)
    writer = PDFWriter(title=doc.get("title") or "Historical Document")

    writer.text("HISTORICAL DOCUMENT", size=18, bold=True, color=RED)
    writer.heading("Full data view", GREY)
    writer.new_line(2)

    writer.heading("DOCUMENT INFORMATION:", BLUE)
    writer.paragraph(f"Title: {doc.get('title') or 'Unknown'}", size=12)
    writer.text(f"Document ID: {doc.get('document_id') or doc.get('id') or 'Unknown'}")
    writer.text(f"Source: {doc.get('source_id') or 'Unknown'}")
    writer.text(f"Type: {doc.get('source_type') or 'Unknown'}")
    writer.new_line(2)

    writer.heading("DATE & ARCHIVING:", GREEN)
    writer.text(f"Published: {_format_date(doc.get('published_at'))}")
    writer.text(f"Archived: {_format_date(doc.get('archived_at'))}")
    writer.new_line(2)

    writer.heading("CONTENT:", PURPLE)
    writer.paragraph(doc.get("raw_text") or doc.get("description") or "No content available")
    writer.new_line(2)

    writer.heading("TECHNICAL DETAILS:", ORANGE)
    writer.text(f"Region: {doc.get('region') or 'Unknown'}")
    writer.text(f"Category: {doc.get('category') or 'Unknown'}")
    writer.text(f"Priority: {doc.get('priority') or 'Unknown'}")
    writer.text(f"Device classes: {_join(doc.get('device_classes'))}")
    writer.new_line(2)

    writer.heading("SOURCE & LINK:", SLATE)
    writer.paragraph(doc.get("document_url") or "No link available", size=10)
    writer.footer("Archived historical document")
    return writer.finish()


def regulatory_update_pdf(update: Any) -> bytes:
    data = _as_dict(update)
    writer = PDFWriter(title=data.get("title") or "Regulatory Update")

    writer.text("REGULATORY UPDATE", size=18, bold=True, color=BLUE)
    writer.heading(PLATFORM_NAME, GREY)
    writer.new_line(2)

    writer.heading("DOCUMENT INFORMATION:", BLUE)
    writer.paragraph(f"Title: {data.get('title') or 'Unknown'}", size=12)
    writer.text(f"ID: {data.get('id') or 'Unknown'}")
    writer.text(f"Source: {data.get('source_id') or 'Unknown'}")
    writer.text(f"Type: {data.get('update_type') or 'Unknown'}")
    writer.new_line(2)

    writer.heading("DATE & STATUS:", GREEN)
    writer.text(f"Published: {_format_date(data.get('published_at'))}")
    writer.text(f"Effective: {_format_date(data.get('effective_date'), 'Not specified')}")
    writer.text(f"Priority: {data.get('priority') or 'Unknown'}")
    writer.new_line(2)

    writer.heading("CONTENT:", PURPLE)
    writer.paragraph(data.get("content") or data.get("description") or "No content available")
    writer.new_line(2)

    writer.heading("TECHNICAL DETAILS:", ORANGE)
    writer.text(f"Region: {data.get('region') or 'Unknown'}")
    writer.text(f"Device type: {data.get('device_type') or 'Unknown'}")
    writer.text(f"Therapeutic area: {data.get('therapeutic_area') or 'Unknown'}")
    writer.text(f"Device classes: {_join(data.get('device_classes'))}")
    writer.text(f"Categories: {_join(data.get('categories'))}")

    if data.get("keywords"):
        writer.new_line()
        writer.heading("KEYWORDS:", SLATE, size=12)
        writer.paragraph(_join(data["keywords"]), size=10)

    writer.new_line(2)
    writer.heading("SOURCE & LINK:", SLATE)
    writer.paragraph(data.get("source_url") or "No link available", size=10)
    writer.footer("Current regulatory update")
    return writer.finish()


def knowledge_article_pdf(article: Any) -> bytes:
    data = _as_dict(article)
    writer = PDFWriter(title=data.get("title") or "Knowledge Article")

    writer.text("KNOWLEDGE ARTICLE", size=18, bold=True, color=LEAF)
    writer.heading("Knowledge Base Article", GREY)
    writer.new_line(2)

    writer.heading("ARTICLE INFORMATION:", BLUE)
    writer.paragraph(f"Title: {data.get('title') or 'Unknown'}", size=12)
    writer.text(f"Category: {data.get('category') or 'Unknown'}")
    writer.text(f"Authority: {data.get('authority') or 'Unknown'}")
    writer.text(f"Author: {data.get('author') or 'Unknown'}")
    writer.text(f"Language: {data.get('language') or 'Unknown'}")
    writer.text(f"Published: {_format_date(data.get('published_at'), 'Not published')}")

    if data.get("tags"):
        writer.new_line()
        writer.heading("TAGS:", SLATE, size=12)
        writer.paragraph(_join(data["tags"]), size=10)

    if data.get("summary"):
        writer.new_line(2)
        writer.heading("SUMMARY:", BLUE)
        writer.paragraph(data["summary"])

    writer.new_line(2)
    writer.heading("CONTENT:", PURPLE)
    writer.paragraph(data.get("content") or "No content available")

    if data.get("source_url"):
        writer.new_line()
        writer.text(data["source_url"], size=10, color=BLUE)

    writer.footer("Knowledge base article")
    return writer.finish()


def newsletter_pdf(newsletter: Any) -> bytes:
    """Render a newsletter dict with ``title``, ``content`` and optional ``updates``."""
    data = _as_dict(newsletter)
    writer = PDFWriter(title=data.get("title") or "Newsletter")

    writer.text("NEWSLETTER", size=18, bold=True, color=(0.2, 0.4, 0.8))
    writer.heading("Regulatory Intelligence Newsletter", GREY)
    writer.new_line(2)

    writer.heading("NEWSLETTER INFORMATION:", BLUE)
    writer.paragraph(f"Title: {data.get('title') or 'Unknown'}", size=12)
    writer.text(f"ID: {data.get('id') or 'Unknown'}")
    writer.text(f"Status: {data.get('status') or 'Draft'}")
    writer.text(f"Created: {_format_date(data.get('created_at'))}")
    writer.new_line(2)

    writer.heading("CONTENT:", PURPLE)
    writer.paragraph(data.get("content") or "No newsletter content available")

    updates = data.get("updates") or []
    if updates:
        writer.new_line(2)
        writer.heading("REGULATORY UPDATES:", ORANGE)
        for entry in updates:
            entry = _as_dict(entry)
            writer.new_line()
            writer.paragraph(
                f"[{(entry.get('priority') or 'medium').upper()}] {entry.get('title') or 'Untitled'}",
                size=11,
            )
            meta = f"{entry.get('region') or 'Global'} | {_format_date(entry.get('published_at'))}"
            writer.text(meta, size=9, color=GREY)
            if entry.get("description"):
                writer.paragraph(entry["description"], size=10)

    writer.footer("Newsletter export")
    return writer.finish()
