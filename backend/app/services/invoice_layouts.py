"""Visual layouts for invoice documents.

Each layout turns a resolved invoice aggregate into a list of platypus
flowables, block by block, and paints the per-page decorations (bands and
footer) from the page callbacks. The block order in ``BLOCKS`` is shared with
the template previews.
"""

import base64
import binascii
from io import BytesIO
from typing import Any, Dict, List, Optional
from xml.sax.saxutils import escape

import structlog
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.platypus import Image, Paragraph, Spacer, Table, TableStyle

from backend.app.services.formatting import (
    FormattingContext,
    format_currency,
    format_date,
    format_percentage,
    format_quantity,
)

LOGGER = structlog.get_logger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 15 * mm

NEUTRAL_GRAY = colors.Color(100 / 255, 100 / 255, 100 / 255)
STATUS_COLORS = {
    "draft": NEUTRAL_GRAY,
    "sent": colors.Color(39 / 255, 128 / 255, 227 / 255),
    "paid": colors.Color(39 / 255, 174 / 255, 96 / 255),
    "overdue": colors.Color(231 / 255, 76 / 255, 60 / 255),
    "cancelled": NEUTRAL_GRAY,
}

ITEM_HEADERS = ["Description", "Qty", "Unit Price", "Amount"]


def status_color(status: Optional[str]) -> colors.Color:
    return STATUS_COLORS.get((status or "").lower(), NEUTRAL_GRAY)


def business_initials(name: Optional[str]) -> str:
    words = [word for word in (name or "").split() if word[:1].isalnum()]
    return "".join(word[0] for word in words[:2]).upper() or "?"


def decode_logo(logo: Optional[str]) -> Optional[bytes]:
    """Return raw image bytes for a stored logo, or None when it is absent or unreadable."""
    if not logo:
        return None
    _, _, payload = logo.partition(",")
    try:
        raw = base64.b64decode(payload or logo, validate=True)
        ImageReader(BytesIO(raw)).getSize()
    except (binascii.Error, ValueError, OSError) as exc:
        LOGGER.warning("invoice_logo_unreadable", error=str(exc))
        return None
    return raw


def _text(value: Any) -> str:
    return escape(str(value)).replace("\n", "<br/>")


class InvoiceLayout:
    """Classic layout: plain header, grid item table, right-aligned totals."""

    BLOCKS = ("header", "status", "parties", "items", "totals", "notes")

    primary = colors.black
    table_header_background = colors.Color(240 / 255, 240 / 255, 240 / 255)
    table_header_text = colors.black
    grid_color = colors.Color(200 / 255, 200 / 255, 200 / 255)
    footer_text_color = NEUTRAL_GRAY
    badge_color = NEUTRAL_GRAY
    header_band = False

    def __init__(self, aggregate, context: FormattingContext, footer_text: str):
        self.aggregate = aggregate
        self.invoice = aggregate.invoice
        self.business = aggregate.business
        self.client = aggregate.client
        self.context = context
        self.footer_text = footer_text
        self.content_width = PAGE_WIDTH - 2 * MARGIN
        self.blocks: List[str] = []
        self.pages_drawn = 0
        self.styles = self._build_styles()

    # -- helpers -----------------------------------------------------------

    def _build_styles(self) -> Dict[str, ParagraphStyle]:
        return {
            "body": ParagraphStyle("body", fontName="Helvetica", fontSize=10, leading=14),
            "bold": ParagraphStyle("bold", fontName="Helvetica-Bold", fontSize=10, leading=14),
            "label": ParagraphStyle("label", fontName="Helvetica-Bold", fontSize=12, leading=16, textColor=self.primary),
            "business": ParagraphStyle("business", fontName="Helvetica-Bold", fontSize=18, leading=22, textColor=self.primary),
            "title": ParagraphStyle("title", fontName="Helvetica-Bold", fontSize=24, leading=28, alignment=TA_RIGHT, textColor=self.primary),
            "meta": ParagraphStyle("meta", fontName="Helvetica", fontSize=11, leading=15, alignment=TA_RIGHT),
            "badge": ParagraphStyle("badge", fontName="Helvetica-Bold", fontSize=10, leading=12, alignment=TA_CENTER, textColor=colors.white),
            "initials": ParagraphStyle("initials", fontName="Helvetica-Bold", fontSize=16, leading=20, alignment=TA_CENTER, textColor=colors.white),
        }

    def money(self, amount) -> str:
        return format_currency(amount, self.invoice.currency, self.context)

    def date(self, value) -> str:
        return format_date(value, self.context)

    def business_mark(self, size: float):
        raw = decode_logo(self.business.logo)
        if raw is not None:
            return Image(BytesIO(raw), width=size, height=size, kind="proportional")
        badge = Table([[Paragraph(business_initials(self.business.name), self.styles["initials"])]], colWidths=[size], rowHeights=[size])
        badge.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), self.badge_color),
                    ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
                ]
            )
        )
        return badge

    def party_lines(self, party, include_tax_number: bool = True) -> List[str]:
        lines = [f"<b>{_text(party.name)}</b>"]
        if party.address:
            lines.append(_text(party.address))
        if party.email:
            lines.append(f"Email: {_text(party.email)}")
        if party.phone:
            lines.append(f"Phone: {_text(party.phone)}")
        if include_tax_number and party.tax_number:
            lines.append(f"Tax/GST: {_text(party.tax_number)}")
        return lines

    def totals_rows(self) -> List[List[str]]:
        rows = [["Subtotal:", self.money(self.invoice.subtotal)]]
        if self.invoice.tax_rate and self.invoice.tax_rate > 0:
            rows.append([f"Tax ({format_percentage(self.invoice.tax_rate)}):", self.money(self.invoice.tax_amount)])
        if self.invoice.discount and self.invoice.discount > 0:
            rows.append(["Discount:", f"- {self.money(self.invoice.discount)}"])
        rows.append(["Total:", self.money(self.invoice.total)])
        return rows

    # -- blocks ------------------------------------------------------------

    def build_story(self) -> list:
        story = []
        for block in self.BLOCKS:
            flowables = getattr(self, f"build_{block}")()
            if flowables:
                self.blocks.append(block)
                story.extend(flowables)
        self.blocks.append("footer")
        return story

    def build_header(self) -> list:
        identity = [self.business_mark(20 * mm), Spacer(1, 2 * mm), Paragraph(_text(self.business.name), self.styles["business"])]
        meta = [
            Paragraph("INVOICE", self.styles["title"]),
            Paragraph(f"Invoice #: {_text(self.invoice.invoice_number)}", self.styles["meta"]),
            Paragraph(f"Date: {self.date(self.invoice.issue_date)}", self.styles["meta"]),
            Paragraph(f"Due: {self.date(self.invoice.due_date)}", self.styles["meta"]),
        ]
        table = Table([[identity, meta]], colWidths=[self.content_width * 0.5, self.content_width * 0.5])
        table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP"), ("LEFTPADDING", (0, 0), (-1, -1), 0), ("RIGHTPADDING", (0, 0), (-1, -1), 0)]))
        return [table, Spacer(1, 4 * mm)]

    def build_status(self) -> list:
        badge = Table([[Paragraph(_text((self.invoice.status or "draft").upper()), self.styles["badge"])]], colWidths=[55 * mm], hAlign="RIGHT")
        badge.setStyle(TableStyle([("BACKGROUND", (0, 0), (-1, -1), status_color(self.invoice.status))]))
        return [badge, Spacer(1, 6 * mm)]

    def party_heading(self, label: str):
        return Paragraph(f"{label}:", self.styles["label"])

    def build_parties(self) -> list:
        from_cell = [self.party_heading("From")] + [Paragraph(line, self.styles["body"]) for line in self.party_lines(self.business)]
        to_cell = [self.party_heading("To")] + [Paragraph(line, self.styles["body"]) for line in self.party_lines(self.client)]
        table = Table([[from_cell, to_cell]], colWidths=[self.content_width * 0.55, self.content_width * 0.45])
        table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP"), ("LEFTPADDING", (0, 0), (-1, -1), 0)]))
        return [table, Spacer(1, 10 * mm)]

    def item_table_style(self) -> List[tuple]:
        return [
            ("BACKGROUND", (0, 0), (-1, 0), self.table_header_background),
            ("TEXTCOLOR", (0, 0), (-1, 0), self.table_header_text),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
            ("ALIGN", (1, 0), (1, -1), "CENTER"),
            ("ALIGN", (2, 0), (-1, -1), "RIGHT"),
            ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ("GRID", (0, 0), (-1, -1), 0.5, self.grid_color),
            ("TOPPADDING", (0, 0), (-1, -1), 5),
            ("BOTTOMPADDING", (0, 0), (-1, -1), 5),
        ]

    def build_items(self) -> list:
        rows: List[list] = [list(ITEM_HEADERS)]
        for item in self.aggregate.items:
            rows.append(
                [
                    [Paragraph(_text(item.description), self.styles["body"])],
                    format_quantity(item.quantity),
                    self.money(item.unit_price),
                    self.money(item.amount),
                ]
            )
        # A row taller than the frame is split across pages; only list cells keep their flowables when split.
        fixed = 30 * mm + 40 * mm + 40 * mm
        table = Table(rows, colWidths=[self.content_width - fixed, 30 * mm, 40 * mm, 40 * mm], repeatRows=1, splitInRow=1)
        table.setStyle(TableStyle(self.item_table_style()))
        return [table, Spacer(1, 8 * mm)]

    def totals_table_style(self) -> List[tuple]:
        return [
            ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ("FONTSIZE", (0, 0), (-1, -2), 10),
            ("LINEABOVE", (0, -1), (-1, -1), 0.75, self.grid_color),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, -1), (-1, -1), 12),
            ("TOPPADDING", (0, -1), (-1, -1), 6),
        ]

    def build_totals(self) -> list:
        rows = self.totals_rows()
        table = Table(rows, colWidths=[35 * mm, 45 * mm], hAlign="RIGHT")
        table.setStyle(TableStyle(self.totals_table_style()))
        return [table, Spacer(1, 8 * mm)]

    def build_notes(self) -> list:
        notes = (self.invoice.notes or "").strip()
        if not notes:
            return []
        return [
            Paragraph("Notes:", self.styles["bold"]),
            Spacer(1, 2 * mm),
            Paragraph(_text(notes), self.styles["body"]),
        ]

    # -- page decorations --------------------------------------------------

    def footer_line(self, page_number: int) -> str:
        return f"{self.footer_text} - Page {page_number}"

    def draw_footer(self, canvas, doc) -> None:
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(self.footer_text_color)
        canvas.drawCentredString(PAGE_WIDTH / 2, 10 * mm, self.footer_line(canvas.getPageNumber()))

    def draw_first_page(self, canvas, doc) -> None:
        self.draw_later_page(canvas, doc)

    def draw_later_page(self, canvas, doc) -> None:
        canvas.saveState()
        self.draw_footer(canvas, doc)
        canvas.restoreState()
        self.pages_drawn = max(self.pages_drawn, canvas.getPageNumber())

    # -- preview -------------------------------------------------------------

    @classmethod
    def preview_style(cls) -> Dict[str, Any]:
        return {"accent": cls.primary.hexval(), "header_band": cls.header_band, "table_header": cls.table_header_background.hexval()}


ClassicLayout = InvoiceLayout


class ModernLayout(InvoiceLayout):
    """Modern layout: blue header band, striped item rows, shaded totals."""

    primary = colors.Color(39 / 255, 128 / 255, 227 / 255)
    table_header_background = primary
    badge_color = primary
    table_header_text = colors.white
    grid_color = colors.Color(220 / 255, 220 / 255, 220 / 255)
    stripe = colors.Color(245 / 255, 245 / 255, 245 / 255)
    footer_text_color = colors.white
    header_band = True
    band_height = 50 * mm

    def _build_styles(self) -> Dict[str, ParagraphStyle]:
        styles = super()._build_styles()
        styles["title"] = ParagraphStyle("title", parent=styles["title"], alignment=TA_LEFT, textColor=colors.white)
        styles["business"] = ParagraphStyle("business", fontName="Helvetica-Bold", fontSize=12, leading=16, textColor=colors.white)
        styles["band_meta"] = ParagraphStyle("band_meta", fontName="Helvetica", fontSize=10, leading=14, textColor=colors.white)
        styles["meta"] = ParagraphStyle("meta", fontName="Helvetica", fontSize=10, leading=14, alignment=TA_LEFT)
        return styles

    def build_header(self) -> list:
        text = [
            Paragraph("INVOICE", self.styles["title"]),
            Paragraph(_text(self.business.name), self.styles["business"]),
            Paragraph(f"Invoice #: {_text(self.invoice.invoice_number)}", self.styles["band_meta"]),
        ]
        table = Table([[text, self.business_mark(25 * mm)]], colWidths=[self.content_width - 30 * mm, 30 * mm], rowHeights=[self.band_height - MARGIN - 8 * mm])
        table.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "TOP"), ("ALIGN", (1, 0), (1, 0), "RIGHT"), ("LEFTPADDING", (0, 0), (-1, -1), 0)]))
        dates = [
            Paragraph(f"Date: {self.date(self.invoice.issue_date)}", self.styles["meta"]),
            Paragraph(f"Due Date: {self.date(self.invoice.due_date)}", self.styles["meta"]),
        ]
        return [table, Spacer(1, 10 * mm)] + dates + [Spacer(1, 2 * mm)]

    def item_table_style(self) -> List[tuple]:
        style = super().item_table_style()
        style.append(("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, self.stripe]))
        return style

    def totals_table_style(self) -> List[tuple]:
        style = super().totals_table_style()
        style.extend(
            [
                ("BACKGROUND", (0, 0), (-1, -1), self.stripe),
                ("TEXTCOLOR", (0, -1), (-1, -1), self.primary),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
                ("RIGHTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
        return style

    def build_notes(self) -> list:
        flowables = super().build_notes()
        if flowables:
            flowables[0] = Paragraph("Notes:", ParagraphStyle("notes_label", parent=self.styles["bold"], textColor=self.primary))
        return flowables

    def draw_first_page(self, canvas, doc) -> None:
        canvas.saveState()
        canvas.setFillColor(self.primary)
        canvas.rect(0, PAGE_HEIGHT - self.band_height, PAGE_WIDTH, self.band_height, fill=1, stroke=0)
        canvas.restoreState()
        self.draw_later_page(canvas, doc)

    def draw_footer(self, canvas, doc) -> None:
        canvas.setFillColor(self.primary)
        canvas.rect(0, 0, PAGE_WIDTH, 17 * mm, fill=1, stroke=0)
        super().draw_footer(canvas, doc)


class ProfessionalLayout(InvoiceLayout):
    """Professional layout: rule under the header, labelled party boxes, boxed totals."""

    primary = colors.Color(50 / 255, 50 / 255, 50 / 255)
    table_header_background = primary
    badge_color = primary
    table_header_text = colors.white

    def build_identity(self):
        """Wide logo when one is readable, otherwise the initials badge beside the business name."""
        raw = decode_logo(self.business.logo)
        if raw is not None:
            return Image(BytesIO(raw), width=40 * mm, height=20 * mm, kind="proportional")
        name = Paragraph(_text(self.business.name), self.styles["business"])
        identity = Table([[self.business_mark(14 * mm), name]], colWidths=[18 * mm, self.content_width * 0.5 - 18 * mm], hAlign="LEFT")
        identity.setStyle(TableStyle([("VALIGN", (0, 0), (-1, -1), "MIDDLE"), ("LEFTPADDING", (0, 0), (-1, -1), 0)]))
        return identity

    def build_header(self) -> list:
        identity = self.build_identity()
        meta = [
            Paragraph("INVOICE", self.styles["title"]),
            Paragraph(f"Invoice #: {_text(self.invoice.invoice_number)}", ParagraphStyle("meta_small", parent=self.styles["meta"], fontSize=10)),
        ]
        top = Table([[identity, meta]], colWidths=[self.content_width * 0.5, self.content_width * 0.5])
        top.setStyle(
            TableStyle(
                [
                    ("VALIGN", (0, 0), (-1, -1), "TOP"),
                    ("LEFTPADDING", (0, 0), (-1, -1), 0),
                    ("RIGHTPADDING", (0, 0), (-1, -1), 0),
                    ("LINEBELOW", (0, 0), (-1, 0), 1, self.primary),
                    ("BOTTOMPADDING", (0, 0), (-1, 0), 6),
                ]
            )
        )
        dates = Table(
            [[f"Issue Date: {self.date(self.invoice.issue_date)}", f"Due Date: {self.date(self.invoice.due_date)}"]],
            colWidths=[self.content_width * 0.5, self.content_width * 0.5],
        )
        dates.setStyle(TableStyle([("ALIGN", (1, 0), (1, 0), "RIGHT"), ("FONTSIZE", (0, 0), (-1, -1), 10), ("LEFTPADDING", (0, 0), (-1, -1), 0), ("RIGHTPADDING", (0, 0), (-1, -1), 0)]))
        return [top, Spacer(1, 3 * mm), dates, Spacer(1, 2 * mm)]

    def party_heading(self, label: str):
        tag = Table([[label.upper()]], colWidths=[20 * mm], hAlign="LEFT")
        tag.setStyle(
            TableStyle(
                [
                    ("BACKGROUND", (0, 0), (-1, -1), self.primary),
                    ("TEXTCOLOR", (0, 0), (-1, -1), colors.white),
                    ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
                    ("FONTSIZE", (0, 0), (-1, -1), 11),
                    ("ALIGN", (0, 0), (-1, -1), "CENTER"),
                ]
            )
        )
        return tag

    def totals_table_style(self) -> List[tuple]:
        style = super().totals_table_style()
        style.extend(
            [
                ("BOX", (0, 0), (-1, -1), 0.5, self.primary),
                ("BACKGROUND", (0, -1), (-1, -1), self.primary),
                ("TEXTCOLOR", (0, -1), (-1, -1), colors.white),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
                ("RIGHTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
        return style

    def draw_footer(self, canvas, doc) -> None:
        canvas.setStrokeColor(self.primary)
        canvas.setLineWidth(0.5)
        canvas.line(MARGIN, 15 * mm, PAGE_WIDTH - MARGIN, 15 * mm)
        super().draw_footer(canvas, doc)
