# This project was developed with assistance from AI tools.
"""PDF rendering for installment schedules and receipts.

Rendering is pure (rows + statement date in, bytes out) and runs in a
thread-pool executor from the async wrappers at the bottom. Canvases are
created with ``invariant=1`` so identical inputs give identical bytes.
"""

import asyncio
import io
from datetime import date, datetime
from functools import partial

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfgen import canvas
from reportlab.platypus import Table, TableStyle

from ..core.config import settings
from .money import format_display, parse_amount_lenient

ROWS_PER_PAGE = 28

_DARK = colors.HexColor("#111827")
_GRAY = colors.HexColor("#6b7280")
_HEADER_FILL = colors.HexColor("#e6e6e6")
_STRIPE_FILL = colors.HexColor("#f5f5f5")
_GRID = colors.HexColor("#d1d5db")

_SCHEDULE_HEADERS = ["No.", "Due Date", "Installment", "Remaining", "Amount Paid", "Penalties", "Paid"]
_SCHEDULE_WIDTHS = [12 * mm, 26 * mm, 30 * mm, 30 * mm, 30 * mm, 26 * mm, 16 * mm]


def _fmt_date(value, fmt: str = "%d %b %Y") -> str:
    if not value:
        return ""
    if isinstance(value, (datetime, date)):
        return value.strftime(fmt)
    text = str(value).strip()
    try:
        return datetime.fromisoformat(text).strftime(fmt)
    except ValueError:
        return text


def _money(value) -> str:
    return format_display(parse_amount_lenient(value))


def _draw_header(c: canvas.Canvas, title: str) -> float:
    width, height = A4
    c.setFillColor(_DARK)
    c.setFont("Helvetica-Bold", 20)
    c.drawCentredString(width / 2, height - 22 * mm, settings.COMPANY_NAME)
    c.setFont("Helvetica-Bold", 15)
    c.drawCentredString(width / 2, height - 32 * mm, title)
    return height - 42 * mm


def _draw_footer(c: canvas.Canvas, page: int, pages: int) -> None:
    width, _ = A4
    c.setFillColor(_GRAY)
    c.setFont("Helvetica", 8)
    c.drawCentredString(width / 2, 14 * mm, settings.COMPANY_CONTACT_LINE)
    c.setFont("Helvetica-Oblique", 8)
    c.drawCentredString(width / 2, 9 * mm, f"Page {page} of {pages}")


def _chunks(rows: list, size: int) -> list[list]:
    return [rows[i : i + size] for i in range(0, len(rows), size)] or [[]]


# ---------------------------------------------------------------------------
# Installment schedule
# ---------------------------------------------------------------------------


def _schedule_row(schedule) -> list[str]:
    return [
        str(schedule.installment_no if schedule.installment_no is not None else ""),
        _fmt_date(schedule.due_date),
        _money(schedule.installment_amount),
        _money(schedule.remaining_amount),
        _money(schedule.amount_paid),
        _money(schedule.penalties_accrued or 0),
        (schedule.paid or "").strip().title(),
    ]


def render_installment_schedule_pdf(
    customer_number: str,
    plot_number: str,
    schedules: list,
    statement_date: date,
) -> bytes:
    """Render a payment schedule statement, one table page per ROWS_PER_PAGE rows."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4, invariant=1)
    c.setTitle(f"Payment Schedule {plot_number}")
    width, _ = A4

    pages = _chunks([_schedule_row(s) for s in schedules], ROWS_PER_PAGE)
    for page_no, rows in enumerate(pages, start=1):
        y = _draw_header(c, "Payment Schedule")

        c.setFillColor(_DARK)
        c.setFont("Helvetica", 11)
        c.drawString(15 * mm, y, f"Customer Number: {customer_number}")
        c.drawString(15 * mm, y - 6 * mm, f"Property: {plot_number}")
        c.drawString(15 * mm, y - 12 * mm, f"Date: {statement_date.strftime('%d %B %Y')}")
        y -= 20 * mm

        table = Table([_SCHEDULE_HEADERS, *rows], colWidths=_SCHEDULE_WIDTHS, hAlign="LEFT")
        style = [
            ("BACKGROUND", (0, 0), (-1, 0), _HEADER_FILL),
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 8),
            ("GRID", (0, 0), (-1, -1), 0.5, _GRID),
            ("ALIGN", (2, 1), (5, -1), "RIGHT"),
            ("ALIGN", (0, 0), (1, -1), "CENTER"),
            ("ALIGN", (6, 0), (6, -1), "CENTER"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]
        for index in range(1, len(rows) + 1):
            if index % 2:
                style.append(("BACKGROUND", (0, index), (-1, index), _STRIPE_FILL))
        table.setStyle(TableStyle(style))

        _, th = table.wrapOn(c, width - 30 * mm, y)
        table.drawOn(c, 15 * mm, y - th)

        _draw_footer(c, page_no, len(pages))
        c.showPage()

    c.save()
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Receipt
# ---------------------------------------------------------------------------


def render_receipt_pdf(
    customer_number: str,
    plot_number: str,
    receipt,
    statement_date: date,
) -> bytes:
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=A4, invariant=1)
    c.setTitle(f"Receipt {receipt.receipt_no or receipt.id}")
    width, _ = A4

    y = _draw_header(c, "Receipt")

    posted = _fmt_date(receipt.date_posted, "%d %B %Y") or statement_date.strftime("%d %B %Y")
    rows = [
        ["Receipt No:", receipt.receipt_no or str(receipt.id)],
        ["Date:", posted],
        ["Customer:", customer_number],
        ["Property:", plot_number],
        ["Project:", receipt.project_name or ""],
        ["Payment Mode:", receipt.pay_mode or ""],
        ["Amount:", f"KES {_money(receipt.amount_lcy)}"],
    ]
    table = Table(rows, colWidths=[45 * mm, 120 * mm], hAlign="LEFT")
    table.setStyle(
        TableStyle(
            [
                ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, 0), (-1, -1), 11),
                ("BOX", (0, 0), (-1, -1), 0.8, _DARK),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                ("LEFTPADDING", (0, 0), (-1, -1), 8),
            ]
        )
    )
    _, th = table.wrapOn(c, width - 30 * mm, y)
    table.drawOn(c, 15 * mm, y - th)
    y = y - th - 14 * mm

    c.setFillColor(_GRAY)
    c.setFont("Helvetica-Oblique", 10)
    c.drawCentredString(
        width / 2,
        y,
        "Thank you for your payment. If you have any questions, please contact our customer service.",
    )

    _draw_footer(c, 1, 1)
    c.showPage()
    c.save()
    return buf.getvalue()


# ---------------------------------------------------------------------------
# Async wrappers
# ---------------------------------------------------------------------------


async def build_installment_schedule_pdf(
    customer_number: str, plot_number: str, schedules: list, statement_date: date
) -> bytes:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        partial(render_installment_schedule_pdf, customer_number, plot_number, schedules, statement_date),
    )


async def build_receipt_pdf(customer_number: str, plot_number: str, receipt, statement_date: date) -> bytes:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        None,
        partial(render_receipt_pdf, customer_number, plot_number, receipt, statement_date),
    )
