"""PDF export utilities for quotation and cost-estimate documents with diagnostics.

Provides two main functions:
    generate_quotation_pdf(quotation, company_data, logo) -> (bytes, diag)
    generate_cost_estimate_pdf(cost_estimate, company_data, logo) -> (bytes, diag)

diag is a dict containing size, sha1, eof_present, head_signature, logo,
term_count and breakdown_rows.
"""
from __future__ import annotations

import base64
import calendar
import hashlib
import io
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Tuple
from xml.sax.saxutils import escape

from config import CURRENCY, DEFAULT_LOGO_PATH, PDF_DEBUG_DIR
from .calculations import format_amount
from .dates import format_date
from .logo_cache import LogoSource, get_or_build_logo
from .quotation_core import (
    build_cost_estimate_summary, build_quotation_summary, cost_estimate_filename, quotation_filename,
)

# Header logo box (points)
LOGO_MAX_W, LOGO_MAX_H = 160, 40


def _t(v) -> str:
    return escape(str(v))


def _money(v) -> str:
    return format_amount(v, CURRENCY)


def _resolve_logo(logo: Optional[LogoSource], disable_logo: bool) -> Tuple[Optional[Path], Dict[str, Any]]:
    logo_diag = {"attempted": False, "rendered": False, "source": None, "error": None}
    if disable_logo:
        logo_diag['error'] = 'disabled'
        return None, logo_diag
    candidates = []
    if logo:
        candidates.append(('request', logo))
    if DEFAULT_LOGO_PATH:
        candidates.append(('default', DEFAULT_LOGO_PATH))
    if not candidates:
        logo_diag['error'] = 'not_provided'
        return None, logo_diag
    for label, src in candidates:
        logo_diag['attempted'] = True
        thumb = get_or_build_logo(src, LOGO_MAX_W * 2, LOGO_MAX_H * 2)
        if thumb:
            logo_diag['source'] = label
            return thumb, logo_diag
        logo_diag['error'] = f'unreadable:{label}'
    return None, logo_diag


def _scaled_logo_size(path: Path) -> Tuple[float, float]:
    try:
        from PIL import Image as _PILImage
        with _PILImage.open(path) as im:
            orig_w, orig_h = im.size
    except Exception:
        orig_w, orig_h = (LOGO_MAX_W, LOGO_MAX_H)
    scale = min(LOGO_MAX_W / orig_w, LOGO_MAX_H / orig_h)
    return orig_w * scale, orig_h * scale


def _breakdown_table_rows(breakdown) -> list:
    rows = [['Month', 'Days billed', 'Daily rate', 'Amount']]
    for seg in breakdown.itertuples(index=False):
        rows.append([
            f"{calendar.month_abbr[int(seg.month)]} {int(seg.year)}",
            f"{int(seg.days_counted)} / {int(seg.days_in_month)}",
            _money(seg.daily_rate),
            _money(seg.amount),
        ])
    return rows


def _render_document(
    summary: Dict[str, Any],
    filename: str,
    logo: Optional[LogoSource],
    disable_logo: bool,
) -> Tuple[bytes, Dict[str, Any]]:
    """Lay out a quotation-style summary as an A4 PDF; returns (bytes, diag)."""
    from reportlab.lib import colors
    from reportlab.lib.pagesizes import A4
    from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
    from reportlab.lib.units import mm
    from reportlab.pdfgen import canvas as _canvas
    from reportlab.platypus import KeepTogether, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

    logo_path, logo_diag = _resolve_logo(logo, disable_logo)
    logo_size = _scaled_logo_size(logo_path) if logo_path else None

    buf_local = io.BytesIO()
    styles = getSampleStyleSheet()
    body = ParagraphStyle(name='QBody', parent=styles['Normal'], fontName='Helvetica', fontSize=10, leading=14)
    bold = ParagraphStyle(name='QBold', parent=body, fontName='Helvetica-Bold')
    title_style = ParagraphStyle(name='QTitle', parent=bold, fontSize=13, leading=18, alignment=1)
    right = ParagraphStyle(name='QRight', parent=body, alignment=2)
    note_style = ParagraphStyle(name='QNote', parent=body, fontName='Helvetica-Oblique', fontSize=9,
                                textColor=colors.grey)
    small = ParagraphStyle(name='QSmall', parent=body, fontName='Helvetica-Oblique', fontSize=7,
                           leading=9, textColor=colors.grey)

    footer_lines = [
        summary['company_name'],
        summary['company_address'],
        f"Tel: {summary['company_phone']} | Email: {summary['company_email']}",
    ]

    def _decorate(canvas: _canvas.Canvas, doc):
        canvas.saveState()
        page_w, page_h = A4
        if logo_path and logo_size:
            w, h = logo_size
            try:
                canvas.drawImage(str(logo_path), (page_w - w) / 2, page_h - 8 * mm - h,
                                 width=w, height=h, mask='auto')
                logo_diag['rendered'] = True
            except Exception as e:
                logo_diag['error'] = repr(e)
        canvas.setFont('Helvetica', 7)
        canvas.setFillColor(colors.HexColor('#333333'))
        y = 24 * mm
        for line in footer_lines + [f"Page {doc.page}"]:
            if line:
                canvas.drawCentredString(page_w / 2, y, line)
            y -= 9
        canvas.restoreState()

    doc = SimpleDocTemplate(
        buf_local, pagesize=A4,
        leftMargin=10 * mm, rightMargin=10 * mm, topMargin=25 * mm, bottomMargin=30 * mm,
        title=summary['title'],
    )
    story = []

    story.append(Paragraph(escape(format_date(summary['document_date'])), body))
    story.append(Spacer(1, 10))

    client_left = [
        Paragraph(_t(summary['client_name']), body),
        Paragraph(_t(summary['client_designation']), body),
        Paragraph(_t(summary['client_company_name']), bold),
    ]
    client_tbl = Table([[client_left, Paragraph(_t(summary['reference']), right)]],
                       colWidths=[120 * mm, 70 * mm])
    client_tbl.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LEFTPADDING', (0, 0), (-1, -1), 0),
        ('RIGHTPADDING', (0, 0), (-1, -1), 0),
    ]))
    story.append(client_tbl)
    story.append(Spacer(1, 10))

    story.append(Paragraph(_t(summary['title']), title_style))
    story.append(Spacer(1, 10))
    story.append(Paragraph(_t(summary['salutation']), body))
    story.append(Spacer(1, 6))
    story.append(Paragraph(_t(summary['greeting']), body))
    story.append(Spacer(1, 10))

    story.append(Paragraph('Site details:', bold))
    details = [
        ('Type:', summary['site_type']),
        ('Size:', summary['site_size']),
        ('Contract Duration:', summary['duration_label']),
        ('Contract Period:', summary['contract_period']),
        ('Proposal to:', summary['proposal_to']),
        ('Lease rate per month:', f"{_money(summary['monthly_rate'])} (Exclusive of VAT)"),
        ('Total Lease:', f"{_money(summary['total_lease'])} (Exclusive of VAT)"),
    ]
    details_tbl = Table(
        [[Paragraph(f"• {escape(label)}", body), Paragraph(_t(value), body)] for label, value in details],
        colWidths=[60 * mm, 130 * mm], hAlign='LEFT',
    )
    details_tbl.setStyle(TableStyle([
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('LEFTPADDING', (0, 0), (0, -1), 6),
        ('TOPPADDING', (0, 0), (-1, -1), 1),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
    ]))
    story.append(KeepTogether([details_tbl]))
    story.append(Spacer(1, 8))

    for label, text in summary['notes']:
        story.append(Paragraph(f"<b>{escape(label)}</b> {_t(text)}", note_style))
        story.append(Spacer(1, 8))

    price_rows = [
        ['Lease rate per month', _money(summary['monthly_rate'])],
        ['Contract duration', f"x {summary['duration_label']}"],
        ['Total lease', _money(summary['total_lease'])],
        ['Add: VAT', _money(summary['vat'])],
        ['Total', _money(summary['grand_total'])],
    ]
    price_tbl = Table(price_rows, colWidths=[120 * mm, 60 * mm], hAlign='RIGHT')
    price_tbl.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 0), (-1, -1), 10),
        ('ALIGN', (1, 0), (1, -1), 'RIGHT'),
        ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
        ('LINEABOVE', (0, -1), (-1, -1), 0.5, colors.HexColor('#858080')),
        ('TOPPADDING', (0, 0), (-1, -1), 1),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 2),
    ]))
    story.append(KeepTogether([Paragraph('Price breakdown:', bold), Spacer(1, 4), price_tbl]))
    story.append(Spacer(1, 6))

    # per-month proration behind "Total lease"
    month_rows = _breakdown_table_rows(summary['breakdown'])
    if len(month_rows) > 1:
        month_tbl = Table(month_rows, colWidths=[40 * mm, 30 * mm, 55 * mm, 55 * mm], hAlign='RIGHT', repeatRows=1)
        month_tbl.setStyle(TableStyle([
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 0), (-1, -1), 8),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('LINEBELOW', (0, 0), (-1, 0), 0.5, colors.HexColor('#858080')),
            ('ALIGN', (1, 0), (-1, -1), 'RIGHT'),
            ('TEXTCOLOR', (0, 1), (-1, -1), colors.HexColor('#555555')),
            ('TOPPADDING', (0, 0), (-1, -1), 1),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 1),
        ]))
        story.append(month_tbl)
    story.append(Spacer(1, 8))

    for label, text in summary['price_notes']:
        story.append(Paragraph(f"<b>{escape(label)}</b> {_t(text)}", note_style))
        story.append(Spacer(1, 8))

    terms_flow = [Paragraph('Terms and Conditions:', bold)]
    for idx, term in enumerate(summary['terms'], start=1):
        terms_flow.append(Paragraph(f"{idx}. {_t(term)}", body))
    story.append(KeepTogether(terms_flow))
    story.append(Spacer(1, 10))

    if summary['closing_message']:
        story.append(KeepTogether([Paragraph(_t(summary['closing_message']), body)]))
        story.append(Spacer(1, 10))

    def _signature_block(heading, name, position, extra=None):
        line = Table([['']], colWidths=[70 * mm], rowHeights=[20], hAlign='LEFT')
        line.setStyle(TableStyle([('LINEBELOW', (0, 0), (-1, -1), 0.75, colors.black)]))
        flow = [Paragraph(heading, body), line, Paragraph(_t(name), body), Paragraph(_t(position), body)]
        if extra:
            flow.append(Spacer(1, 6))
            flow.append(Paragraph(extra, small))
        return KeepTogether(flow + [Spacer(1, 16)])

    story.append(Spacer(1, 10))
    story.append(_signature_block('Very truly yours,', summary['signature_name'], summary['signature_position']))
    if summary['conforme_designation'] is not None:
        story.append(_signature_block(
            'Conforme:', summary['client_name'], summary['conforme_designation'],
            extra='This signed quotation serves as an<br/>official document for billing purposes',
        ))

    doc.build(story, onFirstPage=_decorate, onLaterPages=_decorate)
    buf_local.seek(0)
    pdf_bytes = buf_local.read()

    if PDF_DEBUG_DIR:
        try:
            dbg_dir = Path(PDF_DEBUG_DIR)
            dbg_dir.mkdir(parents=True, exist_ok=True)
            ts = datetime.now().strftime('%Y%m%d_%H%M%S')
            (dbg_dir / f"{ts}_{filename}").write_bytes(pdf_bytes)
        except OSError as _dbg_e:
            print(f"[pdf][debug-dump][warn] {_dbg_e}")

    diag = {
        'size': len(pdf_bytes),
        'sha1': hashlib.sha1(pdf_bytes).hexdigest(),
        'head_signature': pdf_bytes[:8],
        'eof_present': b'%%EOF' in pdf_bytes[-1024:],
        'logo': logo_diag,
        'term_count': len(summary['terms']),
        'breakdown_rows': len(month_rows) - 1,
        'total_lease': summary['total_lease'],
        'grand_total': summary['grand_total'],
        'filename': filename,
    }
    return pdf_bytes, diag


def generate_quotation_pdf(
    quotation: Dict[str, Any],
    company_data: Optional[Dict[str, Any]] = None,
    logo: Optional[LogoSource] = None,
    *,
    disable_logo: bool = False,
    today: Optional[datetime] = None,
) -> Tuple[bytes, Dict[str, Any]]:
    """Build the quotation PDF and return raw bytes plus diagnostics.

    Parameters
    ---------
    quotation: stored quotation record
    company_data: issuing company (name, address, zip, phone, email) for greeting and footer
    logo: optional logo as file path, raw bytes or base64 data URL; drawn in every page header
    disable_logo: skip logo rendering even if one is configured
    today: override for the document date (mainly for tests)
    """
    summary = build_quotation_summary(quotation, company_data, today=today)
    return _render_document(summary, quotation_filename(quotation), logo, disable_logo)


def generate_cost_estimate_pdf(
    cost_estimate: Dict[str, Any],
    company_data: Optional[Dict[str, Any]] = None,
    logo: Optional[LogoSource] = None,
    *,
    prepared_by: Optional[Dict[str, Any]] = None,
    disable_logo: bool = False,
    today: Optional[datetime] = None,
) -> Tuple[bytes, Dict[str, Any]]:
    """Cost-estimate counterpart of ``generate_quotation_pdf`` (no conforme block).

    prepared_by: optional user record (first_name, last_name) signing the estimate
    """
    summary = build_cost_estimate_summary(cost_estimate, company_data, prepared_by=prepared_by, today=today)
    pdf_bytes, diag = _render_document(summary, cost_estimate_filename(cost_estimate), logo, disable_logo)
    diag['site_count'] = len(summary['sites'])
    return pdf_bytes, diag


def build_download_dict(pdf_bytes: bytes, filename: str = 'quotation.pdf') -> dict:
    return {
        'content': base64.b64encode(pdf_bytes).decode(),
        'filename': filename,
        'type': 'application/pdf',
        'base64': True,
    }
