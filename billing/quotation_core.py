"""Shared quotation and cost-estimate assembly used by the PDF renderer, the API and the CLI.

Functions here avoid Dash imports and focus purely on turning a stored
quotation or cost-estimate record into the values its document shows.
"""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from .calculations import (
    compute_lease_totals, format_calendar_duration, format_duration, prorated_breakdown, _f,
)
from .dates import format_contract_period, normalize

DEFAULT_TERMS = [
    "Quotation validity: 5 working days.",
    "Site availability: First-come-first-served basis. Official documents required.",
    "Payment terms: One month advance and two months security deposit.",
    "Payment deadline: 7 days before rental start.",
]


def format_company_address(company: Optional[Dict[str, Any]]) -> str:
    if not company:
        return ""
    # cost-estimate company records nest the address under company_location
    address = company.get('address') or company.get('company_location') or {}
    parts = [address.get('street'), address.get('city'), address.get('province'), company.get('zip')]
    return ", ".join(str(p) for p in parts if p)


def quotation_item(quotation: Dict[str, Any]) -> Dict[str, Any]:
    """The quoted site: ``items`` may be one dict or a list; falls back to ``products``."""
    for key in ('items', 'products'):
        val = quotation.get(key)
        if isinstance(val, dict):
            return val
        if isinstance(val, list) and val and isinstance(val[0], dict):
            return val[0]
    return {}


def contract_dates(quotation: Dict[str, Any]):
    """Raw (start, end) values from top-level fields or ``contract_period``."""
    period = quotation.get('contract_period') or {}
    start = quotation.get('start_date') or quotation.get('startDate') or period.get('start_date')
    end = quotation.get('end_date') or quotation.get('endDate') or period.get('end_date')
    return start, end


def _size_label(item: Dict[str, Any]) -> str:
    specs = item.get('specs') or item.get('specs_rental') or {}
    height = specs.get('height')
    width = specs.get('width')
    h = f"{height}ft (H)" if height else "N/A"
    w = f"{width}ft (W)" if width else "N/A"
    return f"{h} x {w}"


def _labelled(label: str, text: Any) -> List[tuple]:
    return [(label, text)] if text else []


def _salutation(quotation: Dict[str, Any], template: Dict[str, Any]) -> str:
    title = template.get('salutation') or 'Mr.'
    client = (quotation.get('client_name') or '').split()
    surname = client[-1] if client else 'Client'
    return f"Dear {title} {surname},"


def build_quotation_summary(
    quotation: Dict[str, Any],
    company: Optional[Dict[str, Any]] = None,
    *,
    today: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Collect every value a quotation document renders.

    Args:
        quotation: stored quotation record (dict as read from the document store).
        company: issuing company record; only name/address/contacts are used.
        today: override for "now" (document date and pricing fallback).

    Contract dates that are missing or unparseable fall back to ``today`` for
    pricing; the printed contract period only shows the dates that exist.
    """
    company = company or {}
    today = today or datetime.now()
    item = quotation_item(quotation)
    template = quotation.get('template') or {}
    raw_start, raw_end = contract_dates(quotation)
    start = normalize(raw_start) or today
    end = normalize(raw_end) or today
    monthly_rate = _f(item.get('price'))
    totals = compute_lease_totals(monthly_rate, start, end)
    breakdown = prorated_breakdown(monthly_rate, start, end)
    duration_days = int(_f(quotation.get('duration_days')))
    company_name = company.get('name') or ''
    site_name = item.get('name') or 'Site Name'
    return {
        'document_date': today,
        'title': f"{site_name} - Quotation",
        'reference': f"RFQ. No. {quotation.get('quotation_number') or ''}",
        'quotation_number': quotation.get('quotation_number') or '',
        'client_name': quotation.get('client_name') or 'Client Name',
        'client_designation': quotation.get('client_designation') or 'Position',
        'client_company_name': quotation.get('client_company_name') or 'COMPANY NAME',
        'site_name': site_name,
        'site_type': item.get('type') or 'Rental',
        'site_size': _size_label(item),
        'duration_days': duration_days,
        'duration_label': format_duration(duration_days),
        'contract_period': format_contract_period(raw_start, raw_end),
        'proposal_to': quotation.get('client_company_name') or 'CLIENT COMPANY NAME',
        'monthly_rate': monthly_rate,
        'total_lease': totals['total_lease'],
        'vat': totals['vat'],
        'grand_total': totals['grand_total'],
        'breakdown': breakdown,
        'notes': _labelled('Note:', item.get('site_notes')),
        'price_notes': _labelled('Note:', item.get('price_notes')),
        'salutation': _salutation(quotation, template),
        'greeting': template.get('greeting') or (
            f"Good Day! Thank you for considering {company_name or 'our company'} for your business needs."
        ),
        'terms': list(template.get('terms_and_conditions') or DEFAULT_TERMS),
        'closing_message': template.get('closing_message') or '',
        'signature_name': quotation.get('signature_name') or 'AIX Xymbiosis',
        'signature_position': quotation.get('signature_position') or 'Account Manager',
        'conforme_designation': quotation.get('client_designation') or 'Client Designation',
        'company_name': company_name or 'Company Name',
        'company_address': format_company_address(company),
        'company_phone': company.get('phone') or 'N/A',
        'company_email': company.get('email') or 'N/A',
    }


def quotation_filename(quotation: Dict[str, Any]) -> str:
    stem = quotation.get('quotation_number') or quotation.get('id') or 'quotation'
    return f"{stem}.pdf"


def breakdown_records(df) -> List[Dict[str, Any]]:
    """Breakdown DataFrame as plain records (for JSON and Dash tables)."""
    if df.empty:
        return []
    return json.loads(df.to_json(orient="records"))


# ------------------ Cost estimates ------------------ #
RENTAL_CATEGORY = 'Billboard Rental'
DEFAULT_PRINT_PARTNER = 'Golden Touch Imaging Specialist'

COST_ESTIMATE_TERMS = [
    "Cost Estimate validity: 5 working days.",
    "Availability of the site is on first-come-first-served-basis only. Only official documents such as "
    "P.O's, Media Orders, signed cost estimate, & contracts are accepted in order to booked the site.",
    "To book the site, one (1) month advance and one (2) months security deposit payment dated 7 days "
    "before the start of rental is required.",
    "Final artwork should be approved ten (10) days before the contract period",
    "Print is exclusively for {company_name} Only.",
]


def _is_rental(item: Dict[str, Any]) -> bool:
    return RENTAL_CATEGORY in str(item.get('category') or '')


def group_line_items_by_site(line_items: List[Dict[str, Any]]) -> Dict[str, List[Dict[str, Any]]]:
    """Group cost-estimate line items under the rental they belong to.

    Each rental item starts a group keyed by its description; items whose id
    embeds the rental id (``<rental id>_production`` and similar) join it.
    Without any rental item everything lands in a single "Single Site" group.
    """
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for item in line_items:
        if not _is_rental(item):
            continue
        site_id = str(item.get('id') or '')
        group = groups.setdefault(item.get('description') or 'Site', [])
        group.append(item)
        if site_id:
            group.extend(
                other for other in line_items
                if other is not item and site_id in str(other.get('id') or '') and other.get('id') != site_id
            )
    if not groups:
        groups['Single Site'] = list(line_items)
    return groups


def build_cost_estimate_summary(
    cost_estimate: Dict[str, Any],
    company: Optional[Dict[str, Any]] = None,
    *,
    prepared_by: Optional[Dict[str, Any]] = None,
    today: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Collect every value a cost-estimate document renders.

    The lease rate is the ``unitPrice`` of the primary site's rental line item
    (0 without one) and is prorated over the contract dates exactly like a
    quotation. The duration label is measured in calendar months.
    """
    company = company or {}
    prepared_by = prepared_by or {}
    today = today or datetime.now()
    line_items = [i for i in (cost_estimate.get('lineItems') or []) if isinstance(i, dict)]
    groups = group_line_items_by_site(line_items)
    sites = list(groups)
    primary_site = sites[0]
    rental = next((i for i in groups[primary_site] if _is_rental(i)), {})
    client = cost_estimate.get('client') or {}
    items = cost_estimate.get('items') or {}
    template = cost_estimate.get('template') or {}

    raw_start, raw_end = contract_dates(cost_estimate)
    start = normalize(raw_start) or today
    end = normalize(raw_end) or today
    monthly_rate = _f(rental.get('unitPrice'))
    totals = compute_lease_totals(monthly_rate, start, end)
    duration_days = int(_f(cost_estimate.get('durationDays')))
    number = cost_estimate.get('costEstimateNumber') or ''
    # the greeting and the print/signature lines read different company fields
    print_partner = company.get('company_name') or DEFAULT_PRINT_PARTNER
    preparer = ' '.join(p for p in (prepared_by.get('first_name'), prepared_by.get('last_name')) if p)
    if len(sites) > 1:
        title = f"Cost Estimate for {primary_site}"
    else:
        title = cost_estimate.get('title') or 'Cost Estimate'
    surname = (client.get('name') or '').split()
    return {
        'document_date': today,
        'title': title,
        'reference': f"CE. No. {number}",
        'cost_estimate_number': number,
        'client_name': client.get('name') or 'Client Name',
        'client_designation': client.get('designation') or 'Position',
        'client_company_name': client.get('company') or 'COMPANY NAME',
        'sites': sites,
        'site_name': primary_site,
        'site_type': rental.get('content_type') or 'Rental',
        'site_size': _size_label(rental),
        'duration_days': duration_days,
        'duration_label': format_calendar_duration(duration_days, raw_start, raw_end),
        'contract_period': format_contract_period(raw_start, raw_end),
        'proposal_to': client.get('company') or 'CLIENT COMPANY NAME',
        'monthly_rate': monthly_rate,
        'line_item_subtotal': sum(_f(i.get('total')) for i in line_items),
        'total_lease': totals['total_lease'],
        'vat': totals['vat'],
        'grand_total': totals['grand_total'],
        'breakdown': prorated_breakdown(monthly_rate, start, end),
        'notes': _labelled('Site Notes:', items.get('site_notes')) + _labelled('Note:', cost_estimate.get('notes')),
        'price_notes': _labelled('Price Notes:', items.get('price_notes')),
        'salutation': f"Dear {surname[-1] if surname else 'Client'},",
        'greeting': (
            f"Good Day! Thank you for considering {company.get('name') or 'our company'} for your business needs."
        ),
        'terms': [t.format(company_name=print_partner) for t in COST_ESTIMATE_TERMS],
        'closing_message': template.get('closing_message') or '',
        'signature_name': preparer or print_partner,
        'signature_position': cost_estimate.get('signature_position') or 'Account Manager',
        'conforme_designation': None,
        'company_name': company.get('company_name') or 'Company Name',
        'company_address': format_company_address(company),
        'company_phone': company.get('phone') or 'N/A',
        'company_email': company.get('email') or 'N/A',
    }


def cost_estimate_filename(cost_estimate: Dict[str, Any]) -> str:
    stem = cost_estimate.get('costEstimateNumber') or cost_estimate.get('id') or 'cost-estimate'
    return f"{stem}.pdf"
