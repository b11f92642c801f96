"""CLI helper to generate a quotation PDF outside Dash for diagnostics.

Usage:
  python scripts/quotation_pdf_cli.py --out test_quotation.pdf

Optional arguments:
  --quotation-json quotation.json --company-json company.json --logo logo.png --no-logo

Without --quotation-json a sample LED billboard quotation spanning a month
boundary is rendered.
"""
from __future__ import annotations
import argparse, json
from pathlib import Path
import sys
from pathlib import Path as _Path
# Ensure project root on path when invoked directly
_proj_root = _Path(__file__).resolve().parents[1]
if str(_proj_root) not in sys.path:
    sys.path.insert(0, str(_proj_root))

from billing.pdf_export import generate_quotation_pdf

DEFAULT_QUOTATION = {
    'quotation_number': 'QT-CLI-0001',
    'client_name': 'Juan Dela Cruz',
    'client_designation': 'Marketing Manager',
    'client_company_name': 'Sample Brands Inc.',
    'start_date': '2024-01-25',
    'end_date': '2024-02-05',
    'duration_days': 12,
    'items': {
        'name': 'EDSA Guadalupe LED',
        'type': 'LED Billboard',
        'price': 300000,
        'specs': {'height': 40, 'width': 60},
    },
}

DEFAULT_COMPANY = {
    'name': 'OH Plus Media',
    'address': {'street': '123 Ayala Ave', 'city': 'Makati', 'province': 'Metro Manila'},
    'zip': '1226',
    'phone': '+63 2 8888 0000',
    'email': 'sales@example.com',
}


def _load_json(path_str: str | None, default: dict, label: str) -> dict:
    if not path_str:
        return default
    path = Path(path_str)
    if not path.exists():
        raise SystemExit(f'{label} json not found: {path}')
    data = json.loads(path.read_text(encoding='utf-8'))
    if not isinstance(data, dict):
        raise SystemExit(f'{label}-json must point to a JSON object')
    return data


def main(argv=None):
    ap = argparse.ArgumentParser()
    ap.add_argument('--out', required=True, help='Output PDF path')
    ap.add_argument('--quotation-json', help='Path to JSON file with the quotation record')
    ap.add_argument('--company-json', help='Path to JSON file with the company record')
    ap.add_argument('--logo', help='Logo image path')
    ap.add_argument('--no-logo', action='store_true', help='Skip logo rendering')
    args = ap.parse_args(argv)

    quotation = _load_json(args.quotation_json, DEFAULT_QUOTATION, 'quotation')
    company = _load_json(args.company_json, DEFAULT_COMPANY, 'company')

    pdf_bytes, diag = generate_quotation_pdf(quotation, company, args.logo, disable_logo=args.no_logo)
    out_path = Path(args.out)
    out_path.write_bytes(pdf_bytes)
    print('[pdf-cli] wrote', out_path, 'size=', diag['size'], 'sha1=', diag['sha1'][:12])
    print('[pdf-cli] total lease=', round(diag['total_lease'], 2), 'grand total=', round(diag['grand_total'], 2),
          'months=', diag['breakdown_rows'])
    if not (pdf_bytes.startswith(b'%PDF') and diag['eof_present']):
        print('[pdf-cli][warn] PDF structure validation failed')
    return diag


if __name__ == '__main__':
    main()
