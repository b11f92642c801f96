"""
OH Plus Quotation Billing
Dash front end for the lease calculator plus the JSON/PDF endpoints used by
the quotation screens.
"""

import json
import socket
from datetime import datetime

import dash
from dash import html, dcc, Input, Output, State, dash_table
import dash_bootstrap_components as dbc
from dash.exceptions import PreventUpdate
from flask import jsonify, make_response, request

from config import APP_HOST, APP_PORT, DASH_DEBUG, CURRENCY  # type: ignore
from billing.calculations import (
    BREAKDOWN_COLUMNS, calculate_quotation_total, compute_lease_totals, format_amount,
    format_duration, duration_days_between, prorated_breakdown,
)
from billing.dates import format_contract_period, normalize
from billing.pdf_export import build_download_dict, generate_cost_estimate_pdf, generate_quotation_pdf
from billing.quotation_core import breakdown_records

app = dash.Dash(__name__, external_stylesheets=[dbc.themes.BOOTSTRAP], suppress_callback_exceptions=True)
app.title = 'OH Plus Quotation Calculator'
server = app.server

_BREAKDOWN_LABELS = {
    'year': 'Year', 'month': 'Month', 'days_in_month': 'Days in month',
    'start_day': 'From', 'end_day': 'To', 'days_counted': 'Days billed',
    'daily_rate': 'Daily rate', 'amount': 'Amount',
}


def _stat_card(label, value_id):
    return dbc.Col(dbc.Card(dbc.CardBody([
        html.Div(label, className='text-muted small'),
        html.H5(id=value_id, className='mb-0'),
    ])), md=3)


app.layout = dbc.Container([
    html.H3('Quotation Lease Calculator', className='my-3'),
    dbc.Row([
        dbc.Col([
            dbc.Label('Site name'),
            dbc.Input(id='calc-site-name', type='text', placeholder='Site Name'),
        ], md=4),
        dbc.Col([
            dbc.Label(f'Lease rate per month ({CURRENCY}, exclusive of VAT)'),
            dbc.Input(id='calc-monthly-rate', type='number', min=0, step=0.01, value=0),
        ], md=4),
        dbc.Col([
            dbc.Label('Contract period'),
            html.Br(),
            dcc.DatePickerRange(id='calc-period', display_format='MMM D, YYYY'),
        ], md=4),
    ], className='mb-3'),
    dbc.Row([
        _stat_card('Contract duration', 'calc-duration'),
        _stat_card('Total lease', 'calc-total-lease'),
        _stat_card('Add: VAT', 'calc-vat'),
        _stat_card('Total', 'calc-grand-total'),
    ], className='mb-3'),
    html.Div(id='calc-period-label', className='text-muted mb-2'),
    dash_table.DataTable(
        id='calc-breakdown',
        columns=[{'name': _BREAKDOWN_LABELS[c], 'id': c} for c in BREAKDOWN_COLUMNS],
        data=[],
        style_table={'overflowX': 'auto'},
        style_cell={'fontSize': 13, 'padding': '4px'},
    ),
    dbc.Button('Download quotation PDF', id='calc-download-btn', color='primary', className='mt-3'),
    dcc.Download(id='calc-download'),
    html.Div(id='calc-status', className='mt-2'),
], fluid=True)


@app.callback(
    Output('calc-duration', 'children'),
    Output('calc-total-lease', 'children'),
    Output('calc-vat', 'children'),
    Output('calc-grand-total', 'children'),
    Output('calc-period-label', 'children'),
    Output('calc-breakdown', 'data'),
    Input('calc-monthly-rate', 'value'),
    Input('calc-period', 'start_date'),
    Input('calc-period', 'end_date'),
)
def update_calculator(monthly_rate, start_date, end_date):
    start, end = normalize(start_date), normalize(end_date)
    if start is None or end is None:
        empty = format_amount(0, CURRENCY)
        return format_duration(0), empty, empty, empty, 'Select a contract period', []
    rate = float(monthly_rate or 0)
    totals = compute_lease_totals(rate, start, end)
    days = duration_days_between(start, end)
    rows = breakdown_records(prorated_breakdown(rate, start, end))
    for r in rows:
        r['daily_rate'] = format_amount(r['daily_rate'], CURRENCY)
        r['amount'] = format_amount(r['amount'], CURRENCY)
    return (
        format_duration(days),
        format_amount(totals['total_lease'], CURRENCY),
        format_amount(totals['vat'], CURRENCY),
        format_amount(totals['grand_total'], CURRENCY),
        format_contract_period(start, end),
        rows,
    )


@app.callback(
    Output('calc-download', 'data'),
    Output('calc-status', 'children'),
    Input('calc-download-btn', 'n_clicks'),
    State('calc-site-name', 'value'),
    State('calc-monthly-rate', 'value'),
    State('calc-period', 'start_date'),
    State('calc-period', 'end_date'),
    prevent_initial_call=True,
)
def download_quotation(n_clicks, site_name, monthly_rate, start_date, end_date):
    if not n_clicks:
        raise PreventUpdate
    if not (start_date and end_date):
        return dash.no_update, dbc.Alert('Contract period required', color='danger')
    quotation = {
        'quotation_number': f"QT-{datetime.now().strftime('%Y%m%d%H%M%S')}",
        'start_date': start_date,
        'end_date': end_date,
        'duration_days': duration_days_between(start_date, end_date),
        'items': {'name': site_name or 'Site Name', 'price': float(monthly_rate or 0)},
    }
    try:
        pdf_bytes, diag = generate_quotation_pdf(quotation)
    except Exception as e:
        print(f"[calc][pdf][error] {e}")
        return dash.no_update, dbc.Alert(f'Error: {e}', color='danger')
    print(f"[calc][pdf][diag] size={diag['size']} sha1={diag['sha1'][:10]} eof={diag['eof_present']}")
    return build_download_dict(pdf_bytes, diag['filename']), None


# ------------------ Quotation API ------------------ #
@server.route('/api/generate-quotation-pdf', methods=['POST'])
def api_generate_quotation_pdf():
    try:
        payload = request.get_json(force=True) or {}
        quotation = payload.get('quotation') or {}
        company = payload.get('companyData')
        logo = payload.get('logoDataUrl')
        print(f"[api][pdf] quotation={quotation.get('quotation_number') or quotation.get('id')} logo={bool(logo)}")
        pdf_bytes, diag = generate_quotation_pdf(quotation, company, logo)
        resp = make_response(pdf_bytes)
        resp.headers['Content-Type'] = 'application/pdf'
        resp.headers['Content-Disposition'] = f'attachment; filename="{diag["filename"]}"'
        return resp
    except Exception as e:
        print(f"[api][pdf][error] {e}")
        return jsonify({'error': 'Failed to generate PDF'}), 500


@server.route('/api/generate-cost-estimate-pdf', methods=['POST'])
def api_generate_cost_estimate_pdf():
    try:
        payload = request.get_json(force=True) or {}
        cost_estimate = payload.get('costEstimate') or {}
        company = payload.get('companyData')
        logo = payload.get('logoDataUrl')
        print(f"[api][ce-pdf] cost_estimate={cost_estimate.get('costEstimateNumber') or cost_estimate.get('id')} "
              f"logo={bool(logo)}")
        pdf_bytes, diag = generate_cost_estimate_pdf(cost_estimate, company, logo, prepared_by=payload.get('userData'))
        resp = make_response(pdf_bytes)
        resp.headers['Content-Type'] = 'application/pdf'
        resp.headers['Content-Disposition'] = f'inline; filename="{diag["filename"]}"'
        resp.headers['Cache-Control'] = 'no-store'
        return resp
    except Exception as e:
        print(f"[api][ce-pdf][error] {e}")
        return jsonify({'error': 'Failed to generate PDF'}), 500


@server.route('/api/quotations/calculate', methods=['POST'])
def api_calculate_quotation():
    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        return jsonify({'error': 'JSON object body required'}), 400
    start, end = payload.get('start_date'), payload.get('end_date')
    items = payload.get('items') or []
    if not isinstance(items, list) or not all(isinstance(i, dict) for i in items):
        return jsonify({'error': 'items must be a list of objects'}), 400
    result = calculate_quotation_total(start, end, items)
    s, e = normalize(start), normalize(end)
    prorated = []
    if s is not None and e is not None:
        for item in result['items']:
            try:
                rate = float(item.get('price') or 0)
            except (TypeError, ValueError):
                return jsonify({'error': f"invalid price for item {item.get('id')}"}), 400
            totals = compute_lease_totals(rate, s, e)
            prorated.append({'id': item.get('id'), 'name': item.get('name'), **totals})
    result['prorated'] = prorated
    result['duration_label'] = format_duration(result['duration_days'])
    return jsonify(json.loads(json.dumps(result, default=str)))


# ------------------ Health Endpoint ------------------ #
@server.route('/health')
def health():
    return {"status": "ok"}


# ------------------ Port Selection Helper ------------------ #
def find_free_port(preferred: int) -> int:
    port = preferred
    for _ in range(15):
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            try:
                s.bind(('127.0.0.1', port))
                return port
            except OSError:
                port += 1
    return preferred  # fallback


if __name__ == "__main__":
    preferred = APP_PORT
    free_port = find_free_port(preferred)
    if free_port != preferred:
        print(f"[startup] Port {preferred} in use, switching to {free_port}")
    print("[startup] Starting Dash server ...")
    print(f"[startup] Open browser at: http://{APP_HOST}:{free_port}")
    app.run(debug=DASH_DEBUG, port=free_port, host=APP_HOST, use_reloader=False)
