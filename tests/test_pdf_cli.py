import json
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).parent.parent / 'scripts'))
from quotation_pdf_cli import main


def test_cli_writes_sample_pdf(tmp_path):
    out = tmp_path / 'q.pdf'
    diag = main(['--out', str(out), '--no-logo'])
    assert out.read_bytes().startswith(b'%PDF')
    assert diag['breakdown_rows'] == 2


def test_cli_reads_quotation_json(tmp_path, sample_quotation):
    qfile = tmp_path / 'q.json'
    qfile.write_text(json.dumps(sample_quotation), encoding='utf-8')
    out = tmp_path / 'q.pdf'
    diag = main(['--out', str(out), '--quotation-json', str(qfile)])
    assert diag['filename'] == 'QT-2024-0042.pdf'


def test_cli_rejects_bad_json(tmp_path):
    bad = tmp_path / 'bad.json'
    bad.write_text('[1, 2]', encoding='utf-8')
    with pytest.raises(SystemExit):
        main(['--out', str(tmp_path / 'x.pdf'), '--quotation-json', str(bad)])
    with pytest.raises(SystemExit):
        main(['--out', str(tmp_path / 'x.pdf'), '--company-json', str(tmp_path / 'missing.json')])
