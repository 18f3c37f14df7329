"""Tests for the render_document CLI."""

import json

import pytest

import core.print_engine as print_engine
from scripts.render_document import main


@pytest.fixture
def cli_engine(monkeypatch, test_settings):
    """Point the CLI at a temp storage root."""
    real = print_engine.DocumentEngine
    monkeypatch.setattr(print_engine, "DocumentEngine", lambda: real(settings=test_settings))
    return test_settings


@pytest.fixture
def record_file(tmp_path, record_data):
    def _write(kind, data=None):
        path = tmp_path / f"{kind.value}.json"
        path.write_text(json.dumps(data if data is not None else record_data[kind]()), encoding="utf-8")
        return path
    return _write


class TestRenderDocumentCli:

    def test_prints_locator(self, cli_engine, record_file, capsys):
        path = record_file(print_engine.DocumentKind.INVOICE)

        assert main(["invoice", str(path), "--copy", "duplicate"]) == 0

        out = capsys.readouterr().out.strip()
        assert out.startswith("http://localhost:5000/uploads/invoices/invoice_INV-0042_A4_DUPLICATE_")
        assert out.endswith(".pdf")

    def test_output_file(self, cli_engine, record_file, tmp_path, capsys):
        path = record_file(print_engine.DocumentKind.JOB_SHEET)
        target = tmp_path / "out.pdf"

        assert main(["jobsheet", str(path), "--format", "thermal", "--output", str(target)]) == 0

        assert target.read_bytes().startswith(b"%PDF")
        assert "1 page(s)" in capsys.readouterr().out

    def test_missing_record(self, cli_engine, tmp_path, capsys):
        assert main(["estimate", str(tmp_path / "nope.json")]) == 2
        assert "Cannot read record" in capsys.readouterr().err

    def test_invalid_record(self, cli_engine, record_file, capsys):
        path = record_file(print_engine.DocumentKind.ESTIMATE, {"estimateNumber": 7})
        assert main(["estimate", str(path)]) == 2
        assert "Invalid estimate record" in capsys.readouterr().err

    def test_wrong_copy_type(self, cli_engine, record_file, capsys):
        path = record_file(print_engine.DocumentKind.INVOICE)
        assert main(["invoice", str(path), "--copy", "office"]) == 1
        assert "Error:" in capsys.readouterr().err

    def test_unwritable_output(self, cli_engine, record_file, tmp_path, capsys):
        path = record_file(print_engine.DocumentKind.INVOICE)
        target = tmp_path / "missing-dir" / "out.pdf"

        assert main(["invoice", str(path), "--output", str(target)]) == 1
        assert "Error: cannot write" in capsys.readouterr().err
        assert not target.exists()
