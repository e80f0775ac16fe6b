"""
Tests for the command line entry point.
"""

import csv
import json

import pytest

from zap_to_json import main


class TestMain:
    """Test main() argument handling and output files."""

    def test_default_json_output(self, report_file):
        assert main([str(report_file)]) == 0
        output = report_file.with_suffix(".json")
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["summary"]["high"] == 2
        assert data["alerts"][0]["name"] == "SQL Injection"
        assert len(data["alerts"][0]["instances"]) == 2

    def test_csv_output(self, report_file, tmp_path):
        output = tmp_path / "alerts.csv"
        main([str(report_file), "-f", "csv", "-o", str(output)])
        with open(output, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        assert rows == [{
            "name": "SQL Injection",
            "risk": "High",
            "confidence": "",
            "cwe": "89",
            "wasc": "19",
            "instances_count": "2",
            "first_url": "http://testphp.example.com/a?id=1",
        }]

    def test_output_dir_uses_site_name(self, report_file, tmp_path):
        out_dir = tmp_path / "JSON"
        main([str(report_file), "--output-dir", str(out_dir), "--compact"])
        output = out_dir / "testphp.example.com.json"
        assert output.exists()
        assert output.read_text(encoding="utf-8").count("\n") == 0

    def test_risk_filter(self, report_file, tmp_path):
        output = tmp_path / "filtered.json"
        main([str(report_file), "-r", "low,info", "-o", str(output)])
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["alerts"] == []
        assert data["summary"]["high"] == 2

    def test_validate(self, report_file, capsys):
        main([str(report_file), "--validate"])
        assert "VALIDATION: PASSED" in capsys.readouterr().out

    def test_missing_file(self, tmp_path):
        with pytest.raises(SystemExit) as exc:
            main([str(tmp_path / "missing.html")])
        assert exc.value.code == 1

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.html"
        path.write_text("", encoding="utf-8")
        with pytest.raises(SystemExit) as exc:
            main([str(path)])
        assert exc.value.code == 1

    def test_invalid_format(self, report_file):
        with pytest.raises(SystemExit) as exc:
            main([str(report_file), "-f", "xml"])
        assert exc.value.code == 2
