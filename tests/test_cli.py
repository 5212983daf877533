"""Tests for the command-line interface."""

import csv
import json
from pathlib import Path

import pytest

from finpal_extractor.cli import get_log_level, main, validate_output_path

GPAY_CSV = "Date,Description,Amount\n15/01/2024,Zomato Order,-450\n16/01/2024,Received from Anita,1200\n"


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run each test from an empty directory holding a GPay export."""
    monkeypatch.chdir(tmp_path)
    (tmp_path / "gpay.csv").write_text(GPAY_CSV, encoding="utf-8")
    return tmp_path


class TestHelpers:
    """Tests for CLI helper functions."""

    def test_get_log_level(self) -> None:
        """Test verbosity mapping."""
        assert get_log_level(0) == "WARNING"
        assert get_log_level(1) == "INFO"
        assert get_log_level(3) == "DEBUG"

    def test_validate_output_path(self, tmp_path: Path) -> None:
        """Test that output stays inside the base directory."""
        assert validate_output_path(Path("out/x.json"), tmp_path) == (tmp_path / "out/x.json").resolve()
        with pytest.raises(ValueError, match="escapes"):
            validate_output_path(Path("../x.json"), tmp_path)


class TestMain:
    """Tests for main()."""

    def test_json_to_stdout(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a single file prints its result object as JSON."""
        assert main(["gpay.csv", "--no-ai"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert data["fileName"] == "gpay.csv"
        assert data["source"] == "GPay"
        assert data["confidence"] == "High"
        first = data["transactions"][0]
        assert first["date"] == "2024-01-15"
        assert first["amount"] == 450.0
        assert first["type"] == "debit"
        assert first["category"] == "Food & Dining"
        assert data["summary"]["totalCredits"] == 1200.0

    def test_output_files(self, workdir: Path) -> None:
        """Test JSON and CSV files are written."""
        exit_code = main([
            "gpay.csv", "--no-ai",
            "-o", "out/result.json",
            "--csv", "out/transactions.csv",
            "--category-csv", "out/categories.csv",
        ])

        assert exit_code == 0
        data = json.loads((workdir / "out/result.json").read_text(encoding="utf-8"))
        assert len(data["transactions"]) == 2

        with open(workdir / "out/transactions.csv", encoding="utf-8", newline="") as f:
            rows = list(csv.reader(f))
        assert rows[0][:3] == ["File", "Date", "Description"]
        assert rows[1][0] == "gpay.csv"
        assert len(rows) == 3

        with open(workdir / "out/categories.csv", encoding="utf-8", newline="") as f:
            category_rows = list(csv.reader(f))
        assert category_rows == [["Category", "Debit Total"], ["Food & Dining", "450.00"]]

    def test_input_dir_envelope(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test several files produce a results envelope."""
        statements = workdir / "statements"
        statements.mkdir()
        (statements / "a_gpay.csv").write_text(GPAY_CSV, encoding="utf-8")
        (statements / "b_gpay.csv").write_text(GPAY_CSV, encoding="utf-8")

        assert main(["-i", "statements", "--no-ai"]) == 0

        data = json.loads(capsys.readouterr().out)
        assert [r["fileName"] for r in data["results"]] == ["a_gpay.csv", "b_gpay.csv"]
        assert data["errors"] == {}

    def test_missing_file(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that a missing file is reported and fails the run."""
        assert main(["gpay.csv", "missing.csv", "--no-ai"]) == 1

        data = json.loads(capsys.readouterr().out)
        assert len(data["results"]) == 1
        assert "missing.csv" in data["errors"]

    def test_unsupported_file(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test that unsupported types are rejected per file."""
        (workdir / "notes.docx").write_text("hello", encoding="utf-8")

        assert main(["notes.docx", "--no-ai"]) == 1

        data = json.loads(capsys.readouterr().out)
        assert data["results"] == []
        assert "Unsupported file type" in data["errors"]["notes.docx"]

    def test_no_files(self, workdir: Path) -> None:
        """Test that running without input fails."""
        assert main(["--no-ai"]) == 1

    def test_bad_input_dir(self, workdir: Path) -> None:
        """Test that --input-dir must be a directory."""
        assert main(["-i", "gpay.csv", "--no-ai"]) == 1

    def test_output_path_escape(self, workdir: Path) -> None:
        """Test that output outside the working directory is refused."""
        assert main(["gpay.csv", "--no-ai", "-o", "../escape.json"]) == 1

    def test_invalid_config(self, workdir: Path) -> None:
        """Test that a broken settings file stops the run."""
        config_dir = workdir / "config"
        config_dir.mkdir()
        (config_dir / "settings.yaml").write_text("ai: yes\n", encoding="utf-8")

        assert main(["gpay.csv", "--no-ai"]) == 1

    def test_validate_only(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test configuration validation with defaults."""
        assert main(["--validate-only"]) == 0
        assert "Configuration is valid" in capsys.readouterr().out

    def test_inspect(self, workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
        """Test the inspection report."""
        assert main(["--inspect", "gpay.csv"]) == 0

        out = capsys.readouterr().out
        assert "gpay.csv" in out
        assert "Date pattern: yes" in out
