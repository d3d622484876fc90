# tests/test_cli.py
import json
from pathlib import Path

from click.testing import CliRunner

from emi_calc.main import cli

LOAN = ["-a", "500000", "-r", "9", "-t", "1", "-s", "2025-01"]


def test_schedule_prints_summary_and_rows():
    result = CliRunner().invoke(cli, ["schedule", *LOAN])
    assert result.exit_code == 0, result.output
    assert "₹43,726" in result.output
    assert "Jan, 2025" in result.output
    assert "Dec, 2025" in result.output


def test_schedule_grouped_by_financial_year():
    result = CliRunner().invoke(cli, ["schedule", *LOAN, "--group", "financial"])
    assert result.exit_code == 0, result.output
    assert "FY 2024-25" in result.output
    assert "FY 2025-26" in result.output


def test_schedule_with_part_payment_reports_months_saved():
    result = CliRunner().invoke(cli, ["schedule", *LOAN, "--mode", "tenure", "--part-payment", "0:2l"])
    assert result.exit_code == 0, result.output
    assert "Months saved" in result.output


def test_schedule_exports(tmp_path):
    runner = CliRunner()
    for name in ("out.json", "out.csv", "out.xlsx"):
        target = tmp_path / name
        result = runner.invoke(cli, ["schedule", *LOAN, "--emi-increase", "3:50%", "--output", str(target)])
        assert result.exit_code == 0, result.output
        assert target.exists()
    data = json.loads(Path(tmp_path / "out.json").read_text(encoding="utf-8"))
    assert len(data["schedule"]) < 12


def test_unsupported_output_format(tmp_path):
    result = CliRunner().invoke(cli, ["schedule", *LOAN, "--output", str(tmp_path / "out.pdf")])
    assert result.exit_code == 2


def test_bad_part_payment_is_usage_error():
    result = CliRunner().invoke(cli, ["schedule", *LOAN, "--part-payment", "soon:100"])
    assert result.exit_code == 2
    assert "Invalid month index" in result.output


def test_bad_start_date_is_usage_error():
    result = CliRunner().invoke(cli, ["summary", "-a", "500000", "-s", "2025/01"])
    assert result.exit_code == 2


def test_summary_uses_loan_type_defaults():
    result = CliRunner().invoke(cli, ["summary", "--loan-type", "personal"])
    assert result.exit_code == 0, result.output
    assert "₹10,00,000" in result.output


def test_compare_lists_both_strategies():
    result = CliRunner().invoke(cli, ["compare", *LOAN, "--part-payment", "0:200000"])
    assert result.exit_code == 0, result.output
    assert "Months saved" in result.output
    rows = {line.split()[0]: line.split() for line in result.output.splitlines() if line.startswith("reduce-")}
    assert rows["reduce-tenure"][-1] == "4"
    assert rows["reduce-emi"][-1] == "0"


def test_compare_has_no_mode_option():
    result = CliRunner().invoke(cli, ["compare", *LOAN, "--mode", "tenure"])
    assert result.exit_code != 0
    assert "No such option" in result.output


def test_types_lists_presets():
    result = CliRunner().invoke(cli, ["types"])
    assert result.exit_code == 0
    for name in ("home", "personal", "car"):
        assert name in result.output
