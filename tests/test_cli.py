"""Tests for the command-line interface."""

from pathlib import Path

import pytest
import yaml
from typer.testing import CliRunner

from ledgerlens import __version__
from ledgerlens.cli import app

runner = CliRunner()

SNAPSHOT = {
    "transactions": [
        {"date": "2025-04-01", "amount": 100, "type": "expense", "category_id": "groceries"},
        {"date": "2025-04-02", "amount": 500, "type": "income", "category_id": "salary"},
    ],
    "categories": [{"id": "groceries", "name": "Groceries"}, {"id": "salary", "name": "Salary"}],
    "accounts": [
        {"id": "chk", "name": "Checking", "balance": 1500, "type": "checking"},
        {"id": "cc", "name": "Card", "balance": -300, "type": "credit"},
    ],
    "balance_history": [{"account_id": "chk", "as_of": "2025-04-01", "balance": 1000}],
    "budgets": [
        {
            "name": "April",
            "start_date": "2025-04-01",
            "end_date": "2025-04-30",
            "categories": [{"category_id": "groceries", "allocated": 80}],
        }
    ],
    "goals": [
        {
            "name": "Emergency Fund",
            "target_amount": 1000,
            "current_amount": 400,
            "start_date": "2025-01-01",
            "target_date": "2025-12-31",
        }
    ],
    "period_start": "2025-04-01",
    "period_end": "2025-04-30",
}


@pytest.fixture
def data_file(tmp_path: Path) -> str:
    path = tmp_path / "snapshot.yaml"
    path.write_text(yaml.dump(SNAPSHOT))
    return str(path)


class TestCli:
    def test_version(self) -> None:
        """Test --version output."""
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_summary(self, data_file: str) -> None:
        """Test the summary command."""
        result = runner.invoke(app, ["summary", "--data", data_file])
        assert result.exit_code == 0
        assert "Total Income" in result.output
        assert "$500.00" in result.output
        assert "80.0%" in result.output
        assert "Groceries" in result.output

    def test_networth(self, data_file: str) -> None:
        """Test the networth command."""
        result = runner.invoke(app, ["networth", "--data", data_file])
        assert result.exit_code == 0
        assert "$1,200.00" in result.output

    def test_budget(self, data_file: str) -> None:
        """Test the budget command."""
        result = runner.invoke(app, ["budget", "--data", data_file, "--today", "2025-04-15"])
        assert result.exit_code == 0
        assert "Groceries" in result.output
        assert "over" in result.output

    def test_goals(self, data_file: str) -> None:
        """Test the goals command."""
        result = runner.invoke(app, ["goals", "--data", data_file, "--today", "2025-07-01"])
        assert result.exit_code == 0
        assert "Emergency" in result.output
        assert "behind" in result.output

    def test_export(self, data_file: str, tmp_path: Path) -> None:
        """Test exporting a report as JSON."""
        out = tmp_path / "out"
        result = runner.invoke(
            app,
            ["export", "--data", data_file, "--type", "net_worth", "--format", "json", "--output-dir", str(out)],
        )
        assert result.exit_code == 0
        files = list(out.glob("ledgerlens-net_worth-report-*.json"))
        assert len(files) == 1

    def test_dashboard(self, data_file: str) -> None:
        """Test the dashboard command."""
        result = runner.invoke(app, ["dashboard", "--data", data_file, "--today", "2025-04-20"])
        assert result.exit_code == 0
        assert "Net Worth" in result.output
        assert "$1,200.00" in result.output
        assert "Emergency" in result.output

    def test_export_accounts(self, data_file: str, tmp_path: Path) -> None:
        """Test exporting the account summary as CSV."""
        out = tmp_path / "out"
        result = runner.invoke(app, ["export", "--data", data_file, "--type", "accounts", "--output-dir", str(out)])
        assert result.exit_code == 0
        files = list(out.glob("ledgerlens-accounts-report-*.csv"))
        assert len(files) == 1
        assert "Checking" in files[0].read_text(encoding="utf-8")

    def test_missing_data_file(self, tmp_path: Path) -> None:
        """Test a missing data file exits with an error."""
        result = runner.invoke(app, ["summary", "--data", str(tmp_path / "missing.yaml")])
        assert result.exit_code == 1
        assert "Error" in result.output

    def test_bad_date(self, data_file: str) -> None:
        """Test a malformed date is rejected."""
        result = runner.invoke(app, ["budget", "--data", data_file, "--today", "15/04/2025"])
        assert result.exit_code != 0
