import json
from unittest.mock import AsyncMock

import pytest
from typer.testing import CliRunner

from lvs import __version__
from lvs.cli import app
from lvs.utils import schema

runner = CliRunner()


@pytest.fixture(autouse=True)
def quiet_logging(mocker):
    return mocker.patch("lvs.cli.logging_config.setup_logging")


@pytest.fixture
def vulnerable_result(tmp_path):
    return schema.AggregateResult(
        target=str(tmp_path),
        reports=[
            schema.ScanReport(
                root=str(tmp_path / "web"),
                scanner=schema.Ecosystem.NPM,
                amount=1,
                vulnerabilities=[
                    schema.NpmVulnerability(
                        root=str(tmp_path / "web"),
                        name="lodash",
                        version="<4.17.12",
                        score=9.1,
                        cwe=["CWE-1321"],
                        fix_available=True,
                    )
                ],
            )
        ],
    )


@pytest.fixture
def mock_run_scan(mocker, vulnerable_result):
    return mocker.patch("lvs.cli.run_scan", new=AsyncMock(return_value=vulnerable_result))


def test_version():
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert f"lvs version {__version__}" in result.output


def test_scan_missing_path(tmp_path, mock_run_scan):
    result = runner.invoke(app, ["scan", str(tmp_path / "nope")])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    mock_run_scan.assert_not_awaited()


def test_scan_json_to_file(tmp_path, mock_run_scan):
    output = tmp_path / "results.json"

    result = runner.invoke(app, ["scan", str(tmp_path), "--json", "-o", str(output)])

    assert result.exit_code == 0
    assert "Results saved to" in result.output
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["reports"][0]["vulnerabilities"][0]["name"] == "lodash"


def test_scan_pretty_to_file(tmp_path, mock_run_scan):
    output = tmp_path / "results.txt"

    result = runner.invoke(app, ["scan", str(tmp_path), "-o", str(output)])

    assert result.exit_code == 0
    assert "Pretty results saved to" in result.output
    text = output.read_text(encoding="utf-8")
    assert "⚡ lodash <4.17.12 (score: 9.1)" in text
    assert "CWE-1321 - Prototype Pollution" in text
    assert f"Fix: cd {tmp_path / 'web'} && npm audit fix lodash" in text


def test_scan_pretty_to_terminal(tmp_path, mock_run_scan):
    result = runner.invoke(app, ["scan", str(tmp_path)])

    assert result.exit_code == 0
    assert "⚡ lodash" in result.output


def test_scan_passes_options_to_config(tmp_path, mock_run_scan):
    result = runner.invoke(
        app,
        ["scan", str(tmp_path), "-e", "pypi", "--concurrency", "1", "--timeout", "5"],
    )

    assert result.exit_code == 0
    config = mock_run_scan.await_args.args[0]
    assert config.root_path == tmp_path.resolve()
    assert config.ecosystems == [schema.Ecosystem.PYPI]
    assert config.concurrency == 1
    assert config.request_timeout == 5.0


def test_scan_without_vulnerabilities(tmp_path, mocker):
    mocker.patch(
        "lvs.cli.run_scan",
        new=AsyncMock(return_value=schema.AggregateResult(target=str(tmp_path))),
    )

    result = runner.invoke(app, ["scan", str(tmp_path), "--json"])

    assert result.exit_code == 0
    assert f"No vulnerabilities found in {tmp_path}!" in result.output


def test_scan_uses_config_file(tmp_path, mock_run_scan):
    (tmp_path / ".lvs.yml").write_text("format: json\necosystems: [npm]\nconcurrency: 2\n")
    output = tmp_path / "results.out"

    result = runner.invoke(app, ["scan", str(tmp_path), "-o", str(output), "--concurrency", "4"])

    assert result.exit_code == 0
    config = mock_run_scan.await_args.args[0]
    assert config.output_format == schema.OutputFormat.JSON
    assert config.ecosystems == [schema.Ecosystem.NPM]
    assert config.concurrency == 4
    json.loads(output.read_text(encoding="utf-8"))


def test_scan_invalid_config_file(tmp_path, mock_run_scan):
    config_path = tmp_path / "custom.yml"
    config_path.write_text("concurrency: lots\n")

    result = runner.invoke(app, ["scan", str(tmp_path), "-c", str(config_path)])

    assert result.exit_code == 1
    assert "Invalid configuration" in result.output
    mock_run_scan.assert_not_awaited()


def test_scan_unexpected_error(tmp_path, mocker):
    mocker.patch("lvs.cli.run_scan", new=AsyncMock(side_effect=RuntimeError("boom")))

    result = runner.invoke(app, ["scan", str(tmp_path)])

    assert result.exit_code == 1
    assert "Error running scan" in result.output


def test_init_creates_config(tmp_path):
    result = runner.invoke(app, ["init", str(tmp_path)])

    assert result.exit_code == 0
    assert (tmp_path / ".lvs.yml").exists()
    assert "[tool.lvs]" in result.output


def test_init_refuses_to_overwrite(tmp_path):
    (tmp_path / ".lvs.yml").write_text("format: json\n")

    result = runner.invoke(app, ["init", str(tmp_path)])

    assert result.exit_code == 1
    assert (tmp_path / ".lvs.yml").read_text() == "format: json\n"

    result = runner.invoke(app, ["init", str(tmp_path), "--force"])

    assert result.exit_code == 0
    assert "concurrency: 8" in (tmp_path / ".lvs.yml").read_text()


def test_scan_config_output_is_relative_to_config_file(tmp_path, mock_run_scan, monkeypatch):
    project = tmp_path / "project"
    project.mkdir()
    (project / ".lvs.yml").write_text("format: json\noutput: reports/lvs.json\n")
    (project / "reports").mkdir()
    elsewhere = tmp_path / "elsewhere"
    elsewhere.mkdir()
    monkeypatch.chdir(elsewhere)

    result = runner.invoke(app, ["scan", str(project)])

    assert result.exit_code == 0
    config = mock_run_scan.await_args.args[0]
    assert config.output_file == (project / "reports" / "lvs.json").resolve()
    assert (project / "reports" / "lvs.json").exists()
    assert not (elsewhere / "reports").exists()


def test_scan_log_file_option(tmp_path, mock_run_scan, quiet_logging):
    log_file = tmp_path / "lvs.log"

    result = runner.invoke(app, ["scan", str(tmp_path), "--log-file", str(log_file), "-V"])

    assert result.exit_code == 0
    quiet_logging.assert_called_once_with(level="DEBUG", log_file=log_file)
