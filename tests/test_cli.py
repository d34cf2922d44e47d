import logging
from datetime import date
from types import SimpleNamespace

import pytest

from onthisday import cli
from onthisday.config import ApiConfig, AppConfig, LoggingConfig
from onthisday.viewer import ViewState


def _ok_result(text="{}"):
    return SimpleNamespace(output_text=text, state=ViewState.LOADED, ok=True)


def test_configure_logging_defaults_to_console_only():
    original_handlers = list(logging.getLogger().handlers)
    for handler in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(handler)

    try:
        cli.configure_logging("INFO")

        handlers = logging.getLogger().handlers
        assert any(isinstance(handler, logging.StreamHandler) for handler in handlers)
        assert not any(isinstance(handler, logging.FileHandler) for handler in handlers)
    finally:
        for handler in logging.getLogger().handlers[:]:
            logging.getLogger().removeHandler(handler)
            handler.close()
        for handler in original_handlers:
            logging.getLogger().addHandler(handler)


def test_configure_logging_with_log_file_creates_file_handler(tmp_path):
    original_handlers = list(logging.getLogger().handlers)
    for handler in logging.getLogger().handlers[:]:
        logging.getLogger().removeHandler(handler)

    try:
        log_path = tmp_path / "logs" / "custom.log"
        cli.configure_logging("DEBUG", str(log_path))

        assert log_path.exists()
        handlers = logging.getLogger().handlers
        assert any(isinstance(handler, logging.FileHandler) for handler in handlers)
    finally:
        for handler in logging.getLogger().handlers[:]:
            logging.getLogger().removeHandler(handler)
            handler.close()
        for handler in original_handlers:
            logging.getLogger().addHandler(handler)


def test_configure_logging_rejects_unknown_level():
    with pytest.raises(ValueError):
        cli.configure_logging("CHATTY")


def test_main_loads_config_and_runs(monkeypatch, capsys):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setenv(cli.API_TOKEN_ENV, "")

    app_config = AppConfig(
        api=ApiConfig(base_url="https://mirror.example.org", timeout=4.0, retries=2),
        date_input="picker",
        output_format="markdown",
    )
    monkeypatch.setattr(cli, "parse_app_config", lambda path: app_config)

    captured = {}

    def fake_execute(config):
        captured["config"] = config
        return _ok_result("rendered")

    monkeypatch.setattr(cli, "execute", fake_execute)

    exit_code = cli.main(["--config", "configs/test.xml", "--date", "1969-07-20", "--story", "2"])

    assert exit_code == 0
    assert capsys.readouterr().out == "rendered\n"
    run_config = captured["config"]
    assert run_config.selected == date(1969, 7, 20)
    assert run_config.output_format == "markdown"
    assert run_config.base_url == "https://mirror.example.org"
    assert run_config.timeout == 4.0
    assert run_config.retries == 2
    assert run_config.story == 2
    assert run_config.api_token is None


def test_main_cli_overrides_config(monkeypatch):
    captured_log_config = {}

    def fake_configure(level, log_file=None):
        captured_log_config["level"] = level
        captured_log_config["file"] = log_file

    monkeypatch.setattr(cli, "configure_logging", fake_configure)
    app_config = AppConfig(
        output_format="text",
        logging=LoggingConfig(level="INFO", file="config.log"),
    )
    monkeypatch.setattr(cli, "parse_app_config", lambda path: app_config)

    captured = {}

    def fake_execute(config):
        captured["config"] = config
        return _ok_result()

    monkeypatch.setattr(cli, "execute", fake_execute)

    cli.main(["--log-level", "DEBUG", "--log-file", "cli.log", "--format", "html"])

    assert captured_log_config == {"level": "DEBUG", "file": "cli.log"}
    assert captured["config"].output_format == "html"


def test_main_reads_token_from_env_file(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setenv(cli.API_TOKEN_ENV, "")
    monkeypatch.setattr(
        cli, "parse_app_config", lambda path: AppConfig(env_file="env.xml")
    )
    monkeypatch.setattr(
        cli, "parse_env_config", lambda path: {cli.API_TOKEN_ENV: "from-file"}
    )

    captured = {}

    def fake_execute(config):
        captured["config"] = config
        return _ok_result()

    monkeypatch.setattr(cli, "execute", fake_execute)

    cli.main([])

    assert captured["config"].api_token == "from-file"


def test_main_returns_error_code_when_fetch_fails(monkeypatch, capsys):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(cli, "parse_app_config", lambda path: AppConfig())
    monkeypatch.setattr(
        cli,
        "execute",
        lambda config: SimpleNamespace(
            output_text="An error occurred", state=ViewState.ERROR, ok=False
        ),
    )

    assert cli.main([]) == 1
    assert "An error occurred" in capsys.readouterr().out


def test_main_invalid_date_is_usage_error(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(cli, "parse_app_config", lambda path: AppConfig())

    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--date", "someday"])

    assert excinfo.value.code == 2


def test_main_missing_config_file_returns_error(monkeypatch, tmp_path):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)

    assert cli.main(["--config", str(tmp_path / "missing.xml")]) == 1


def test_main_story_out_of_range_is_runtime_error(monkeypatch):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(cli, "parse_app_config", lambda path: AppConfig())

    def fake_execute(config):
        raise RuntimeError("Story 9 does not exist; choose between 1 and 2.")

    monkeypatch.setattr(cli, "execute", fake_execute)

    assert cli.main(["--story", "9"]) == 1


def test_main_story_below_one_is_usage_error():
    with pytest.raises(SystemExit) as excinfo:
        cli.main(["--story", "0"])

    assert excinfo.value.code == 2


def test_main_list_dates(monkeypatch, capsys):
    monkeypatch.setattr(cli, "configure_logging", lambda level, log_file=None: None)
    monkeypatch.setattr(cli, "parse_app_config", lambda path: AppConfig())

    assert cli.main(["--list-dates"]) == 0

    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == date(date.today().year, 1, 1).isoformat()
    assert len(lines) in (365, 366)
