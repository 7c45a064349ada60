import json
from pathlib import Path

import pytest
import requests

from conftest import make_response
from textmarketer_client.cli import build_parser, main


def test_init_writes_config_file(tmp_path: Path, capsys):
    code = main(["init", "--username", "user", "--password", "pass", "--dir", str(tmp_path)])

    path = tmp_path / "config" / "textmarketer.config.json"
    assert code == 0
    assert json.loads(path.read_text(encoding="utf-8")) == {
        "username": "user",
        "password": "pass",
        "response_type": "json",
    }
    assert str(path) in capsys.readouterr().out


def test_init_refuses_to_overwrite_without_force(tmp_path: Path):
    args = ["init", "--username", "user", "--password", "pass", "--dir", str(tmp_path)]
    assert main(args) == 0
    assert main(args) == 1
    assert main(args + ["--force"]) == 0


def test_config_command_masks_password(tmp_path: Path, monkeypatch, capsys, no_env_config):
    main(["init", "--username", "user", "--password", "hunter2", "--dir", str(tmp_path)])
    monkeypatch.chdir(tmp_path)
    capsys.readouterr()

    assert main(["config"]) == 0

    out = capsys.readouterr().out
    assert "Config method: file" in out
    assert "username: user" in out
    assert "hunter2" not in out


def test_config_command_without_source(tmp_path: Path, monkeypatch, capsys, no_env_config):
    monkeypatch.chdir(tmp_path)

    assert main(["config"]) == 1
    assert "Error:" in capsys.readouterr().err


def test_send_command(tmp_path: Path, monkeypatch, capsys, no_env_config):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TRUE9_TEXTMARKETER_CLIENT_CONFIG", "username=u&password=p")
    monkeypatch.setattr(requests, "post", lambda url, **kwargs: make_response('{"message_id": "99"}'))

    assert main(["send", "Hello", "--to", "447777777777"]) == 0
    assert "Message ID: 99" in capsys.readouterr().out


def test_send_command_reports_errors(tmp_path: Path, monkeypatch, capsys, no_env_config):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TRUE9_TEXTMARKETER_CLIENT_CONFIG", "username=u&password=p")

    def refuse(url, **kwargs):
        raise requests.exceptions.ConnectionError("connection refused")

    monkeypatch.setattr(requests, "post", refuse)

    assert main(["send", "Hello", "--to", "447777777777"]) == 1
    assert "connection refused" in capsys.readouterr().err


def test_parser_defaults():
    args = build_parser().parse_args(["send", "Hi", "--to", "447777777777"])

    assert args.config_method is None
    assert args.timeout == 30
    assert args.originator is None


def test_log_level_is_case_insensitive():
    args = build_parser().parse_args(["--log-level", "debug", "config"])
    assert args.log_level == "DEBUG"


def test_unknown_log_level_is_rejected(capsys):
    with pytest.raises(SystemExit) as exc:
        main(["--log-level", "verbose", "config"])

    assert exc.value.code == 2
    assert "invalid choice" in capsys.readouterr().err
