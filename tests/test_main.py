import pytest

from rpc_gateway import __main__ as entry


def test_parser_reads_env_defaults(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("PORT", "9001")
    monkeypatch.delenv("HOST", raising=False)
    args = entry.build_parser().parse_args([])
    assert args.port == 9001
    assert args.host == "0.0.0.0"
    assert args.log_level == "info"


def test_main_runs_app_factory(monkeypatch: pytest.MonkeyPatch):
    calls = {}

    def fake_run(app, **kwargs):
        calls["app"] = app
        calls.update(kwargs)

    monkeypatch.setattr(entry.uvicorn, "run", fake_run)
    entry.main(["--port", "8123", "--log-level", "debug"])

    assert calls["app"] == "rpc_gateway.app:create_app"
    assert calls["factory"] is True
    assert calls["port"] == 8123
    assert calls["log_level"] == "debug"
