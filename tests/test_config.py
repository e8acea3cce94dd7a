import pytest

from anticorruption_client import create_client
from anticorruption_client.config import CONFIG_ENV_VAR, defaults, load_config


def test_missing_file_gives_defaults(tmp_path):
    assert load_config(tmp_path / "absent.ini") == defaults()


def test_ini_overrides_defaults(tmp_path):
    path = tmp_path / "client.ini"
    path.write_text(
        "[server]\nURL = https://reports.internal\nVERIFY_TLS = false\n"
        "[http]\nTIMEOUT_SECONDS = 15\n"
    )

    config = load_config(path)

    assert config["server.url"] == "https://reports.internal"
    assert config["server.verify_tls"] is False
    assert config["http.timeout_seconds"] == 15
    assert config["dispatch.max_workers"] == 4


def test_unknown_keys_are_ignored(tmp_path):
    path = tmp_path / "client.ini"
    path.write_text("[server]\nCOLOR = blue\n")
    assert load_config(path) == defaults()


def test_bad_value_is_an_error(tmp_path):
    path = tmp_path / "client.ini"
    path.write_text("[dispatch]\nMAX_WORKERS = many\n")
    with pytest.raises(ValueError, match="MAX_WORKERS"):
        load_config(path)


def test_env_var_locates_file(tmp_path, monkeypatch):
    path = tmp_path / "elsewhere.ini"
    path.write_text("[logging]\nLEVEL = DEBUG\n")
    monkeypatch.setenv(CONFIG_ENV_VAR, str(path))
    assert load_config()["logging.level"] == "DEBUG"


def test_create_client_wires_configuration(tmp_path, monkeypatch):
    monkeypatch.setenv(CONFIG_ENV_VAR, str(tmp_path / "none.ini"))
    context = create_client({"server.url": "https://reports.test/", "http.timeout_seconds": 0})
    try:
        backend = context.client.backend
        assert backend.server_url == "https://reports.test"
        assert backend.timeout is None
        assert backend.session is context.session
    finally:
        context.close()
