from __future__ import annotations

import pytest

from reststorage import ConfigurationError, RestStorage, RestStorageSettings


@pytest.mark.parametrize(
    "endpoint, token, message",
    [
        ("", "t", "endpoint must be specified"),
        ("   ", "t", "endpoint must be specified"),
        ("http://kv.test/", "", "token must be specified"),
    ],
)
def test_adapter_rejects_missing_credentials(endpoint, token, message):
    with pytest.raises(ConfigurationError, match=message):
        RestStorage.from_config(endpoint=endpoint, token=token)


def test_settings_are_copied_at_construction():
    settings = RestStorageSettings(endpoint="http://kv.test/", token="t")
    storage = RestStorage(settings)
    settings.token = ""
    assert storage.settings.token == "t"


def test_operation_urls_are_concatenated_verbatim():
    settings = RestStorageSettings(endpoint="https://kv.test/v1/storage/", token="t")
    assert settings.url_for("lock") == "https://kv.test/v1/storage/lock"


def test_from_file_reads_yaml(tmp_path):
    path = tmp_path / "storage.yml"
    path.write_text(
        "storage:\n"
        "  endpoint: https://kv.test/api/\n"
        "  token: abc\n"
        "  lock_poll_max: 2.5\n"
    )
    settings = RestStorageSettings.from_file(path)
    assert settings.endpoint == "https://kv.test/api/"
    assert settings.token == "abc"
    assert settings.lock_poll_max == 2.5
    assert settings.lock_poll_initial == 0.05


def test_from_file_rejects_invalid_values(tmp_path):
    path = tmp_path / "storage.yml"
    path.write_text("endpoint: https://kv.test/\ntoken: abc\nlock_poll_multiplier: 0.5\n")
    with pytest.raises(ConfigurationError):
        RestStorageSettings.from_file(path)


def test_from_file_missing(tmp_path):
    with pytest.raises(ConfigurationError):
        RestStorageSettings.from_file(tmp_path / "absent.yml")


def test_backoff_max_below_initial_is_rejected():
    with pytest.raises(ConfigurationError):
        RestStorageSettings.build(endpoint="e", token="t", lock_poll_initial=2, lock_poll_max=1)


def test_from_env(monkeypatch):
    monkeypatch.setenv("REST_STORAGE_ENDPOINT", " https://kv.test/api/ ")
    monkeypatch.setenv("REST_STORAGE_TOKEN", "tok")
    monkeypatch.setenv("REST_STORAGE_REQUEST_TIMEOUT", "5")
    settings = RestStorageSettings.from_env()
    assert settings.endpoint == "https://kv.test/api/"
    assert settings.token == "tok"
    assert settings.request_timeout == 5.0


def test_from_env_invalid_number(monkeypatch):
    monkeypatch.setenv("REST_STORAGE_LOCK_POLL_MAX", "soon")
    with pytest.raises(ConfigurationError, match="REST_STORAGE_LOCK_POLL_MAX"):
        RestStorageSettings.from_env()


def test_from_env_without_credentials_fails_validation(monkeypatch):
    monkeypatch.delenv("REST_STORAGE_ENDPOINT", raising=False)
    monkeypatch.delenv("REST_STORAGE_TOKEN", raising=False)
    settings = RestStorageSettings.from_env()
    with pytest.raises(ConfigurationError, match="endpoint"):
        RestStorage(settings)
