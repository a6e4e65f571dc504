import os

import pytest

from budget_manager.config import ConfigError, Settings, load_env, normalize_database_url


@pytest.fixture
def clean_env(monkeypatch):
    """Remove the variables Settings reads so defaults apply"""
    for key in (
        "DATABASE_URL", "POOL_SIZE", "POOL_MAX_OVERFLOW", "POOL_TIMEOUT", "CREATE_SCHEMA",
        "HTTP_TIMEOUT", "MAILER_ADAPTER", "MAILER_API_KEY", "CURRENCY", "LOG_LEVEL",
        "ENDPOINT_PORT", "ALERT_EMAIL",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_load_env_reads_pairs_and_skips_comments(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text(
        "# local settings\n"
        "\n"
        "BUDGET_TEST_A=one\n"
        "BUDGET_TEST_B = \"two words\"\n"
        "not a pair\n"
        "BUDGET_TEST_URL=postgres://u:p@h/db?x=1\n",
        encoding="utf-8",
    )
    for key in ("BUDGET_TEST_A", "BUDGET_TEST_B", "BUDGET_TEST_URL"):
        monkeypatch.setenv(key, "")

    loaded = load_env(env_file)

    assert loaded == {
        "BUDGET_TEST_A": "one",
        "BUDGET_TEST_B": "two words",
        "BUDGET_TEST_URL": "postgres://u:p@h/db?x=1",
    }
    assert os.environ["BUDGET_TEST_B"] == "two words"


def test_load_env_without_override_keeps_existing_values(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("BUDGET_TEST_KEEP=from-file\n", encoding="utf-8")
    monkeypatch.setenv("BUDGET_TEST_KEEP", "from-shell")

    load_env(env_file, override=False)

    assert os.environ["BUDGET_TEST_KEEP"] == "from-shell"


def test_missing_env_file_loads_nothing(tmp_path):
    assert load_env(tmp_path / "absent.env") == {}


@pytest.mark.parametrize("url,expected", [
    ("postgres://u:p@localhost/db", "postgresql+asyncpg://u:p@localhost/db"),
    ("postgresql://u:p@localhost/db", "postgresql+asyncpg://u:p@localhost/db"),
    ("postgresql+asyncpg://u:p@localhost/db", "postgresql+asyncpg://u:p@localhost/db"),
])
def test_normalize_database_url(url, expected):
    assert normalize_database_url(url) == expected


def test_defaults(clean_env):
    settings = Settings.from_env()
    assert settings.pool_size == 10
    assert settings.create_schema is True
    assert settings.mailer_adapter == "local"
    assert settings.currency == "USD"
    assert settings.database_url.startswith("postgresql+asyncpg://")


def test_values_from_environment(clean_env):
    clean_env.setenv("DATABASE_URL", "postgres://app:pw@db:5432/budget")
    clean_env.setenv("POOL_SIZE", "4")
    clean_env.setenv("HTTP_TIMEOUT", "2.5")
    clean_env.setenv("CREATE_SCHEMA", "false")
    clean_env.setenv("CURRENCY", "eur")
    clean_env.setenv("ENDPOINT_PORT", "9000")

    settings = Settings.from_env()

    assert settings.database_url == "postgresql+asyncpg://app:pw@db:5432/budget"
    assert settings.pool_size == 4
    assert settings.http_timeout == 2.5
    assert settings.create_schema is False
    assert settings.currency == "EUR"
    assert settings.endpoint_port == 9000


def test_invalid_number_names_the_variable(clean_env):
    clean_env.setenv("POOL_SIZE", "lots")
    with pytest.raises(ConfigError, match="POOL_SIZE"):
        Settings.from_env()


def test_unknown_mailer_adapter_is_rejected(clean_env):
    clean_env.setenv("MAILER_ADAPTER", "carrier-pigeon")
    with pytest.raises(ConfigError, match="MAILER_ADAPTER"):
        Settings.from_env()


def test_describe_masks_secrets(clean_env):
    clean_env.setenv("MAILER_API_KEY", "sk-live-123")
    clean_env.setenv("DATABASE_URL", "postgres://app:pw@db/budget")

    described = Settings.from_env().describe()

    assert described["mailer_api_key"] == "***"
    assert described["database_url"] == "***"
    assert described["currency"] == "USD"
