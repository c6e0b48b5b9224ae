from datetime import datetime, timedelta, timezone

from tinylearn.config import load_settings
from tinylearn.utils.config_loader import LayeredConfig
from tinylearn.utils.pagination import normalize_page
from tinylearn.utils.timeutils import days_until, isoformat_utc


def test_environment_beats_yaml_beats_default():
    cfg = LayeredConfig({"database": {"pool_size": 5}, "server": {"environment": "staging"}},
                        environ={"ENVIRONMENT": "production"})
    assert cfg.get("ENVIRONMENT", "server.environment", "development") == "production"
    assert cfg.get_int("DB_POOL_SIZE", "database.pool_size", 10) == 5
    assert cfg.get_int("DB_POOL_TIMEOUT", "database.pool_timeout", 30) == 30


def test_typed_lookups():
    cfg = LayeredConfig({}, environ={"FLAG": "yes", "ORIGINS": "http://a.test, http://b.test"})
    assert cfg.get_bool("FLAG", "x.flag", False) is True
    assert cfg.get_list("ORIGINS", "server.cors_origins", ["*"]) == ["http://a.test", "http://b.test"]
    assert cfg.get_list("MISSING", "server.cors_origins", ["*"]) == ["*"]


def test_settings_from_yaml_file(tmp_path, monkeypatch):
    path = tmp_path / "tinylearn.yaml"
    path.write_text(
        "database:\n  url: sqlite:///custom.db\n"
        "notifications:\n  enabled: true\n"
        "auth:\n  expire_minutes: 15\n",
        encoding="utf-8",
    )
    for name in ("DATABASE_URL", "NOTIFICATIONS_ENABLED", "ACCESS_TOKEN_EXPIRE_MINUTES", "ENVIRONMENT"):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings(str(path))
    assert settings.database_url == "sqlite:///custom.db"
    assert settings.notifications_enabled is True
    assert settings.access_token_expire_minutes == 15
    assert settings.is_production is False


def test_missing_yaml_file_is_ignored(tmp_path):
    assert LayeredConfig.from_file(str(tmp_path / "absent.yaml")).data == {}


def test_page_clamping():
    assert normalize_page(None, None) == (1, 10)
    assert normalize_page("0", "500") == (1, 100)
    assert normalize_page(3, "abc") == (3, 10)


def test_time_helpers():
    now = datetime(2025, 1, 1, 12, 0, 0)
    assert days_until(now + timedelta(hours=25), now) == 2
    assert days_until(now, now) == 0
    aware = datetime(2025, 1, 1, 14, 0, 0, tzinfo=timezone(timedelta(hours=2)))
    assert isoformat_utc(aware) == "2025-01-01T12:00:00Z"
    assert isoformat_utc(None) is None
