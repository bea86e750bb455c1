"""Tests for Config validation, normalization and file loading."""

from regintel.config import Config


class TestValidateRegion:
    def test_valid_region(self, fresh_config):
        valid, msg = fresh_config.validate_region("EU")
        assert valid is True
        assert msg == ""

    def test_case_insensitive(self, fresh_config):
        valid, _ = fresh_config.validate_region("global")
        assert valid is True

    def test_invalid_region(self, fresh_config):
        valid, msg = fresh_config.validate_region("Atlantis")
        assert valid is False
        assert "Invalid region" in msg

    def test_empty_string(self, fresh_config):
        valid, msg = fresh_config.validate_region("")
        assert valid is False
        assert "cannot be empty" in msg


class TestValidatePriority:
    def test_valid_priority(self, fresh_config):
        assert fresh_config.validate_priority("critical") == (True, "")

    def test_close_misspelling_suggests(self, fresh_config):
        valid, msg = fresh_config.validate_priority("hihg")
        assert valid is False
        assert "Did you mean 'high'" in msg


class TestValidateUpdateType:
    def test_valid_type(self, fresh_config):
        assert fresh_config.validate_update_type("guidance") == (True, "")

    def test_close_misspelling_suggests(self, fresh_config):
        valid, msg = fresh_config.validate_update_type("guidanc")
        assert valid is False
        assert "Did you mean" in msg


class TestNormalize:
    def test_region_matches_configured_case(self, fresh_config):
        assert fresh_config.normalize_region("us") == "US"

    def test_unknown_region_falls_to_global(self, fresh_config):
        assert fresh_config.normalize_region("Mars") == "Global"
        assert fresh_config.normalize_region("") == "Global"

    def test_priority(self, fresh_config):
        assert fresh_config.normalize_priority("HIGH") == "high"
        assert fresh_config.normalize_priority("whenever") == "medium"

    def test_update_type(self, fresh_config):
        assert fresh_config.normalize_update_type("Recall") == "recall"
        assert fresh_config.normalize_update_type("memo") == "regulation"


class TestGet:
    def test_dot_notation(self, fresh_config):
        assert fresh_config.get("approval.auto_threshold") == 0.85
        assert fresh_config.get("scraper.delay_seconds") == 3

    def test_missing_key_returns_default(self, fresh_config):
        assert fresh_config.get("scraper.nope", "x") == "x"
        assert fresh_config.get("nope.nope") is None


class TestPaths:
    def test_paths_under_base_dir(self, fresh_config, tmp_path):
        assert fresh_config.base_dir == tmp_path
        assert fresh_config.database_path == tmp_path / "db" / "regintel.db"
        assert fresh_config.exports_dir == tmp_path / "exports"
        assert fresh_config.logs_dir == tmp_path / "logs"


class TestConfigFile:
    def test_yaml_overrides_are_merged(self, tmp_path, monkeypatch):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "config.yaml").write_text(
            "scraper:\n  delay_seconds: 0\nscheduler:\n  enabled: true\n",
            encoding="utf-8",
        )
        Config._instance = None
        monkeypatch.setenv("REGINTEL_BASE_DIR", str(tmp_path))
        try:
            cfg = Config()
            assert cfg.get("scraper.delay_seconds") == 0
            # Sibling keys keep their defaults
            assert cfg.get("scraper.request_timeout") == 30
            assert cfg.get("scheduler.enabled") is True
        finally:
            Config._instance = None

    def test_singleton(self, fresh_config):
        assert Config() is fresh_config
