"""Tests for environment-based configuration."""

from pathlib import Path

import pytest

from cvconvert.config import ALLOWED_MIME_TYPES, DEFAULT_MAX_UPLOAD_BYTES, AppConfig, load_config


class TestLoadConfig:
    def test_defaults(self):
        config = load_config({})
        assert config == AppConfig()
        assert config.max_upload_bytes == DEFAULT_MAX_UPLOAD_BYTES
        assert config.allowed_mime_types == ALLOWED_MIME_TYPES
        assert config.openai_model == "gpt-4o"
        assert config.strict_schema is False

    def test_environment_overrides(self):
        config = load_config({
            "CVCONVERT_DATABASE_URL": "sqlite:///x.db",
            "CVCONVERT_TEMPLATES_DIR": "/srv/templates",
            "CVCONVERT_OPENAI_MODEL": "gpt-4o-mini",
            "CVCONVERT_STRICT_SCHEMA": "yes",
            "CVCONVERT_STRICT_TEMPLATES": "1",
            "CVCONVERT_MAX_UPLOAD_BYTES": "2048",
            "CVCONVERT_DEBUG": "true",
            "CVCONVERT_LOG_FILE": "/tmp/cv.log",
        })
        assert config.database_url == "sqlite:///x.db"
        assert config.templates_dir == Path("/srv/templates")
        assert config.openai_model == "gpt-4o-mini"
        assert config.strict_schema is True
        assert config.strict_templates is True
        assert config.max_upload_bytes == 2048
        assert config.debug is True
        assert config.log_file == "/tmp/cv.log"

    def test_false_flag(self):
        assert load_config({"CVCONVERT_STRICT_SCHEMA": "off"}).strict_schema is False

    def test_invalid_max_upload(self):
        with pytest.raises(ValueError, match="CVCONVERT_MAX_UPLOAD_BYTES"):
            load_config({"CVCONVERT_MAX_UPLOAD_BYTES": "ten"})

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("CVCONVERT_RENDERER", "other-renderer")
        assert load_config().renderer == "other-renderer"
