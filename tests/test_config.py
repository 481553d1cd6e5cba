"""Tests for configuration loading."""

import logging

import pytest

from sample_models import Post
from typegorm import config as config_module
from typegorm.config import CONFIG_FILE_NAME, TypegormConfig, import_model, load_config
from typegorm.errors import ConfigError


@pytest.fixture
def search_dir(tmp_path, monkeypatch):
    """Restrict the default search paths to an empty temp directory."""
    monkeypatch.setattr(config_module, "default_search_paths", lambda: [tmp_path])
    return tmp_path


class TestLoadConfig:

    def test_defaults_without_file(self, search_dir):
        config = load_config(environ={})

        assert config.logging.level == "info"
        assert config.models == []
        assert config.source is None

    def test_found_in_search_path(self, search_dir):
        path = search_dir / CONFIG_FILE_NAME
        path.write_text("logging:\n  level: debug\nmodels:\n  - sample_models:Post\n")

        config = load_config(environ={})

        assert config.source == path
        assert config.logging.level == "debug"
        assert config.models == ["sample_models:Post"]

    def test_explicit_path(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text("logging:\n  level: WARNING\n")

        config = load_config(path, environ={})

        assert config.logging.level == "warning"
        assert config.logging.numeric_level == logging.WARNING

    def test_explicit_path_missing(self, tmp_path):
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_environment_overrides_file(self, tmp_path):
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("logging:\n  level: warning\nmodels:\n  - sample_models:Post\n")

        config = load_config(path, environ={
            "TYPEGORM_LOGGING_LEVEL": "DEBUG",
            "TYPEGORM_MODELS": "sample_models:Post, sample_models:Perfil,",
        })

        assert config.logging.level == "debug"
        assert config.models == ["sample_models:Post", "sample_models:Perfil"]

    def test_empty_file(self, tmp_path):
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text("")
        assert load_config(path, environ={}).models == []

    @pytest.mark.parametrize("content,fragment", [
        ("logging: [unclosed\n", "error reading config file"),
        ("- a\n- b\n", "must contain a mapping"),
        ("models: sample_models:Post\n", "'models' must be a list"),
        ("logging:\n  level: verbose\n", "invalid logging level"),
        ("models:\n  - sample_models.Post\n", "expected module:Class"),
    ])
    def test_invalid_files(self, tmp_path, content, fragment):
        path = tmp_path / CONFIG_FILE_NAME
        path.write_text(content)

        with pytest.raises(ConfigError) as exc_info:
            load_config(path, environ={})
        assert fragment in str(exc_info.value)


class TestTypegormConfig:

    def test_round_trip_dict(self):
        config = TypegormConfig.from_dict({"logging": {"level": "Error"}, "models": ["a:B"]})

        assert config.to_dict() == {"logging": {"level": "error"}, "models": ["a:B"]}
        assert config.logging.numeric_level == logging.ERROR


class TestImportModel:

    def test_import(self):
        assert import_model("sample_models:Post") is Post

    @pytest.mark.parametrize("reference,fragment", [
        ("sample_models", "expected module:Class"),
        (":Post", "expected module:Class"),
        ("no_such_module_here:Post", "cannot import module"),
        ("sample_models:Missing", "has no attribute"),
    ])
    def test_failures(self, reference, fragment):
        with pytest.raises(ConfigError) as exc_info:
            import_model(reference)
        assert fragment in str(exc_info.value)
