"""Tests for configuration loader."""

import pytest
import yaml
from pydantic import ValidationError

from notion_tools.config.config_loader import ConfigLoader, load_config
from notion_tools.config.config_schema import AppConfig


def write_yaml(tmp_path, data, name="config.yaml"):
    path = tmp_path / name
    path.write_text(yaml.dump(data) if not isinstance(data, str) else data, encoding="utf-8")
    return str(path)


def test_load_config_valid(tmp_path):
    """Test loading a valid configuration."""
    config_path = write_yaml(
        tmp_path,
        {
            "notion": {"api_key": "secret_abc", "rate_limit_delay": 0.5},
            "tts": {"voice": "alloy"},
            "writer": {"fragile_fields": [10, 6, 10]},
        },
    )

    config = load_config(config_path, environ={}, load_env_file=False)

    assert isinstance(config, AppConfig)
    assert config.notion.api_key == "secret_abc"
    assert config.notion.rate_limit_delay == 0.5
    assert config.tts.voice == "alloy"
    assert config.writer.fragile_fields == [6, 10]


def test_defaults_without_file(tmp_path, monkeypatch):
    """No config.yaml in the working directory means defaults."""
    monkeypatch.chdir(tmp_path)

    config = load_config(environ={}, load_env_file=False)

    assert config.notion.api_key is None
    assert config.notion.rate_limit_delay == 0.35
    assert config.writer.field_base == "Content64"
    assert config.writer.max_fields == 15
    assert config.tts.response_format == "opus"
    assert config.storage.key_prefix == "blog-audio"


def test_default_file_is_picked_up(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_yaml(tmp_path, {"notion": {"database_query": "Posts"}})

    config = load_config(environ={}, load_env_file=False)

    assert config.notion.database_query == "Posts"


def test_environment_overrides_file(tmp_path):
    config_path = write_yaml(tmp_path, {"notion": {"api_key": "from_file"}})
    environ = {
        "NOTION_API_KEY": "from_env",
        "OPENAI_API_KEY": "sk-test",
        "CLOUDFLARE_R2_BUCKET_NAME": "audio",
        "CLOUDFLARE_R2_PUBLIC_URL": "https://cdn.example.com/",
    }

    config = load_config(config_path, environ=environ, load_env_file=False)

    assert config.notion.api_key == "from_env"
    assert config.tts.api_key == "sk-test"
    assert config.storage.bucket_name == "audio"
    assert config.storage.public_url == "https://cdn.example.com"


def test_load_config_missing_file():
    """Test loading a non-existent configuration file."""
    with pytest.raises(FileNotFoundError):
        load_config("nonexistent.yaml", environ={}, load_env_file=False)


def test_empty_file(tmp_path):
    config_path = write_yaml(tmp_path, "")

    config = ConfigLoader.load_config(config_path, environ={}, load_env_file=False)

    assert config.notion.max_retries == 3


def test_empty_sections(tmp_path):
    config_path = write_yaml(tmp_path, "notion:\ntts:\n")

    config = ConfigLoader.load_config(
        config_path, environ={"NOTION_API_KEY": "from_env"}, load_env_file=False
    )

    assert config.notion.api_key == "from_env"
    assert config.notion.max_retries == 3
    assert config.tts.voice == "onyx"


def test_non_mapping_file(tmp_path):
    config_path = write_yaml(tmp_path, "- just\n- a list\n")

    with pytest.raises(ValueError, match="mapping"):
        load_config(config_path, environ={}, load_env_file=False)


@pytest.mark.parametrize(
    "section,values",
    [
        ("writer", {"span_size": 2500}),
        ("writer", {"spans_per_field": 0}),
        ("writer", {"fragile_fields": [0, 3]}),
        ("tts", {"max_chunk_length": 5000}),
        ("notion", {"max_retries": 0}),
    ],
)
def test_load_config_invalid(tmp_path, section, values):
    """Test loading an invalid configuration."""
    config_path = write_yaml(tmp_path, {section: values})

    with pytest.raises(ValidationError):
        load_config(config_path, environ={}, load_env_file=False)


class TestRequirements:
    def test_require_notion(self):
        with pytest.raises(ValueError, match="NOTION_API_KEY"):
            AppConfig().require_notion()
        AppConfig(notion={"api_key": "secret"}).require_notion()

    def test_placeholder_key_is_not_set(self):
        config = AppConfig(tts={"api_key": "your_openai_api_key_here"})
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            config.require_tts()

    def test_require_storage_lists_missing(self):
        config = AppConfig(storage={"account_id": "acct", "bucket_name": "audio"})

        with pytest.raises(ValueError) as excinfo:
            config.require_storage()

        message = str(excinfo.value)
        assert "CLOUDFLARE_R2_ACCESS_KEY_ID" in message
        assert "CLOUDFLARE_R2_SECRET_ACCESS_KEY" in message
        assert "CLOUDFLARE_ACCOUNT_ID" not in message
