"""Tests for configuration loading."""

from pathlib import Path

import pytest

from filequeue import open_reader, open_writer
from filequeue.utils.config import Config, get_config, reset_config


class TestConfig:
    """Test Config class."""
    
    @pytest.fixture(autouse=True)
    def clean_env(self, monkeypatch):
        """Clear environment overrides and the global config."""
        for var in ("FILEQUEUE_DATA_DIR", "FILEQUEUE_FSYNC", "LOG_LEVEL", "LOG_FORMAT"):
            monkeypatch.delenv(var, raising=False)
        reset_config()
        yield
        reset_config()
    
    def test_get_default(self):
        """Test that missing keys fall back to the default."""
        config = Config()
        
        assert config.get("queue.nonexistent", "fallback") == "fallback"
        assert config.get("nonexistent.deeply.nested") is None
    
    def test_load_file(self, tmp_path):
        """Test loading and merging a YAML file."""
        config_file = tmp_path / "queue.yaml"
        config_file.write_text(
            "queue:\n"
            "  data_dir: /var/lib/queues\n"
            "  fsync_on_write: true\n"
            "logging:\n"
            "  level: DEBUG\n"
        )
        
        config = Config(str(config_file))
        
        assert config.get("queue.data_dir") == "/var/lib/queues"
        assert config.get("queue.fsync_on_write") is True
        assert config.get("logging.level") == "DEBUG"
    
    def test_empty_file(self, tmp_path):
        """Test that an empty YAML file is accepted."""
        config_file = tmp_path / "empty.yaml"
        config_file.write_text("")
        
        config = Config(str(config_file))
        
        assert isinstance(config.to_dict(), dict)
    
    def test_env_overrides(self, monkeypatch, tmp_path):
        """Test that environment variables override file values."""
        monkeypatch.setenv("FILEQUEUE_DATA_DIR", str(tmp_path))
        monkeypatch.setenv("FILEQUEUE_FSYNC", "yes")
        monkeypatch.setenv("LOG_LEVEL", "WARNING")
        
        config = Config()
        
        assert config.get("queue.data_dir") == str(tmp_path)
        assert config.get("queue.fsync_on_write") is True
        assert config.get("logging.level") == "WARNING"
    
    def test_set_nested(self):
        """Test setting values with dot notation."""
        config = Config()
        config.set("queue.data_dir", "/tmp/q")
        
        assert config.get("queue.data_dir") == "/tmp/q"
    
    def test_resolve_queue_path(self, tmp_path):
        """Test resolving queue names against the data directory."""
        config = Config()
        config.set("queue.data_dir", str(tmp_path))
        
        assert config.resolve_queue_path("events") == tmp_path / "events"
        assert config.resolve_queue_path("/abs/events") == Path("/abs/events")
    
    def test_global_config(self):
        """Test that the global configuration is cached until reset."""
        assert get_config() is get_config()
        
        first = get_config()
        reset_config()
        
        assert get_config() is not first
    
    def test_open_with_config(self, tmp_path):
        """Test opening a queue through the configured data directory."""
        config = Config()
        config.set("queue.data_dir", str(tmp_path / "queues"))
        
        with open_writer("events", config) as writer:
            writer.write(b"configured")
        
        assert (tmp_path / "queues" / "events").exists()
        
        with open_reader("events", config) as reader:
            assert reader.read() == b"configured"
