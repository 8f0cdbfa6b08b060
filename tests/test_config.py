"""
Tests for environment configuration and the management CLI
"""

import pytest
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from moneymachine.config import load_config, DEFAULT_MODELS
from moneymachine.manage import main
from moneymachine.models import ModelProvider

KEY_VARS = ["API_KEY", "GEMINI_API_KEY", "OPENAI_API_KEY", "ANTHROPIC_API_KEY", "XAI_API_KEY", "AIMM_PROVIDER"]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in KEY_VARS:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("AIMM_DB_PATH", str(tmp_path / "aimm.db"))
    monkeypatch.setenv("AIMM_LOG_DIR", str(tmp_path / "logs"))
    return tmp_path


class TestLoadConfig:
    def test_defaults(self, clean_env):
        config = load_config(env_file=None)
        assert config.provider == ModelProvider.GEMINI
        assert config.tick_seconds == 3.0
        assert config.event_probability == 0.3
        assert config.api_key(ModelProvider.OPENAI) is None
        assert config.model_name(ModelProvider.XAI) == DEFAULT_MODELS[ModelProvider.XAI]

    def test_keys_and_overrides(self, clean_env, monkeypatch):
        monkeypatch.setenv("GEMINI_API_KEY", "g-key")
        monkeypatch.setenv("AIMM_PROVIDER", "xai")
        monkeypatch.setenv("AIMM_OPENAI_MODEL", "gpt-4o")
        monkeypatch.setenv("AIMM_TICK_SECONDS", "0.5")
        config = load_config(env_file=None)
        assert config.api_key(ModelProvider.GEMINI) == "g-key"
        assert config.provider == ModelProvider.XAI
        assert config.model_name(ModelProvider.OPENAI) == "gpt-4o"
        assert config.tick_seconds == 0.5

    def test_credentials_file(self, clean_env):
        env_file = clean_env / "credentials.env"
        env_file.write_text("OPENAI_API_KEY=from-file\n")
        try:
            assert load_config(env_file=str(env_file)).api_key(ModelProvider.OPENAI) == "from-file"
        finally:
            os.environ.pop("OPENAI_API_KEY", None)

    def test_bad_provider(self, clean_env, monkeypatch):
        monkeypatch.setenv("AIMM_PROVIDER", "HAL9000")
        with pytest.raises(ValueError):
            load_config(env_file=None)


class TestManage:
    def test_simulate(self, clean_env, capsys):
        assert main(["simulate", "--ticks", "5", "--seed", "7", "--every-tick"]) == 0
        out = capsys.readouterr().out
        assert out.count("[00") == 5
        assert "Final sentiment:" in out
        assert os.path.exists(clean_env / "logs" / "aimm.log")

    def test_reset_db(self, clean_env, capsys):
        assert main(["reset-db"]) == 0
        assert "Cleared" in capsys.readouterr().out
