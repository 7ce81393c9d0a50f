"""
Runtime Configuration Unit Tests
Tests for core/config/runtime.py
"""
import pytest

from core.config import runtime
from core.config import AnchoringConfig, LoggingConfig, OutputConfig, RuntimeConfig, load_config


ENV_VARS = [
    "IMPACTLEDGER_LOG_LEVEL",
    "IMPACTLEDGER_LOG_FILE",
    "IMPACTLEDGER_SIGNER_KID",
    "IMPACTLEDGER_HEX_PREFIX",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate tests from the caller's environment and config files."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(runtime, "DEFAULT_CONFIG_PATHS", (tmp_path / "impactledger.yaml",))


class TestDefaults:

    def test_defaults(self):
        config = RuntimeConfig()
        assert config.logging == LoggingConfig(level="INFO", file=None)
        assert config.anchoring == AnchoringConfig(signer_key_id=None)
        assert config.output == OutputConfig(hex_prefix=True, indent=2)

    def test_from_dict_partial(self):
        config = RuntimeConfig.from_dict({"anchoring": {"signer_key_id": "kms-1"}})
        assert config.anchoring.signer_key_id == "kms-1"
        assert config.logging.level == "INFO"

    def test_from_dict_unknown_key_rejected(self):
        with pytest.raises(TypeError):
            RuntimeConfig.from_dict({"output": {"colour": True}})


class TestYaml:

    def test_round_trip(self, tmp_path):
        config = RuntimeConfig.from_dict({
            "logging": {"level": "DEBUG"},
            "output": {"hex_prefix": False, "indent": 4},
        })
        path = tmp_path / "config.yaml"
        path.write_text(config.to_yaml())
        assert RuntimeConfig.from_yaml(path) == config

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.yaml"
        path.write_text("")
        assert RuntimeConfig.from_yaml(path) == RuntimeConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            RuntimeConfig.from_yaml(tmp_path / "absent.yaml")


class TestEnvOverrides:

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("IMPACTLEDGER_LOG_LEVEL", "WARNING")
        monkeypatch.setenv("IMPACTLEDGER_SIGNER_KID", "kms-env")
        monkeypatch.setenv("IMPACTLEDGER_HEX_PREFIX", "false")
        config = RuntimeConfig.from_env()
        assert config.logging.level == "WARNING"
        assert config.anchoring.signer_key_id == "kms-env"
        assert config.output.hex_prefix is False

    def test_env_overrides_file(self, monkeypatch, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("anchoring:\n  signer_key_id: kms-file\nlogging:\n  level: ERROR\n")
        monkeypatch.setenv("IMPACTLEDGER_SIGNER_KID", "kms-env")
        config = load_config(path)
        assert config.anchoring.signer_key_id == "kms-env"
        assert config.logging.level == "ERROR"

    def test_with_env_overrides_does_not_mutate(self, monkeypatch):
        base = RuntimeConfig()
        monkeypatch.setenv("IMPACTLEDGER_LOG_FILE", "/tmp/impactledger.log")
        overridden = base.with_env_overrides()
        assert overridden.logging.file == "/tmp/impactledger.log"
        assert base.logging.file is None


class TestLoadConfig:

    def test_no_file_defaults(self):
        assert load_config() == RuntimeConfig()

    def test_default_path_used(self, tmp_path):
        (tmp_path / "impactledger.yaml").write_text("output:\n  indent: 0\n")
        assert load_config().output.indent == 0
