import logging

import pytest

from sinta_reviewer.error_handling import ConfigurationError
from sinta_reviewer.utils.config import DEFAULT_PROFILES, Config, load_config, load_profiles, setup_logging


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)  # keep a developer's .env out of the way
    for name in ("GEMINI_API_KEY", "GEMINI_MODEL", "GEMINI_BASE_URL", "REQUEST_TIMEOUT", "OUTPUT_DIR",
                 "GENERATION_PROFILES"):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


def test_config_defaults(clean_env):
    clean_env.setenv("GEMINI_API_KEY", "abc")
    config = Config.from_env()

    assert config.gemini_key == "abc"
    assert config.model == "gemini-2.0-flash"
    assert config.request_timeout == 60.0
    assert config.output_dir == "./reports"
    assert config.profiles_path is None
    config.validate()


def test_config_overrides(clean_env):
    clean_env.setenv("GEMINI_API_KEY", "abc")
    clean_env.setenv("GEMINI_MODEL", "gemini-1.5-pro")
    clean_env.setenv("REQUEST_TIMEOUT", "15")
    config = Config.from_env()

    assert config.model == "gemini-1.5-pro"
    assert config.request_timeout == 15.0


def test_missing_key_raises(clean_env):
    with pytest.raises(ConfigurationError) as exc:
        load_config()
    assert "GEMINI_API_KEY" in str(exc.value)


def test_default_profiles():
    profiles = load_profiles()
    assert profiles["image_analysis"].temperature == 0.4
    assert profiles["image_analysis"].max_output_tokens == 2048
    assert profiles["pdf_analysis"].max_output_tokens == 4096
    assert profiles["reviewer_chat"].temperature == 0.7
    assert profiles["checklist"].to_generation_config() == {}


def test_profile_overrides(tmp_path):
    path = tmp_path / "profiles.yaml"
    path.write_text("checklist:\n  temperature: 0.1\nreviewer_chat:\n  max_output_tokens: 512\n")
    profiles = load_profiles(str(path))

    assert profiles["checklist"].temperature == 0.1
    assert profiles["reviewer_chat"].temperature == 0.7
    assert profiles["reviewer_chat"].max_output_tokens == 512
    assert DEFAULT_PROFILES["reviewer_chat"].max_output_tokens == 1024


@pytest.mark.parametrize("content", [
    "unknown_task:\n  temperature: 0.2\n",
    "checklist:\n  temperature: 1.5\n",
    "checklist:\n  top_k: 3\n",
    "checklist: 0.3\n",
    "- checklist\n",
])
def test_invalid_profile_files(tmp_path, content):
    path = tmp_path / "profiles.yaml"
    path.write_text(content)
    with pytest.raises(ConfigurationError):
        load_profiles(str(path))


def test_missing_profile_file(tmp_path):
    with pytest.raises(ConfigurationError):
        load_profiles(str(tmp_path / "nope.yaml"))


def test_setup_logging_writes_file(tmp_path):
    root = logging.getLogger()
    saved, saved_level = root.handlers[:], root.level
    root.handlers = []
    try:
        setup_logging(str(tmp_path / "logs"))
        logging.getLogger("sinta_reviewer.test").info("hello log")
        for handler in root.handlers:
            handler.flush()
        assert "hello log" in (tmp_path / "logs" / "reviewer.log").read_text()
    finally:
        for handler in root.handlers:
            handler.close()
        root.handlers = saved
        root.setLevel(saved_level)
