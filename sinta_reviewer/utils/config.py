import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Dict, Optional

import yaml
from dotenv import load_dotenv

from ..error_handling import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gemini-2.0-flash"
DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


@dataclass(frozen=True)
class GenerationProfile:
    temperature: Optional[float] = None
    max_output_tokens: Optional[int] = None

    def to_generation_config(self) -> Dict:
        config = {}
        if self.temperature is not None:
            config["temperature"] = self.temperature
        if self.max_output_tokens is not None:
            config["maxOutputTokens"] = self.max_output_tokens
        return config


# Scoring tasks run cold, open-ended chat runs warmer.
DEFAULT_PROFILES: Dict[str, GenerationProfile] = {
    "image_analysis": GenerationProfile(temperature=0.4, max_output_tokens=2048),
    "pdf_analysis": GenerationProfile(temperature=0.4, max_output_tokens=4096),
    "reviewer_chat": GenerationProfile(temperature=0.7, max_output_tokens=1024),
    "tutor_chat": GenerationProfile(temperature=0.7, max_output_tokens=1024),
    "text_extraction": GenerationProfile(),
    "section_improvement": GenerationProfile(),
    "checklist": GenerationProfile(),
    "debate_topic": GenerationProfile(),
    "pronunciation_text": GenerationProfile(),
    "pronunciation_analysis": GenerationProfile(),
    "grammar": GenerationProfile(),
}


def load_profiles(path: Optional[str] = None) -> Dict[str, GenerationProfile]:
    """Merge per-task overrides from a YAML file over the built-in profiles.

    The file maps task names to ``temperature`` and/or ``max_output_tokens``.
    """
    profiles = dict(DEFAULT_PROFILES)
    if not path:
        return profiles

    try:
        with open(path) as f:
            overrides = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise ConfigurationError(f"Generation profiles file not found: {path}")
    except yaml.YAMLError as e:
        raise ConfigurationError(f"Invalid generation profiles file {path}: {e}")

    if not isinstance(overrides, dict):
        raise ConfigurationError(f"Generation profiles file {path} must contain a mapping")

    for task, values in overrides.items():
        if task not in profiles:
            raise ConfigurationError(f"Unknown task in generation profiles: {task}")
        if not isinstance(values, dict):
            raise ConfigurationError(f"Profile for {task} must be a mapping")
        unknown = set(values) - {"temperature", "max_output_tokens"}
        if unknown:
            raise ConfigurationError(f"Unknown settings for {task}: {', '.join(sorted(unknown))}")

        temperature = values.get("temperature", profiles[task].temperature)
        if temperature is not None and not 0.0 <= float(temperature) <= 1.0:
            raise ConfigurationError(f"Temperature for {task} must be between 0.0 and 1.0")
        max_tokens = values.get("max_output_tokens", profiles[task].max_output_tokens)
        if max_tokens is not None and int(max_tokens) <= 0:
            raise ConfigurationError(f"max_output_tokens for {task} must be positive")

        profiles[task] = replace(
            profiles[task],
            temperature=None if temperature is None else float(temperature),
            max_output_tokens=None if max_tokens is None else int(max_tokens),
        )
        logger.info(f"Loaded generation profile override for {task}")

    return profiles


@dataclass
class Config:
    gemini_key: str
    model: str
    base_url: str
    request_timeout: float
    output_dir: str
    profiles_path: Optional[str] = None

    @classmethod
    def from_env(cls) -> 'Config':
        """Create config from environment variables"""
        load_dotenv()

        return cls(
            gemini_key=os.getenv('GEMINI_API_KEY', ''),
            model=os.getenv('GEMINI_MODEL', DEFAULT_MODEL),
            base_url=os.getenv('GEMINI_BASE_URL', DEFAULT_BASE_URL),
            request_timeout=float(os.getenv('REQUEST_TIMEOUT', '60')),
            output_dir=os.getenv('OUTPUT_DIR', './reports'),
            profiles_path=os.getenv('GENERATION_PROFILES') or None,
        )

    def validate(self) -> None:
        """Validate required configuration"""
        required = {
            'GEMINI_API_KEY': self.gemini_key,
            'GEMINI_MODEL': self.model,
        }

        missing = [key for key, value in required.items() if not value]
        if missing:
            logger.warning(f"Missing required environment variables: {', '.join(missing)}")
            raise ConfigurationError(f"Missing required environment variables: {', '.join(missing)}")
        if self.request_timeout <= 0:
            raise ConfigurationError("REQUEST_TIMEOUT must be positive")

    def load_profiles(self) -> Dict[str, GenerationProfile]:
        return load_profiles(self.profiles_path)


def load_config() -> Config:
    config = Config.from_env()
    config.validate()
    return config


def setup_logging(log_dir: Optional[str] = None, level: int = logging.INFO) -> None:
    """Configure logging for the reviewer, optionally mirroring to a log file"""
    handlers = [logging.StreamHandler()]
    if log_dir:
        path = Path(log_dir)
        path.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path / "reviewer.log"))

    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )
