"""Provides functions for loading and accessing configuration settings.

Supports loading from .env files, environment variables, and a dedicated
configuration file (~/.acedeck/config.yaml). Values are looked up at call
time, so credential changes in the environment take effect without restart.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

# --- Configuration Constants ---
DEFAULT_CONFIG_DIR = Path.home() / ".acedeck"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_CACHE_DIR = DEFAULT_CONFIG_DIR / "cache"
ENV_FILE_NAME = ".env"

DEFAULT_PROVIDER = "gemini"
SUPPORTED_PROVIDERS = ("gemini", "openai", "groq")

# Defaults for keys the rest of the application reads.
DEFAULTS: Dict[str, Any] = {
    "ai.default_provider": DEFAULT_PROVIDER,
    "cache.dir": str(DEFAULT_CACHE_DIR),
    "cache.namespace": "acedeck",
    "cache.quota_bytes": 5 * 1024 * 1024,
    "resilience.max_attempts": 20,
    "resilience.overload_delay_seconds": 0.8,
    "resilience.min_key_length": 10,
    "resilience.random_start": False,
    "narration.max_tokens": 600,
    "logging.level": "WARNING",
    "logging.format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
}

# --- Global Configuration Store ---
_config: Dict[str, Any] = {}
_test_config: Dict[str, Any] = {}
_loaded = False


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    """Flattens nested YAML mappings into dotted keys ('ai.gemini.text_model')."""
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        dotted = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{dotted}."))
        else:
            flat[dotted] = value
    return flat


def load_configuration(config_file: Path = DEFAULT_CONFIG_FILE, env_file: Optional[Path] = None, force: bool = False) -> None:
    """Loads configuration from environment, .env file, and YAML file.

    Priority order (highest to lowest):
    1. Environment Variables
    2. .env file
    3. YAML configuration file
    4. Default values defined in this module

    Args:
        config_file: Path to the YAML configuration file.
        env_file: Path to the .env file (searches upwards from cwd if None).
        force: Reload even if configuration was already loaded.
    """
    global _config, _loaded
    if _loaded and not force:
        logger.debug("Configuration already loaded.")
        return

    _config = {}

    # 1. Load from YAML file (Lowest priority)
    if config_file.exists():
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                yaml_config = yaml.safe_load(f)
            if isinstance(yaml_config, dict):
                _config.update(_flatten(yaml_config))
                logger.info(f"Loaded configuration from YAML: {config_file}")
            elif yaml_config is not None:
                logger.warning(f"YAML config file {config_file} did not contain a dictionary.")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load or parse YAML config {config_file}: {e}")
    else:
        logger.debug(f"YAML config file not found: {config_file}")

    # 2. Load from .env file (Medium priority)
    dotenv_path = env_file or find_dotenv_path()
    if dotenv_path:
        # override=False: ENV VARS take precedence
        if load_dotenv(dotenv_path=dotenv_path, override=False):
            logger.info(f"Loaded environment variables from: {dotenv_path}")
    else:
        logger.debug("Skipping .env file loading (no .env found at or above current directory).")

    # 3. Environment Variables (Highest priority) are handled at lookup time

    _loaded = True
    logger.info("Configuration loading process completed.")


def _env_key(key: str) -> str:
    return key.upper().replace(".", "_")


def get_raw_config(key: str, default: Optional[str] = None) -> Optional[str]:
    """Gets a configuration value as an unconverted string.

    Used for credentials, which must never be coerced to numbers or booleans.
    """
    if key in _test_config:
        value = _test_config[key]
        return None if value is None else str(value)
    env_key = _env_key(key)
    if env_key in os.environ:
        return os.environ[env_key]
    if key in _config and _config[key] is not None:
        value = _config[key]
        if isinstance(value, (list, tuple)):
            return ",".join(str(v) for v in value)
        return str(value)
    return default


def get_config(key: str, default: Any = None) -> Any:
    """
    Get a configuration value by key.

    Priority:
    1. Test configuration (if in testing mode)
    2. Environment variable (dots become underscores, upper-cased)
    3. YAML config
    4. Module defaults, then `default`

    Args:
        key: The configuration key
        default: Default value if the key is not found

    Returns:
        The configuration value
    """
    if key in _test_config:
        return _test_config[key]

    env_key = _env_key(key)
    if env_key in os.environ:
        value = os.environ[env_key]
        if value.lower() == "true":
            return True
        if value.lower() == "false":
            return False
        try:
            if "." in value:
                return float(value)
            return int(value)
        except (ValueError, TypeError):
            return value

    if key in _config:
        return _config[key]

    if default is None and key in DEFAULTS:
        return DEFAULTS[key]
    logger.debug(f"Config key '{key}' not found in environment or loaded config. Returning default: {default}")
    return default


def find_dotenv_path() -> Optional[Path]:
    """Searches for the .env file upwards from the current directory."""
    cwd = Path.cwd()
    for path in [cwd] + list(cwd.parents):
        env_path = path / ENV_FILE_NAME
        if env_path.is_file():
            return env_path
    return None

# --- Convenience Functions ---

def get_credential_string(provider: str) -> str:
    """Returns the raw comma-separated credential value for `provider`.

    Read on every call. Lookup order: <PROVIDER>_API_KEYS, <PROVIDER>_API_KEY,
    API_KEY, then the YAML key '<provider>.api_keys'.
    """
    for key in (f"{provider}_api_keys", f"{provider}_api_key", "api_key", f"{provider}.api_keys"):
        value = get_raw_config(key)
        if value:
            return value
    return ""


def get_default_provider() -> str:
    """Gets the default AI provider."""
    provider = str(get_config("ai.default_provider") or DEFAULT_PROVIDER).lower()
    if provider not in SUPPORTED_PROVIDERS:
        logger.warning(f"Unknown provider '{provider}' in configuration. Using '{DEFAULT_PROVIDER}'.")
        return DEFAULT_PROVIDER
    return provider


def get_model_name(provider: str, purpose: str) -> Optional[str]:
    """Gets the configured model for a provider and purpose ('text', 'audio', 'image', 'chat')."""
    model = get_config(f"ai.{provider}.{purpose}_model")
    return str(model) if model is not None else None


def set_config_for_testing(config_dict: Dict[str, Any]) -> None:
    """
    Set configuration values for testing purposes.
    These values will override any existing configuration.

    Args:
        config_dict: Dictionary of configuration values to set
    """
    _test_config.update(config_dict)
    logger.debug(f"Set testing configuration: {list(config_dict)}")


def clear_test_config() -> None:
    """Clear all testing configuration values."""
    _test_config.clear()
    logger.debug("Cleared testing configuration")


# Load configuration when the module is imported
load_configuration()
