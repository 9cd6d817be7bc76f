import os
import json
import logging
from dataclasses import dataclass, field

from .errors import ConfigError

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = 'translator.config.json'

DEFAULT_LANGUAGES = ['en', 'es', 'fr', 'ar', 'lzh', 'ru']
DEFAULT_SOURCE = './src/languages/pt.json'
DEFAULT_OUTPUT_DIR = './src/languages'
DEFAULT_API_KEY = 'YOUR_AZURE_API_KEY'
DEFAULT_API_REGION = 'YOUR_AZURE_API_REGION'
PROVIDERS = ('azure', 'google')

# Retry settings
RETRY_COUNT = 3
RETRY_DELAY_MS = 1000
REQUEST_TIMEOUT = 30


@dataclass
class Config:
    languages: list = field(default_factory=lambda: list(DEFAULT_LANGUAGES))
    language_source: str = DEFAULT_SOURCE
    output_dir: str = DEFAULT_OUTPUT_DIR
    azure_api_key: str = DEFAULT_API_KEY
    azure_api_region: str = DEFAULT_API_REGION
    provider: str = 'azure'
    retry_count: int = RETRY_COUNT
    retry_delay: float = RETRY_DELAY_MS
    timeout: float = REQUEST_TIMEOUT
    whitelist: list = field(default_factory=list)
    protect_placeholders: bool = False

    @property
    def retry_delay_seconds(self):
        return self.retry_delay / 1000.0

    def target_file(self, language):
        return os.path.join(self.output_dir, f"{language}.json")


# File key -> Config field
FIELD_NAMES = {
    'languages': 'languages',
    'languageSource': 'language_source',
    'outputDir': 'output_dir',
    'azureApiKey': 'azure_api_key',
    'azureApiRegion': 'azure_api_region',
    'provider': 'provider',
    'retryCount': 'retry_count',
    'retryDelay': 'retry_delay',
    'timeout': 'timeout',
    'whitelist': 'whitelist',
    'protectPlaceholders': 'protect_placeholders',
}


def get_default_config():
    """Returns the default configuration in its on-disk form."""
    defaults = Config()
    return {key: getattr(defaults, name) for key, name in FIELD_NAMES.items()}


def save_config(config_path, config_data):
    with open(config_path, 'w', encoding='utf-8') as f:
        json.dump(config_data, f, indent=2, ensure_ascii=False)
        f.write("\n")


def _is_string_list(value):
    return isinstance(value, list) and all(isinstance(v, str) and v for v in value)


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _validate(key, value, path):
    """Returns True when value is acceptable for key, logging a warning otherwise."""
    if key in ('languages', 'whitelist'):
        ok = _is_string_list(value)
        expected = "a list of non-empty strings"
    elif key == 'retryCount':
        ok = isinstance(value, int) and not isinstance(value, bool) and value > 0
        expected = "a positive integer"
    elif key == 'retryDelay':
        ok = _is_number(value) and value >= 0
        expected = "a non-negative number of milliseconds"
    elif key == 'timeout':
        ok = _is_number(value) and value > 0
        expected = "a positive number of seconds"
    elif key == 'protectPlaceholders':
        ok = isinstance(value, bool)
        expected = "true or false"
    elif key == 'provider':
        ok = value in PROVIDERS
        expected = f"one of {', '.join(PROVIDERS)}"
    else:
        ok = isinstance(value, str) and bool(value)
        expected = "a non-empty string"

    if not ok:
        logger.warning("'%s' in %s must be %s. Ignoring.", key, path, expected)
    return ok


def load_config(config_path=None):
    """
    Load configuration from translator.config.json.

    The file is looked up at config_path, or in the current working directory.
    A missing file is created with the defaults. Relative paths in the file
    resolve against the directory holding it.

    Returns a (Config, created) tuple.
    """
    if not config_path:
        config_path = os.path.join(os.getcwd(), CONFIG_FILE_NAME)

    created = False
    if not os.path.exists(config_path):
        logger.warning("%s not found. Creating it with the default configuration...", config_path)
        try:
            save_config(config_path, get_default_config())
        except OSError as e:
            raise ConfigError(f"Could not create {config_path}: {e}") from e
        logger.info("Configuration file created at %s", config_path)
        created = True

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            file_config = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigError(f"{config_path} is not a valid JSON file: {e}") from e
    except OSError as e:
        raise ConfigError(f"Error loading config from {config_path}: {e}") from e

    if not isinstance(file_config, dict):
        raise ConfigError(f"{config_path} must contain a JSON object.")

    config = Config()
    for key, value in file_config.items():
        if key not in FIELD_NAMES:
            logger.warning("Unknown option '%s' in %s. Ignoring.", key, config_path)
            continue
        if _validate(key, value, config_path):
            if key in ('retryDelay', 'timeout'):
                value = float(value)
            setattr(config, FIELD_NAMES[key], value)

    base_dir = os.path.dirname(os.path.abspath(config_path))
    config.language_source = os.path.normpath(os.path.join(base_dir, config.language_source))
    config.output_dir = os.path.normpath(os.path.join(base_dir, config.output_dir))

    return config, created
