import os
import json
import pytest
from langfill.config import CONFIG_FILE_NAME, Config, get_default_config, load_config, save_config
from langfill.errors import ConfigError

def test_get_default_config():
    config = get_default_config()
    assert config['languages'] == ["en", "es", "fr", "ar", "lzh", "ru"]
    assert config['languageSource'] == './src/languages/pt.json'
    assert config['outputDir'] == './src/languages'
    assert config['azureApiKey'] == 'YOUR_AZURE_API_KEY'
    assert config['azureApiRegion'] == 'YOUR_AZURE_API_REGION'
    assert config['retryCount'] == 3
    assert config['retryDelay'] == 1000
    assert config['protectPlaceholders'] is False

def test_missing_config_is_created(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    config, created = load_config()

    assert created is True
    config_file = tmp_path / CONFIG_FILE_NAME
    assert json.loads(config_file.read_text(encoding="utf-8")) == get_default_config()
    assert config.languages == ["en", "es", "fr", "ar", "lzh", "ru"]
    assert config.language_source == os.path.normpath(str(tmp_path / "src" / "languages" / "pt.json"))
    assert config.output_dir == os.path.normpath(str(tmp_path / "src" / "languages"))

def test_save_and_load_config(tmp_path):
    config_file = tmp_path / "translator.config.json"
    save_config(str(config_file), {
        "languages": ["de", "it"],
        "languageSource": "locales/en.json",
        "outputDir": "locales",
        "azureApiKey": "key",
        "azureApiRegion": "westeurope",
        "retryCount": 5,
        "retryDelay": 250,
        "timeout": 10,
        "provider": "google",
        "whitelist": ["MyCompany"],
        "protectPlaceholders": True
    })

    config, created = load_config(str(config_file))

    assert created is False
    assert config.languages == ["de", "it"]
    assert config.language_source == os.path.normpath(str(tmp_path / "locales" / "en.json"))
    assert config.target_file("de") == os.path.join(os.path.normpath(str(tmp_path / "locales")), "de.json")
    assert config.azure_api_key == "key"
    assert config.azure_api_region == "westeurope"
    assert config.retry_count == 5
    assert config.retry_delay_seconds == 0.25
    assert config.timeout == 10.0
    assert config.provider == "google"
    assert config.whitelist == ["MyCompany"]
    assert config.protect_placeholders is True

@pytest.mark.parametrize("key,value,field,default", [
    ("retryCount", 0, "retry_count", 3),
    ("retryCount", "3", "retry_count", 3),
    ("retryDelay", -1, "retry_delay", 1000),
    ("timeout", 0, "timeout", 30),
    ("languages", "en", "languages", ["en", "es", "fr", "ar", "lzh", "ru"]),
    ("provider", "deepl", "provider", "azure"),
    ("azureApiKey", "", "azure_api_key", "YOUR_AZURE_API_KEY"),
    ("protectPlaceholders", "yes", "protect_placeholders", False),
])
def test_invalid_values_keep_defaults(tmp_path, caplog, key, value, field, default):
    config_file = tmp_path / "translator.config.json"
    save_config(str(config_file), {key: value})

    config, _ = load_config(str(config_file))

    assert getattr(config, field) == default
    assert f"'{key}'" in caplog.text

def test_unknown_keys_are_ignored(tmp_path, caplog):
    config_file = tmp_path / "translator.config.json"
    save_config(str(config_file), {"colour": "blue"})

    config, _ = load_config(str(config_file))

    assert not hasattr(config, "colour")
    assert "Unknown option 'colour'" in caplog.text

def test_load_config_invalid_json(tmp_path):
    config_file = tmp_path / "translator.config.json"
    with open(config_file, 'w') as f:
        f.write("module.exports = {}")

    with pytest.raises(ConfigError):
        load_config(str(config_file))

def test_load_config_not_an_object(tmp_path):
    config_file = tmp_path / "translator.config.json"
    save_config(str(config_file), ["en"])

    with pytest.raises(ConfigError):
        load_config(str(config_file))

def test_config_defaults_are_independent():
    first = Config()
    first.languages.append("de")
    assert "de" not in Config().languages
