"""Tests for building the CDN linker configuration."""

from pathlib import Path

import pytest
from pelican.settings import get_settings_from_file

from .processor import DEPLOY, PREVIEW, CDNLinkerConfig
from .settings import as_bool, load_config, load_env_variable, load_mode

SITE_ROOT = Path(__file__).parent.parent.parent


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for key in ("CDN_LINKER_URL", "CDN_LINKER_ENABLED", "CDN_LINKER_CONTEXT"):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def env_file(tmp_path):
    return tmp_path / ".env"


def test_defaults(env_file):
    config = load_config({}, env_path=env_file)

    assert config == CDNLinkerConfig()
    assert load_mode({}, env_path=env_file) == DEPLOY


def test_settings_are_mapped(env_file):
    settings = {
        "CDN_URL": "https://cdn.example.com/",
        "CDN_ENABLE_IMAGES": True,
        "CDN_ENABLE_FONTS": "yes",
        "CDN_ENABLE_SITEMAP": "false",
        "CDN_CONTEXT": "Preview",
    }

    config = load_config(settings, env_path=env_file)

    assert config.cdn_url == "https://cdn.example.com/"
    assert config.enable_images is True
    assert config.enable_fonts is True
    assert config.enable_sitemap is False
    assert config.enable_css is False
    assert load_mode(settings, env_path=env_file) == PREVIEW


def test_config_is_immutable():
    config = CDNLinkerConfig(cdn_url="cdn.example.com")

    with pytest.raises(AttributeError):
        config.cdn_url = "other.example.com"


@pytest.mark.parametrize(
    "value,expected",
    [
        (True, True),
        (False, False),
        (None, False),
        (1, True),
        ("true", True),
        ("False", False),
        ("0", False),
        (" off ", False),
        ("", False),
    ],
)
def test_as_bool(value, expected):
    assert as_bool(value) is expected


def test_environment_overrides_settings(monkeypatch, env_file):
    monkeypatch.setenv("CDN_LINKER_URL", "https://env-cdn.example.com")
    monkeypatch.setenv("CDN_LINKER_CONTEXT", "instant-preview")
    settings = {"CDN_URL": "https://cdn.example.com", "CDN_CONTEXT": "deploy"}

    assert load_config(settings, env_path=env_file).cdn_url == "https://env-cdn.example.com"
    assert load_mode(settings, env_path=env_file) == "instant-preview"


def test_environment_can_disable(monkeypatch, env_file):
    monkeypatch.setenv("CDN_LINKER_ENABLED", "false")

    config = load_config({"CDN_URL": "https://cdn.example.com"}, env_path=env_file)

    assert config.cdn_url == ""


def test_env_file_is_read(env_file):
    env_file.write_text("# CDN\nCDN_LINKER_URL = https://file-cdn.example.com\nOTHER=1\n")

    assert load_env_variable("CDN_LINKER_URL", env_file) == "https://file-cdn.example.com"
    assert load_env_variable("MISSING", env_file) is None
    assert load_config({}, env_path=env_file).cdn_url == "https://file-cdn.example.com"


def test_environment_wins_over_env_file(monkeypatch, env_file):
    env_file.write_text("CDN_LINKER_URL=https://file-cdn.example.com\n")
    monkeypatch.setenv("CDN_LINKER_URL", "https://env-cdn.example.com")

    assert load_env_variable("CDN_LINKER_URL", env_file) == "https://env-cdn.example.com"


def test_missing_env_file(env_file):
    assert load_env_variable("CDN_LINKER_URL", env_file) is None


def test_site_configs(env_file):
    preview = get_settings_from_file(str(SITE_ROOT / "pelicanconf.py"))
    publish = get_settings_from_file(str(SITE_ROOT / "publishconf.py"))

    assert "cdn_linker" in publish["PLUGINS"]
    assert load_mode(preview, env_path=env_file) == PREVIEW
    assert load_mode(publish, env_path=env_file) == DEPLOY

    config = load_config(publish, env_path=env_file)
    assert config.cdn_url == "https://cdn.example.com/"
    assert config.enable_images is True
    assert config.enable_xml_feed is True
    assert publish["SITEURL"] == "https://site.example"
