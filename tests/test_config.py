from pathlib import Path

import pytest

from webacl.codec.turtle import DEFAULT_BASE_IRI
from webacl.core.config import AclSettings, load_settings
from webacl.utils.errors import ConfigurationError


def test_load_yaml_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    config_path = tmp_path / "webacl.yml"
    config_path.write_text(
        "default_access_to: https://pod.example/notes/\n"
        "subject_base: grant-1\n"
        "log_level: debug\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("WEBACL_CONFIG", str(config_path))
    settings = load_settings()
    assert settings.default_access_to == "https://pod.example/notes/"
    assert settings.log_level == "DEBUG"
    assert settings.base_iri == DEFAULT_BASE_IRI

    document = settings.new_document()
    assert document.add_rule("Read", "https://alice.example/#me") == "grant-1"


def test_load_toml_config(tmp_path: Path) -> None:
    config_path = tmp_path / "webacl.toml"
    config_path.write_text('base_iri = "https://pod.example/.acl"\n', encoding="utf-8")
    settings = load_settings(config_path)
    assert settings.base_iri == "https://pod.example/.acl"
    assert settings.default_access_to is None


def test_defaults_when_no_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("WEBACL_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)
    assert load_settings() == AclSettings()


@pytest.mark.parametrize(
    "name, content",
    [
        ("bad.yml", "log_level: LOUD\n"),
        ("bad.yaml", "subject_base: 'has spaces'\n"),
        ("list.yml", "- one\n- two\n"),
        ("broken.yml", "key: [unclosed\n"),
        ("settings.ini", "[webacl]\n"),
    ],
)
def test_invalid_configs(tmp_path: Path, name: str, content: str) -> None:
    path = tmp_path / name
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ConfigurationError):
        load_settings(path)


def test_missing_explicit_file(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        load_settings(tmp_path / "absent.yml")
