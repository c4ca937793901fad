"""Tests for config.py: YAML defaults and environment overrides."""

from __future__ import annotations

import pytest

from adaptive_quiz.config import DEFAULT_SESSION_LENGTH, load_settings
from adaptive_quiz.models import BKTParameters


def test_defaults_without_file(tmp_path):
    settings = load_settings(tmp_path / "missing.yaml", environ={})
    assert settings.service_url == "http://127.0.0.1:8080"
    assert settings.timeout == 10.0
    assert settings.session_length == DEFAULT_SESSION_LENGTH
    assert settings.bkt_parameters is None


def test_reads_yaml(tmp_path):
    path = tmp_path / "quiz.yaml"
    path.write_text(
        "service_url: http://scoring.local:9000/\n"
        "timeout: 3\n"
        "session_length: 12\n"
        "bkt: {l0: 0.01, t: 0.1, s: 0.05, g: 0.33}\n",
        encoding="utf-8",
    )
    settings = load_settings(path, environ={})
    assert settings.service_url == "http://scoring.local:9000"
    assert settings.timeout == 3.0
    assert settings.session_length == 12
    assert settings.bkt_parameters == BKTParameters(l0=0.01, t=0.1, s=0.05, g=0.33)


def test_environment_wins(tmp_path):
    path = tmp_path / "quiz.yaml"
    path.write_text("service_url: http://from-yaml\nsession_length: 12\n", encoding="utf-8")
    settings = load_settings(
        path,
        environ={
            "ADAPTIVE_QUIZ_SERVICE_URL": "http://from-env",
            "ADAPTIVE_QUIZ_SESSION_LENGTH": "5",
            "ADAPTIVE_QUIZ_TIMEOUT": "2.5",
        },
    )
    assert settings.service_url == "http://from-env"
    assert settings.session_length == 5
    assert settings.timeout == 2.5


def test_config_path_from_environment(tmp_path):
    path = tmp_path / "other.yaml"
    path.write_text("session_length: 8\n", encoding="utf-8")
    settings = load_settings(environ={"ADAPTIVE_QUIZ_CONFIG": str(path)})
    assert settings.session_length == 8


def test_invalid_number_names_variable(tmp_path):
    with pytest.raises(ValueError, match="ADAPTIVE_QUIZ_TIMEOUT"):
        load_settings(tmp_path / "missing.yaml", environ={"ADAPTIVE_QUIZ_TIMEOUT": "soon"})


def test_session_length_must_be_positive(tmp_path):
    with pytest.raises(ValueError):
        load_settings(tmp_path / "missing.yaml", environ={"ADAPTIVE_QUIZ_SESSION_LENGTH": "0"})


def test_incomplete_bkt_block(tmp_path):
    path = tmp_path / "quiz.yaml"
    path.write_text("bkt: {l0: 0.2}\n", encoding="utf-8")
    with pytest.raises(ValueError, match="missing"):
        load_settings(path, environ={})
