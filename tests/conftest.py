"""Shared fixtures for the form-validation tests."""
import pytest

from form_validation import ConfigLoader


@pytest.fixture
def write_config(tmp_path):
    """Write a YAML override file and return its path."""
    def _write(content):
        path = tmp_path / "overrides.yaml"
        path.write_text(content)
        return path
    return _write


@pytest.fixture
def concurrent_config(write_config):
    """ConfigLoader switching the engine to concurrent evaluation."""
    return ConfigLoader(write_config("evaluation_mode: concurrent\n"))
