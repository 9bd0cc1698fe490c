"""Tests for config serialization (save/load)."""

import json
import tempfile
from pathlib import Path

import pytest

from bevelfield.errors import ConfigError, ConfigLoadError
from bevelfield.serialization import (
    SCHEMA_VERSION,
    config_from_dict,
    config_to_dict,
    load_config,
    save_config,
)
from bevelfield.types import BevelConfig


def test_roundtrip_default_config():
    """Test save/load with default settings."""
    config = BevelConfig()

    with tempfile.TemporaryDirectory() as tmpdir:
        filepath = Path(tmpdir) / "bevel.json"
        save_config(config, filepath)

        assert filepath.exists()
        assert load_config(filepath) == config


def test_roundtrip_custom_config():
    """Test save/load with every section changed."""
    config = BevelConfig(
        method="jacobi",
        adaptive_convergence=True,
        convergence_threshold=1e-6,
        max_iterations=1200,
        use_working_resolution=False,
        min_size=300,
        max_size=800,
        gradient_proportion=0.25,
        contrast_exponent=1.6,
        use_neighbor_table=False,
        connectivity=4,
    )

    with tempfile.TemporaryDirectory() as tmpdir:
        filepath = Path(tmpdir) / "bevel.json"
        save_config(config, str(filepath))
        loaded = load_config(str(filepath))

    assert loaded == config
    assert loaded.method == "jacobi"
    assert loaded.connectivity == 4


def test_file_layout():
    with tempfile.TemporaryDirectory() as tmpdir:
        filepath = Path(tmpdir) / "bevel.json"
        save_config(BevelConfig(method="gauss-seidel"), filepath)
        data = json.loads(filepath.read_text())

    assert data['schema_version'] == SCHEMA_VERSION
    assert 'created_at' in data
    assert data['config']['method'] == "gauss-seidel"
    assert data['config']['omega'] == 1.9


def test_partial_config_uses_defaults():
    config = config_from_dict({'method': 'sor', 'working_size': 256})
    assert config.working_size == 256
    assert config.working_iterations == BevelConfig().working_iterations


def test_dict_roundtrip():
    config = BevelConfig(contrast_exponent=2.0)
    assert config_from_dict(config_to_dict(config)) == config


def test_unknown_key_rejected():
    with pytest.raises(ConfigLoadError, match="Unknown config keys"):
        config_from_dict({'method': 'sor', 'iterations_per_frame': 3})


def test_invalid_value_rejected():
    with pytest.raises(ConfigLoadError):
        config_from_dict({'method': 'multigrid'})
    with pytest.raises(ConfigLoadError):
        config_from_dict({'omega': 2.5})


def test_load_error_is_config_error():
    assert issubclass(ConfigLoadError, ConfigError)


def test_missing_file():
    with tempfile.TemporaryDirectory() as tmpdir:
        with pytest.raises(FileNotFoundError):
            load_config(Path(tmpdir) / "nope.json")


@pytest.mark.parametrize("content", [
    "{not json",
    json.dumps([1, 2, 3]),
    json.dumps({'schema_version': SCHEMA_VERSION}),
    json.dumps({'schema_version': '9.9', 'config': {}}),
    json.dumps({'schema_version': SCHEMA_VERSION, 'config': "sor"}),
])
def test_bad_files_rejected(content):
    with tempfile.TemporaryDirectory() as tmpdir:
        filepath = Path(tmpdir) / "bevel.json"
        filepath.write_text(content)
        with pytest.raises(ConfigLoadError):
            load_config(filepath)


@pytest.mark.parametrize("data", [
    {'working_iterations': 40.0},
    {'max_iterations': 500.5},
    {'working_size': "500"},
    {'min_size': True},
    {'connectivity': 8.0},
    {'contrast_exponent': "1.0"},
    {'omega': None},
])
def test_wrong_numeric_types_rejected(data):
    """Floats, strings and bools where an integer is expected fail at load time."""
    with pytest.raises(ConfigLoadError, match="must be"):
        config_from_dict(data)


@pytest.mark.parametrize("data", [
    {'use_neighbor_table': "no"},
    {'use_working_resolution': "false"},
    {'adaptive_convergence': 1},
])
def test_non_boolean_flags_rejected(data):
    with pytest.raises(ConfigLoadError, match="true or false"):
        config_from_dict(data)


def test_integers_accepted_for_real_fields():
    config = config_from_dict({'contrast_exponent': 2, 'gradient_proportion': 1})
    assert config.contrast_exponent == 2
    assert config.gradient_proportion == 1


def test_wrong_type_in_file_rejected():
    with tempfile.TemporaryDirectory() as tmpdir:
        filepath = Path(tmpdir) / "bevel.json"
        filepath.write_text(json.dumps({
            'schema_version': SCHEMA_VERSION,
            'config': {'working_iterations': 40.0, 'working_size': 32},
        }))
        with pytest.raises(ConfigLoadError):
            load_config(filepath)
