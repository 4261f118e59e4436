"""
Tests for configuration
"""

import os

import pytest

from document_scanner.config import PRIMARY, RETRY, ScannerConfig
from document_scanner.errors import ConfigError

DOCSCAN_VARS = [
    'DOCSCAN_MAX_DIMENSION', 'DOCSCAN_APPROX_EPSILON', 'DOCSCAN_MIN_ASPECT', 'DOCSCAN_MAX_ASPECT',
    'DOCSCAN_MAX_SYMMETRY_DIFF', 'DOCSCAN_MAX_ANGLE_DEVIATION', 'DOCSCAN_HOUGH_THRESHOLD',
    'DOCSCAN_HOUGH_MAX_GAP', 'DOCSCAN_FALLBACK_INSET',
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    for name in DOCSCAN_VARS:
        monkeypatch.delenv(name, raising=False)
    # keep a stray .env in the checkout from leaking into the tests
    monkeypatch.chdir(tmp_path)
    yield
    # load_dotenv writes straight to os.environ
    for name in DOCSCAN_VARS:
        os.environ.pop(name, None)


class TestDefaults:
    """Default parameter sets"""

    def test_primary_preset(self):
        assert PRIMARY.max_dimension == 1000
        assert PRIMARY.equalize
        assert PRIMARY.blur_kernel == 3
        assert PRIMARY.adaptive

    def test_retry_preset(self):
        assert not RETRY.adaptive
        assert (RETRY.canny_low, RETRY.canny_high) == (30.0, 100.0)
        assert RETRY.blur_kernel == 5

    def test_scanner_defaults(self):
        config = ScannerConfig()
        assert config.preprocess is PRIMARY
        assert config.validation.max_symmetry_diff == 0.30
        assert config.validation.max_angle_deviation == 30.0
        assert config.hough.threshold == 50
        assert config.fallback_inset == 0.1


class TestFromEnv:
    """ScannerConfig.from_env"""

    def test_no_variables(self):
        config = ScannerConfig.from_env(env_file='missing.env')
        assert config.validation == ScannerConfig().validation

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv('DOCSCAN_MAX_DIMENSION', '800')
        monkeypatch.setenv('DOCSCAN_MAX_ASPECT', '3.0')
        monkeypatch.setenv('DOCSCAN_HOUGH_THRESHOLD', '70')
        monkeypatch.setenv('DOCSCAN_FALLBACK_INSET', '0.05')

        config = ScannerConfig.from_env(env_file='missing.env')

        assert config.preprocess.max_dimension == 800
        assert config.retry_preprocess.max_dimension == 800
        assert config.retry_preprocess.canny_low == 30.0
        assert config.validation.max_aspect == 3.0
        assert config.validation.min_aspect == 0.5
        assert config.hough.threshold == 70
        assert config.fallback_inset == 0.05

    def test_env_file(self, tmp_path):
        env_file = tmp_path / 'scanner.env'
        env_file.write_text('DOCSCAN_MAX_SYMMETRY_DIFF=0.4\n')

        config = ScannerConfig.from_env(env_file=str(env_file))
        assert config.validation.max_symmetry_diff == 0.4

    @pytest.mark.parametrize("name,value", [
        ('DOCSCAN_MAX_DIMENSION', 'big'),
        ('DOCSCAN_MAX_DIMENSION', '0'),
        ('DOCSCAN_HOUGH_THRESHOLD', '1.5'),
        ('DOCSCAN_FALLBACK_INSET', '0.7'),
    ])
    def test_invalid_values(self, monkeypatch, name, value):
        monkeypatch.setenv(name, value)
        with pytest.raises(ConfigError):
            ScannerConfig.from_env(env_file='missing.env')
