import pytest

from pidwatch.config import ConfigurationError, runtime
from pidwatch.config.dotenv_loader import DotenvLoader


@pytest.fixture
def reset_runtime_state(monkeypatch):
    monkeypatch.setattr(runtime, "_DEFAULT_VALUES", None)
    yield


def test_load_default_values_prefers_first_file(monkeypatch, tmp_path, reset_runtime_state):
    first = tmp_path / "first.env"
    first.write_text("SHARED=first\n# comment\nexport ONLY_FIRST='quoted'\n")
    second = tmp_path / "second.env"
    second.write_text("SHARED=second\nONLY_SECOND=2\n")
    monkeypatch.setattr(runtime, "_DOTENV_CANDIDATES", (first, second, tmp_path / "missing.env"))

    defaults = runtime._load_default_values()

    assert defaults == {"SHARED": "first", "ONLY_FIRST": "quoted", "ONLY_SECOND": "2"}
    # Cached value is reused without re-reading files
    assert runtime._load_default_values() is defaults


def test_dotenv_loader_missing_file(tmp_path):
    assert DotenvLoader.load_from_file(tmp_path / "nope.env") == {}


def test_env_str_falls_back_to_defaults(monkeypatch):
    monkeypatch.setattr(runtime, "_DEFAULT_VALUES", {"FALLBACK": " spaced "})
    monkeypatch.delenv("FALLBACK", raising=False)
    assert runtime.env_str("FALLBACK") == "spaced"

    monkeypatch.setenv("BLANK", "   ")
    assert runtime.env_str("BLANK", or_value="dflt") == "dflt"

    with pytest.raises(ConfigurationError, match="is not set"):
        runtime.env_str("MISSING_REQUIRED", required=True)


def test_env_float(monkeypatch):
    monkeypatch.setenv("FLOAT_VALUE", "0.5")
    assert runtime.env_float("FLOAT_VALUE") == 0.5
    assert runtime.env_float("UNSET_FLOAT", or_value=1.5) == 1.5

    monkeypatch.setenv("FLOAT_VALUE", "soon")
    with pytest.raises(ConfigurationError, match="must be a float"):
        runtime.env_float("FLOAT_VALUE")


@pytest.mark.parametrize("raw, expected", [("1", True), ("Yes", True), ("on", True), ("0", False), ("off", False)])
def test_env_bool(monkeypatch, raw, expected):
    monkeypatch.setenv("BOOL_VALUE", raw)
    assert runtime.env_bool("BOOL_VALUE") is expected


def test_env_bool_rejects_garbage(monkeypatch):
    monkeypatch.setenv("BOOL_VALUE", "maybe")
    with pytest.raises(ConfigurationError, match="must be a boolean"):
        runtime.env_bool("BOOL_VALUE")


def test_env_seconds_rejects_negative(monkeypatch):
    monkeypatch.setenv("DURATION", "-1")
    with pytest.raises(ConfigurationError, match="non-negative"):
        runtime.env_seconds("DURATION")


@pytest.mark.parametrize("raw", ["inf", "nan"])
def test_env_seconds_rejects_non_finite(monkeypatch, raw):
    monkeypatch.setenv("DURATION", raw)
    with pytest.raises(ConfigurationError, match="finite"):
        runtime.env_seconds("DURATION")
