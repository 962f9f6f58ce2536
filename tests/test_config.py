import pytest

from repcount_client import config


@pytest.mark.parametrize("raw, expected", [
    (None, 2.0),
    ("", 2.0),
    ("3.5", 3.5),
    ("fast", 2.0),
    ("inf", 2.0),
    ("-inf", 2.0),
    ("nan", 2.0),
    ("1e400", 2.0),
])
def test_env_float(monkeypatch, raw, expected):
    if raw is None:
        monkeypatch.delenv("REPCOUNT_TEST_VALUE", raising=False)
    else:
        monkeypatch.setenv("REPCOUNT_TEST_VALUE", raw)
    assert config._env_float("REPCOUNT_TEST_VALUE", 2.0) == expected


def test_env_int_truncates(monkeypatch):
    monkeypatch.setenv("REPCOUNT_TEST_VALUE", "4.9")
    assert config._env_int("REPCOUNT_TEST_VALUE", 1) == 4


@pytest.mark.parametrize("raw", ["inf", "-Infinity", "nan"])
def test_env_int_non_finite_uses_default(monkeypatch, raw):
    monkeypatch.setenv("REPCOUNT_TEST_VALUE", raw)
    assert config._env_int("REPCOUNT_TEST_VALUE", 5) == 5


def test_defaults_are_sane():
    assert config.BACKEND_URL.startswith("http")
    assert config.COACH_EVERY_N_REPS >= 1
