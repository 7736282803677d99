from __future__ import annotations

import pytest

from contentsync.config import ConfigurationError, env_flag, optional_env_var


def test_optional_env_var_treats_blank_as_unset(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_VAR", "  ")

    assert optional_env_var("EXAMPLE_VAR") is None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("1", True), ("Yes", True), ("off", False), ("false", False)],
)
def test_env_flag_parses_booleans(
    monkeypatch: pytest.MonkeyPatch, raw: str, expected: bool
) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", raw)

    assert env_flag("EXAMPLE_FLAG") is expected


def test_env_flag_rejects_garbage(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("EXAMPLE_FLAG", "maybe")

    with pytest.raises(ConfigurationError, match="EXAMPLE_FLAG"):
        env_flag("EXAMPLE_FLAG")
