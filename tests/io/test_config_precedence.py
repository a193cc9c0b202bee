from __future__ import annotations

from pathlib import Path

import pytest

from evalplot import __version__
from evalplot.io.config import RuntimeSettings
from evalplot.io.errors import ConfigError

ENV_KEYS = [
    "EVALPLOT_SDK_PATH",
    "EVALPLOT_RSCRIPT",
    "EVALPLOT_OPEN_COMMAND",
    "EVALPLOT_PRODUCT_NAME",
    "EVALPLOT_PRODUCT_VERSION",
]


def _write_evalplot_toml(tmp: Path, content: str) -> Path:
    p = tmp / "evalplot.toml"
    p.write_text(content)
    return p


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch) -> None:
    for key in ENV_KEYS:
        monkeypatch.delenv(key, raising=False)


def test_runtime_settings_precedence_env_over_toml(tmp_path: Path, monkeypatch) -> None:
    # Arrange TOML
    _write_evalplot_toml(
        tmp_path,
        """
        [runtime]
        sdk_path = "/opt/toml"
        rscript = "Rscript-toml"
        product_name = "TomlProduct"
        """.strip(),
    )
    # Ensure cwd for RuntimeSettings.from_toml() search
    monkeypatch.chdir(tmp_path)
    # Arrange ENV that should override TOML
    monkeypatch.setenv("EVALPLOT_SDK_PATH", "/opt/env")
    monkeypatch.setenv("EVALPLOT_RSCRIPT", "Rscript-env")

    # Act
    s = RuntimeSettings.load()

    # Assert precedence: env > TOML
    assert s.sdk_path == "/opt/env"
    assert s.rscript == "Rscript-env"
    assert s.product_name == "TomlProduct"  # TOML only


def test_runtime_settings_from_toml_when_no_env(tmp_path: Path, monkeypatch) -> None:
    _write_evalplot_toml(
        tmp_path,
        """
        [runtime]
        sdk_path = "/opt/openbr"
        open_command = "evince"
        product_version = "9.9"
        """.strip(),
    )
    monkeypatch.chdir(tmp_path)

    s = RuntimeSettings.load()

    assert s.sdk_path == "/opt/openbr"
    assert s.open_command == "evince"
    assert s.product_version == "9.9"
    assert s.rscript == "Rscript"


def test_runtime_settings_from_pyproject_tool_table(tmp_path: Path, monkeypatch) -> None:
    (tmp_path / "pyproject.toml").write_text(
        """
        [project]
        name = "x"

        [tool.evalplot.runtime]
        rscript = "/usr/bin/Rscript"
        """.strip()
    )
    monkeypatch.chdir(tmp_path)

    assert RuntimeSettings.load().rscript == "/usr/bin/Rscript"


def test_runtime_settings_defaults_when_no_config(tmp_path: Path, monkeypatch) -> None:
    # No TOML, no env
    monkeypatch.chdir(tmp_path)

    s = RuntimeSettings.load()

    assert s.sdk_path == "/usr/local"
    assert s.rscript == "Rscript"
    assert s.open_command is None
    assert s.product_name == "evalplot"
    assert s.product_version == __version__


def test_explicit_config_path_must_exist(tmp_path: Path) -> None:
    with pytest.raises(ConfigError, match="not found"):
        RuntimeSettings.load(tmp_path / "missing.toml")


def test_explicit_config_path_must_parse(tmp_path: Path) -> None:
    bad = _write_evalplot_toml(tmp_path, "[runtime\nsdk_path=")
    with pytest.raises(ConfigError, match="failed to read"):
        RuntimeSettings.load(bad)
