"""
Shared fixtures: a throwaway contracts project on disk and a clean environment.
"""
from pathlib import Path

import pytest

from buildcfg import config


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        config.ENV_CONFIG_FILE,
        config.ENV_NETWORK,
        "PROJECT_DIR",
        "WORKSPACE",
        "VERBOSE",
        "DRY_RUN",
        "OUTPUT",
        "CHECK_COMPILERS",
    ):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def project_dir(tmp_path) -> Path:
    """Default layout with one source per pragma style."""
    root = tmp_path / "project"
    contracts = root / "contracts"
    (contracts / "vyper").mkdir(parents=True)
    (root / "test").mkdir()

    (contracts / "Token.sol").write_text(
        "// SPDX-License-Identifier: MIT\n"
        "pragma solidity ^0.8.0;\n\n"
        "contract Token {}\n",
        encoding="utf-8",
    )
    (contracts / "Legacy.sol").write_text(
        "pragma solidity >=0.6.0 <0.8.0;\n\ncontract Legacy {}\n",
        encoding="utf-8",
    )
    (contracts / "vyper" / "Vault.vy").write_text(
        "# @version 0.2.12\n\n@external\ndef deposit():\n    pass\n",
        encoding="utf-8",
    )
    (contracts / "README.md").write_text("not a source\n", encoding="utf-8")
    return root
