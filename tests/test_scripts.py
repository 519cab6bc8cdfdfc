"""
End-to-end runs of the scripts under scripts/ through run_script.

Console output goes to the shared Rich console; assertions read the DEBUG
transcript written to the workspace log file instead.
"""
import importlib.util
import sys
from pathlib import Path

import pytest
from packaging.version import Version

from buildcfg import utils
from buildcfg.entry import run_script
from buildcfg.loader import load_config
from buildcfg.log import get_console
from buildcfg.project import default_project_config

SCRIPTS_DIR = Path(__file__).resolve().parent.parent / "scripts"


def load_script(name: str):
    path = SCRIPTS_DIR / f"{name}.py"
    spec = importlib.util.spec_from_file_location(f"scripts_{name}", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def workspace(tmp_path, monkeypatch, project_dir) -> Path:
    ws = tmp_path / "ws"
    monkeypatch.setenv("PROJECT_DIR", str(project_dir))
    monkeypatch.setenv("WORKSPACE", str(ws))
    return ws


def run(name: str, monkeypatch, **kwargs) -> None:
    monkeypatch.setattr(sys, "argv", [str(SCRIPTS_DIR / f"{name}.py")])
    run_script(load_script(name).script, **kwargs)


def transcript(workspace: Path) -> str:
    logs = sorted((workspace / ".buildcfg-logs").glob("*.log"))
    assert logs, "no log file written"
    return logs[-1].read_text(encoding="utf-8")


def test_check_config_ok(workspace, monkeypatch):
    run("check_config", monkeypatch)
    log = transcript(workspace)
    assert "Validate configuration: SUCCESS" in log
    assert "Check project directories: SUCCESS" in log
    assert "2 solidity and 5 vyper compiler(s) configured" in log
    assert "Check local compilers" not in log


def test_check_config_missing_tests_dir(workspace, monkeypatch, project_dir):
    (project_dir / "test").rmdir()
    with pytest.raises(SystemExit) as exc:
        run("check_config", monkeypatch)
    assert exc.value.code == 1
    assert "Missing project directories: tests" in transcript(workspace)
    assert "Check project directories: FAILED" in transcript(workspace)


def test_check_config_local_compilers(workspace, monkeypatch):
    installed = {"solc": Version("0.8.11"), "vyper": Version("0.2.12")}
    monkeypatch.setattr(utils, "get_cmd_version", installed.__getitem__)
    monkeypatch.setenv("CHECK_COMPILERS", "1")
    run("check_config", monkeypatch)
    log = transcript(workspace)
    assert "Found solc 0.8.11" in log
    assert "Found vyper 0.2.12" in log


def test_check_config_unconfigured_compiler(workspace, monkeypatch):
    installed = {"solc": Version("0.7.6"), "vyper": Version("0.2.12")}
    monkeypatch.setattr(utils, "get_cmd_version", installed.__getitem__)
    monkeypatch.setenv("CHECK_COMPILERS", "1")
    with pytest.raises(SystemExit):
        run("check_config", monkeypatch)
    assert "solc 0.7.6 is not one of the configured solidity releases" in transcript(workspace)


def test_check_config_invalid_file_exits(workspace, monkeypatch, project_dir):
    (project_dir / "buildcfg.yaml").write_text("vyper: {compilers: ['0.3.3', '0.3.3']}\n")
    with pytest.raises(SystemExit) as exc:
        run("check_config", monkeypatch)
    assert exc.value.code == 1


def test_export_config(workspace, monkeypatch, project_dir):
    monkeypatch.setenv("OUTPUT", "exported/buildcfg.json")
    run("export_config", monkeypatch, required_env=("OUTPUT",))
    out = project_dir / "exported" / "buildcfg.json"
    assert load_config(path=out) == default_project_config()


def test_export_config_requires_output(workspace, monkeypatch):
    with pytest.raises(SystemExit, match="OUTPUT"):
        run("export_config", monkeypatch, required_env=("OUTPUT",))


def test_export_uses_project_file(workspace, monkeypatch, project_dir):
    (project_dir / "buildcfg.yaml").write_text("defaultNetwork: localhost\nvyper: 0.3.3\n")
    monkeypatch.setenv("OUTPUT", str(project_dir / "out.yaml"))
    run("export_config", monkeypatch, required_env=("OUTPUT",))
    cfg = load_config(path=project_dir / "out.yaml")
    assert cfg.default_network == "localhost"
    assert cfg.vyper_versions == ["0.3.3"]


def test_resolve_compilers(workspace, monkeypatch):
    run("resolve_compilers", monkeypatch)
    assert "Resolved 3 source file(s)" in transcript(workspace)


def test_resolve_compilers_unmatched(workspace, monkeypatch, project_dir):
    (project_dir / "contracts" / "Future.sol").write_text("pragma solidity ^0.9.0;\n")
    with pytest.raises(SystemExit) as exc:
        run("resolve_compilers", monkeypatch)
    assert exc.value.code == 1
    log = transcript(workspace)
    assert "No configured solidity compiler satisfies '^0.9.0'" in log
    assert "Resolve compilers: FAILED" in log


def test_show_config(workspace, monkeypatch):
    run("show_config", monkeypatch)
    assert "Render configuration: SUCCESS" in transcript(workspace)


def test_dry_run_skips_script(workspace, monkeypatch):
    monkeypatch.setenv("DRY_RUN", "1")
    called = []
    monkeypatch.setattr(sys, "argv", ["dry.py"])
    run_script(called.append)
    assert called == []


def test_section_counters(workspace, monkeypatch):
    seen = {}

    def script(ctx):
        with ctx.section("first", expected=1):
            pass
        with pytest.raises(ValueError):
            with ctx.section("second"):
                raise ValueError("boom")
        seen.update(
            total=ctx.sections_total, ok=ctx.sections_ok, failed=ctx.sections_failed
        )

    monkeypatch.setattr(sys, "argv", ["counters.py"])
    run_script(script)
    assert seen == {"total": 2, "ok": 1, "failed": 1}
    log = transcript(workspace)
    assert "second: FAILED" in log
    assert "vs expected 1.0s" in log


def test_network_override_reaches_context(workspace, monkeypatch):
    monkeypatch.setenv("HARDHAT_NETWORK", "localhost")
    seen = []
    monkeypatch.setattr(sys, "argv", ["network.py"])
    run_script(lambda ctx: seen.append(ctx.config.default_network))
    assert seen == ["localhost"]


def test_fail_inside_section_counts_as_failed(workspace, monkeypatch):
    seen = {}

    def script(ctx):
        try:
            with ctx.section("doomed"):
                ctx.fail("nothing to check")
        finally:
            seen.update(failed=ctx.sections_failed, ok=ctx.sections_ok)

    monkeypatch.setattr(sys, "argv", ["doomed.py"])
    with pytest.raises(SystemExit) as exc:
        run_script(script)
    assert exc.value.code == 1
    assert seen == {"failed": 1, "ok": 0}
    log = transcript(workspace)
    assert "nothing to check" in log
    assert "doomed: FAILED" in log


def test_keyboard_interrupt_exits_130(workspace, monkeypatch):
    def script(ctx):
        raise KeyboardInterrupt

    monkeypatch.setattr(sys, "argv", ["interrupted.py"])
    with pytest.raises(SystemExit) as exc:
        run_script(script)
    assert exc.value.code == 130


def test_script_error_exits_1_with_traceback(workspace, monkeypatch):
    printed = []

    def script(ctx):
        raise RuntimeError("unexpected")

    console = get_console()
    monkeypatch.setattr(console, "print_exception", lambda **kw: printed.append(kw))
    monkeypatch.setattr(sys, "argv", ["broken.py"])
    with pytest.raises(SystemExit) as exc:
        run_script(script)
    assert exc.value.code == 1
    assert printed == [{}]
