#!/usr/bin/env python3
"""
Validate the project build configuration.

Steps:
- Re-validate the loaded configuration and its round trip
- Check that the sources and tests directories exist
- Optionally (CHECK_COMPILERS=1) check the local solc / vyper binaries
"""

from buildcfg.script_context import ScriptCtx
from buildcfg.entry import run_script
from buildcfg.loader import dumps_config, loads_config
from buildcfg import config
from buildcfg import utils


def check_local_compiler(ctx: ScriptCtx, family: str) -> None:
    versions = ctx.config.versions(family)
    if not versions:
        ctx.logger.info(f"No {family} compilers configured, skipping")
        return
    binary = config.COMPILER_BINARIES[family]
    installed = utils.get_cmd_version(binary)
    configured = {utils.parse_semver(v) for v in versions}
    if installed.release[:3] not in configured:
        ctx.fail(
            f"{binary} {installed} is not one of the configured {family} "
            f"releases: {', '.join(versions)}"
        )
    ctx.logger.info(f"Found {binary} {installed} ✔")


def script(ctx: ScriptCtx) -> None:
    # ------------------------------------------------------------------ #
    # Configuration record
    # ------------------------------------------------------------------ #
    with ctx.section("Validate configuration"):
        ctx.config.validate()
        for fmt in ("yaml", "json"):
            if loads_config(dumps_config(ctx.config, fmt), fmt) != ctx.config:
                ctx.fail(f"Configuration does not survive a {fmt} round trip")
        ctx.logger.info(
            f"{len(ctx.config.solidity)} solidity and {len(ctx.config.vyper)} "
            f"vyper compiler(s) configured"
        )

    # ------------------------------------------------------------------ #
    # Project layout; artifacts and cache are created by the build tool
    # ------------------------------------------------------------------ #
    with ctx.section("Check project directories"):
        paths = ctx.paths
        missing = [
            f"{name} ({getattr(paths, name)})"
            for name in ("sources", "tests")
            if not getattr(paths, name).is_dir()
        ]
        if missing:
            ctx.fail(f"Missing project directories: {', '.join(missing)}")

    # ------------------------------------------------------------------ #
    # Local compiler binaries
    # ------------------------------------------------------------------ #
    if utils.env_flag("CHECK_COMPILERS"):
        with ctx.section("Check local compilers"):
            for family in config.COMPILER_BINARIES:
                check_local_compiler(ctx, family)


if __name__ == "__main__":
    run_script(script)
