#!/usr/bin/env python3

from pathlib import Path

from buildcfg.script_context import ScriptCtx
from buildcfg.entry import run_script
from buildcfg.loader import dump_config
import buildcfg.utils as utils


def script(ctx: ScriptCtx) -> None:
    output = Path(utils.require_env("OUTPUT"))
    if not output.is_absolute():
        output = ctx.project_dir / output

    with ctx.section("Export configuration"):
        written = dump_config(ctx.config, output)
        ctx.logger.info(f"Wrote {written}")


if __name__ == "__main__":
    run_script(script, required_env=("OUTPUT",))
