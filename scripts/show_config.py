#!/usr/bin/env python3
"""
Print the effective build configuration of the project in PROJECT_DIR
(default: the current directory).
"""

from rich.table import Table

from buildcfg.script_context import ScriptCtx
from buildcfg.entry import run_script
from buildcfg.log import get_console


def paths_table(ctx: ScriptCtx) -> Table:
    table = Table(title=f"Paths (default network: {ctx.config.default_network})")
    table.add_column("Name", style="bold")
    table.add_column("Configured")
    table.add_column("Resolved", style="dim")
    resolved = ctx.paths
    for name, value in ctx.config.paths.to_dict().items():
        table.add_row(name, value, str(getattr(resolved, name)))
    return table


def compilers_table(ctx: ScriptCtx) -> Table:
    table = Table(title="Compilers")
    table.add_column("Family", style="bold")
    table.add_column("Version")
    table.add_column("Optimizer")
    table.add_column("Bytecode hash")
    for compiler in ctx.config.solidity:
        settings = compiler.settings
        if settings is None:
            table.add_row("solidity", compiler.version, "-", "-")
            continue
        optimizer = (
            f"on, {settings.optimizer.runs} runs" if settings.optimizer.enabled else "off"
        )
        table.add_row("solidity", compiler.version, optimizer, settings.metadata.bytecode_hash)
    for compiler in ctx.config.vyper:
        table.add_row("vyper", compiler.version, "-", "-")
    return table


def script(ctx: ScriptCtx) -> None:
    console = get_console()
    with ctx.section("Render configuration"):
        console.print(paths_table(ctx))
        console.print(compilers_table(ctx))


if __name__ == "__main__":
    run_script(script)
