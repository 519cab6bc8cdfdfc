#!/usr/bin/env python3
"""
Report which configured compiler each contract source selects by its pragma.
"""

from rich.table import Table

from buildcfg.script_context import ScriptCtx
from buildcfg.entry import run_script
from buildcfg.log import get_console
from buildcfg.pragma import resolve_sources


def script(ctx: ScriptCtx) -> None:
    with ctx.section("Resolve compilers"):
        results = resolve_sources(ctx.config, ctx.project_dir)
        sources_dir = ctx.paths.sources

        table = Table(title=f"Sources in {sources_dir}")
        table.add_column("File", style="bold")
        table.add_column("Pragma")
        table.add_column("Compiler")
        for r in results:
            compiler = f"{r.family} {r.version}" if r.version else "[red]none[/]"
            table.add_row(
                str(r.path.relative_to(sources_dir)), r.pragma or "-", compiler
            )
        get_console().print(table)

        unresolved = [r for r in results if r.version is None]
        if unresolved:
            for r in unresolved:
                ctx.logger.error(
                    f"No configured {r.family} compiler satisfies {r.pragma!r} "
                    f"({r.path.relative_to(sources_dir)})"
                )
            raise RuntimeError(f"{len(unresolved)} source file(s) have no matching compiler")
        ctx.logger.info(f"Resolved {len(results)} source file(s)")


if __name__ == "__main__":
    run_script(script)
