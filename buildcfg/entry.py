import sys
from pathlib import Path
from time import perf_counter

from buildcfg.script_context import ScriptCtx
import datetime as _dt
from buildcfg import config
from buildcfg.loader import load_config
from buildcfg.log import setup_logger, get_console
from buildcfg.utils import env_flag, require_env, require_path


def init_ctx(required_env) -> ScriptCtx:
    # Ensure required env vars exist (and are non-empty)
    for var in required_env:
        require_env(var)
    project_dir = require_path("PROJECT_DIR", Path.cwd())
    workspace = require_path("WORKSPACE", project_dir / ".workspace")
    script_name = Path(sys.argv[0]).stem
    verbose = env_flag("VERBOSE")

    ts = _dt.datetime.now().strftime("%Y%m%d-%H%M%S")
    log_dir = workspace / ".buildcfg-logs"
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / f"{script_name}-{ts}.log"

    logger = setup_logger(config.LOGGER_NAME, log_file, verbose)

    ctx = ScriptCtx(
        workspace=workspace,
        project_dir=project_dir,
        script_name=script_name,
        config=load_config(project_dir),
        verbose=verbose,
        log_file=log_file,
        logger=logger,
    )
    return ctx


def run_script(script, *, required_env=()):
    _console = get_console()
    start = perf_counter()
    ctx = None
    try:
        ctx = init_ctx(required_env=required_env)

        # Pretty header
        _console.rule(f"🚀 Running {ctx.script_name}")
        _console.print(
            f"[dim]Project   :[/] {ctx.project_dir}\n"
            f"[dim]Network   :[/] {ctx.config.default_network}"
        )

        if env_flag("DRY_RUN"):
            _console.print("[yellow]⚠ DRY RUN enabled - no changes will be made[/]")
            _console.rule()
            return

        if ctx.log_file:
            _console.print(f"[dim]Log file  :[/] {ctx.log_file}")
        _console.rule()

        script(ctx)

    except KeyboardInterrupt:
        _console.print("[red]⚡ Interrupted by user (Ctrl+C)[/]")
        sys.exit(130)
    except SystemExit:
        raise
    except Exception as e:
        _console.print(f"[red]✘ Script error: {e!r}[/]")
        _console.print_exception()
        sys.exit(1)
    else:
        total = perf_counter() - start
        _console.rule()

        ok = ctx.sections_ok
        failed = ctx.sections_failed
        total_sections = ctx.sections_total

        if failed:
            _console.print(
                f"[red]⚠ {failed} section(s) failed out of {total_sections}[/]"
            )
        else:
            _console.print("[green]✅ All sections completed successfully[/]")

        _console.print(f"   Sections : {ok} OK, {failed} failed")
        _console.print(f"   Duration : {total:.1f}s total")
        if ctx.log_file:
            _console.print(f"   Logs     : {ctx.log_file}")

        _console.rule()
