import contextlib
import logging
from dataclasses import dataclass, field
from pathlib import Path
from time import perf_counter
from typing import NoReturn, Optional
from buildcfg.log import get_console
from buildcfg.project import ProjectConfig, ResolvedPaths


_console = get_console()


@dataclass(slots=True)
class ScriptCtx:
    # Core identity
    workspace: Path
    project_dir: Path
    script_name: str

    # Loaded project configuration
    config: ProjectConfig

    # Flags
    verbose: bool

    # Logging
    log_file: Optional[Path]
    logger: logging.Logger

    # Section summary counters
    sections_total: int = field(default=0, init=False)
    sections_ok: int = field(default=0, init=False)
    sections_failed: int = field(default=0, init=False)

    # ------------------------------------------------------------------ #
    # Sections
    # ------------------------------------------------------------------ #

    @contextlib.contextmanager
    def section(self, title: str, expected: float | None = None):
        """
        Context manager: section with spinner + timing and optional expected time.

        Example:
            with ctx.section("Validate configuration"):
                ctx.config.validate()
        """
        self.sections_total += 1
        label = f"{title} (≈{expected:.0f}s)" if expected is not None else title
        # Header
        self.logger.info(f"\n[bold]\\[{self.sections_total}] {label}[/]")
        start = perf_counter()
        with _console.status(f"[cyan]{label}...[/]"):
            try:
                yield
            except (Exception, SystemExit):
                duration = perf_counter() - start
                self.sections_failed += 1
                self._log_section_result(title, duration, expected, success=False)
                raise
            else:
                duration = perf_counter() - start
                self.sections_ok += 1
                self._log_section_result(title, duration, expected, success=True)

    def _log_section_result(
        self,
        title: str,
        duration: float,
        expected: float | None,
        *,
        success: bool,
    ) -> None:
        msg = f"{title}: {'SUCCESS' if success else 'FAILED'} ({duration:.1f}s"
        if expected is not None and expected > 0:
            delta = duration - expected
            sign = "+" if delta > 0 else "−"
            msg += f", {sign}{abs(delta):.1f}s vs expected {expected:.1f}s"
        msg += ")"

        if success:
            self.logger.info(msg)
        else:
            self.logger.error(msg)

    # ------------------------------------------------------------------ #
    # Paths
    # ------------------------------------------------------------------ #

    @property
    def paths(self) -> ResolvedPaths:
        """Configured project directories, resolved against the project dir."""
        return self.config.paths.resolve(self.project_dir)

    def fail(self, message: str) -> NoReturn:
        self.logger.error(message)
        raise SystemExit(1)
