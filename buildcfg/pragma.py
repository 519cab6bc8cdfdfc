"""
Compiler selection by version pragma.

Solidity sources declare ``pragma solidity ^0.8.0;`` and Vyper sources
``# @version 0.2.12`` (or ``# pragma version ...``). The expressions use npm
semver range syntax; they are translated into ``packaging`` specifier sets so
the configured releases can be matched against them. Among the configured
releases that satisfy a file's pragma, the highest one is selected.
"""

import re
import logging
from dataclasses import dataclass
from pathlib import Path

from packaging.specifiers import SpecifierSet
from packaging.version import Version

from buildcfg import config
from buildcfg import utils
from buildcfg.project import ProjectConfig


logger = logging.getLogger(config.LOGGER_NAME)

_SOLIDITY_PRAGMA_RE = re.compile(r"^\s*pragma\s+solidity\s+([^;]+);", re.MULTILINE)
# Separators never cross a line end: a bare '# @version' declares nothing
_VYPER_PRAGMA_RE = re.compile(
    r"^[ \t]*#[ \t]*(?:@version|pragma[ \t]+version)[ \t]+(\S.*?)[ \t]*$",
    re.MULTILINE,
)

# op? followed by up to three dot separated parts, each a number or a wildcard
_COMPARATOR_RE = re.compile(
    r"^(\^|~|>=|<=|>|<|=)?v?(\d+|[xX*])(?:\.(\d+|[xX*]))?(?:\.(\d+|[xX*]))?$"
)
_HYPHEN_RANGE_RE = re.compile(r"^\s*(\S+)\s+-\s+(\S+)\s*$")
_OP_SPACE_RE = re.compile(r"(>=|<=|>|<|=|\^|~)\s+")

Release = tuple[int, int, int]


@dataclass(frozen=True)
class SourceResolution:
    path: Path
    family: str
    pragma: str | None
    version: str | None


def parse_pragma(text: str, family: str) -> str | None:
    """Return the version constraint declared in a source file, if any."""
    if family == "solidity":
        match = _SOLIDITY_PRAGMA_RE.search(text)
    elif family == "vyper":
        match = _VYPER_PRAGMA_RE.search(text)
    else:
        raise ValueError(f"Unknown compiler family: {family!r}")
    return match.group(1).strip() if match else None


def _fmt(release: Release) -> str:
    return ".".join(str(part) for part in release)


def _parse_parts(token: str) -> tuple[str, list[int | None]]:
    match = _COMPARATOR_RE.match(token)
    if not match:
        raise ValueError(f"Invalid version constraint: {token!r}")
    op = match.group(1) or ""
    parts: list[int | None] = []
    for raw in match.group(2, 3, 4):
        if raw is None or raw in ("x", "X", "*"):
            parts.append(None)
        else:
            parts.append(int(raw))
    # Anything after a wildcard is a wildcard too: 0.x.5 == 0.x
    for i, part in enumerate(parts):
        if part is None:
            parts[i + 1:] = [None] * (len(parts) - i - 1)
            break
    return op, parts


def _bump(parts: list[int | None]) -> Release:
    """Smallest release above every release matching the partial version."""
    major, minor, _ = parts
    if minor is None:
        return (major + 1, 0, 0)
    return (major, minor + 1, 0)


def _floor(parts: list[int | None]) -> Release:
    return tuple(part or 0 for part in parts)


def _comparator_specifiers(token: str) -> list[str]:
    op, parts = _parse_parts(token)
    major, minor, patch = parts
    if major is None:
        if op in (">", "<"):
            raise ValueError(f"Version constraint matches nothing: {token!r}")
        # '*' or 'x': any version
        return []
    lower = _floor(parts)
    partial = patch is None

    if op in ("", "="):
        if not partial:
            return [f"=={_fmt(lower)}"]
        return [f">={_fmt(lower)}", f"<{_fmt(_bump(parts))}"]

    if op == "^":
        if major != 0 or minor is None:
            upper = (major + 1, 0, 0)
        elif minor != 0 or patch is None:
            upper = (0, minor + 1, 0)
        else:
            upper = (0, 0, patch + 1)
        return [f">={_fmt(lower)}", f"<{_fmt(upper)}"]

    if op == "~":
        upper = (major + 1, 0, 0) if minor is None else (major, minor + 1, 0)
        return [f">={_fmt(lower)}", f"<{_fmt(upper)}"]

    if op == ">":
        return [f">={_fmt(_bump(parts))}"] if partial else [f">{_fmt(lower)}"]
    if op == "<=":
        return [f"<{_fmt(_bump(parts))}"] if partial else [f"<={_fmt(lower)}"]
    # >= and < only look at the floor
    return [f"{op}{_fmt(lower)}"]


def _range_specifiers(expr: str) -> SpecifierSet:
    hyphen = _HYPHEN_RANGE_RE.match(expr)
    if hyphen:
        low, high = hyphen.groups()
        specs = _comparator_specifiers(f">={low}") + _comparator_specifiers(f"<={high}")
        return SpecifierSet(",".join(specs))

    tokens = _OP_SPACE_RE.sub(r"\1", expr.strip()).split()
    specs: list[str] = []
    for token in tokens:
        specs.extend(_comparator_specifiers(token))
    return SpecifierSet(",".join(specs))


def constraint_to_specifiers(expr: str) -> list[SpecifierSet]:
    """
    Translate a semver range expression into one SpecifierSet per ``||``
    alternative.

    Example:
        constraint_to_specifiers("^0.8.0")           -> [">=0.8.0,<0.9.0"]
        constraint_to_specifiers(">=0.6.0 <0.8.0")   -> [">=0.6.0,<0.8.0"]
        constraint_to_specifiers("0.2.12 || ^0.3.0") -> ["==0.2.12", ">=0.3.0,<0.4.0"]

    Raises:
        ValueError: If the expression is empty or malformed.
    """
    if not isinstance(expr, str) or not expr.strip():
        raise ValueError(f"Version constraint must be a non-empty string, got: {expr!r}")
    alternatives = [alt.strip() for alt in expr.split("||")]
    if any(not alt for alt in alternatives):
        raise ValueError(f"Empty alternative in version constraint: {expr!r}")
    return [_range_specifiers(alt) for alt in alternatives]


def _release(version: str) -> Version:
    return Version(_fmt(utils.parse_semver(version)))


def satisfies(version: str, expr: str) -> bool:
    release = _release(version)
    return any(spec.contains(release) for spec in constraint_to_specifiers(expr))


def select_compiler(versions: list[str], expr: str | None) -> str | None:
    """
    Return the highest of ``versions`` satisfying ``expr``, or None.

    A missing expression accepts every version.
    """
    if not versions:
        return None
    if expr is None:
        candidates = list(versions)
    else:
        candidates = [v for v in versions if satisfies(v, expr)]
    if not candidates:
        return None
    return max(candidates, key=utils.parse_semver)


def _family_for(path: Path) -> str | None:
    for family, suffix in config.SOURCE_SUFFIXES.items():
        if path.suffix == suffix:
            return family
    return None


def resolve_sources(cfg: ProjectConfig, project_dir: Path) -> list[SourceResolution]:
    """
    Select a configured compiler for every source file under ``paths.sources``.

    Only each file's own pragma is considered, not the pragmas of its imports.
    ``version`` is None when no configured release satisfies the pragma.
    """
    sources_dir = cfg.paths.resolve(project_dir).sources
    if not sources_dir.is_dir():
        raise FileNotFoundError(f"Sources directory not found: {sources_dir}")

    results: list[SourceResolution] = []
    for path in sorted(sources_dir.rglob("*")):
        family = _family_for(path)
        if family is None or not path.is_file():
            continue
        pragma = parse_pragma(path.read_text(encoding="utf-8"), family)
        try:
            version = select_compiler(cfg.versions(family), pragma)
        except ValueError as e:
            raise ValueError(f"{path}: {e}") from e
        logger.debug(f"{path.relative_to(sources_dir)}: {pragma or '(no pragma)'} -> {version}")
        results.append(
            SourceResolution(path=path, family=family, pragma=pragma, version=version)
        )
    return results
