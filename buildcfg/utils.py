import json
import os
import posixpath
import re
import subprocess
from pathlib import Path
from shutil import which
import yaml
from packaging.version import Version
import logging
from buildcfg import config


logger = logging.getLogger(config.LOGGER_NAME)

# Semantic Versioning 2.0.0, https://semver.org/#is-there-a-suggested-regular-expression-regex-to-check-a-semver-string
_SEMVER_RE = re.compile(
    r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)"
    r"(?:-((?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*)(?:\.(?:0|[1-9]\d*|\d*[a-zA-Z-][0-9a-zA-Z-]*))*))?"
    r"(?:\+([0-9a-zA-Z-]+(?:\.[0-9a-zA-Z-]+)*))?$"
)

_CMD_VERSION_RE = re.compile(r"\d+\.\d+(\.\d+)?")


def require_env(name: str, default: str = None) -> str:
    """
    Return the value of a required environment variable or exit with
    a clear error message if it's missing or empty.
    """
    val = os.environ.get(name, default)
    if not val:
        raise SystemExit(f"Missing required environment variable: {name}")
    return val


def require_path(env_var: str, default: Path | None = None) -> Path:
    """
    Return a path resolved from an environment variable, falling back to
    ``default`` when the variable is unset.

    Example:
        utils.require_path("PROJECT_DIR", Path.cwd())
    """
    val = os.environ.get(env_var)
    if not val:
        if default is None:
            raise SystemExit(f"Missing required path: {env_var}")
        return Path(default).resolve()
    return Path(val).resolve()


def env_flag(name: str, default: bool = False) -> bool:
    val = os.environ.get(name)
    if not val:
        return default
    return val.lower() in {"1", "true", "yes", "on"}


def load_yaml(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"YAML file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def load_json(path: Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"JSON file not found: {path}")
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def is_semver(version: object) -> bool:
    return isinstance(version, str) and _SEMVER_RE.match(version) is not None


def parse_semver(version: str) -> tuple[int, int, int]:
    """
    Parse a semantic version string like '0.8.11' into a (major, minor, patch) tuple.

    Pre-release and build metadata ('0.8.11-nightly', '0.3.3+commit.48e326f')
    are accepted and ignored.

    Raises:
        ValueError: If the string is not a valid semantic version.
    """
    if not isinstance(version, str):
        raise ValueError(f"Version must be a string, got: {version!r}")
    match = _SEMVER_RE.match(version.strip())
    if not match:
        raise ValueError(
            f"Invalid version format: '{version}'. Expected format: 'MAJOR.MINOR.PATCH' (e.g., '0.8.11')"
        )
    return (int(match.group(1)), int(match.group(2)), int(match.group(3)))


def normalize_path(path: str) -> str:
    """Normalize a configured relative path so './cache' and 'cache/' compare equal."""
    return posixpath.normpath(path.replace("\\", "/"))


def get_cmd_version(cmd: str) -> Version:
    if which(cmd) is None:
        raise SystemExit(f"Missing required tool: {cmd}")
    result = subprocess.run(
        [cmd, "--version"],
        capture_output=True,
        text=True,
        check=True,
    )

    match = _CMD_VERSION_RE.search(result.stdout)
    if not match:
        raise RuntimeError(
            f"Could not parse version from `{cmd} --version`: {result.stdout}"
        )

    return Version(match.group())
