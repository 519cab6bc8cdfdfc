import json
import os
import logging
from pathlib import Path

import yaml

from buildcfg import config
from buildcfg import utils
from buildcfg.project import ProjectConfig, default_project_config


logger = logging.getLogger(config.LOGGER_NAME)

_YAML_SUFFIXES = {".yaml", ".yml"}
_JSON_SUFFIXES = {".json"}


def _format_for(path: Path) -> str:
    suffix = path.suffix.lower()
    if suffix in _YAML_SUFFIXES:
        return "yaml"
    if suffix in _JSON_SUFFIXES:
        return "json"
    raise ValueError(
        f"Unsupported config file type '{path.suffix}' for {path}; "
        f"use one of {', '.join(sorted(_YAML_SUFFIXES | _JSON_SUFFIXES))}"
    )


def find_config_file(project_dir: Path) -> Path | None:
    """Return the first known config file present in ``project_dir``."""
    for name in config.CONFIG_FILE_NAMES:
        candidate = Path(project_dir) / name
        if candidate.is_file():
            return candidate
    return None


def read_config_file(path: Path) -> ProjectConfig:
    path = Path(path)
    fmt = _format_for(path)
    data = utils.load_yaml(path) if fmt == "yaml" else utils.load_json(path)
    try:
        return ProjectConfig.from_dict(data)
    except ValueError as e:
        raise ValueError(f"{path}: {e}") from e


def load_config(
    project_dir: Path | None = None,
    path: Path | None = None,
) -> ProjectConfig:
    """
    Load the project configuration.

    Lookup order:
    - ``path`` when given (must exist)
    - the file named by $BUILDCFG_FILE (must exist)
    - the first of ``config.CONFIG_FILE_NAMES`` found in ``project_dir``
    - the built-in defaults

    $HARDHAT_NETWORK, when set, replaces the default network.
    """
    if path is None and os.environ.get(config.ENV_CONFIG_FILE):
        path = Path(os.environ[config.ENV_CONFIG_FILE])
        if not path.is_absolute() and project_dir is not None:
            path = Path(project_dir) / path

    if path is not None:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Config file not found: {path}")
    elif project_dir is not None:
        path = find_config_file(Path(project_dir))

    if path is not None:
        cfg = read_config_file(path)
        logger.debug(f"Loaded configuration from {path}")
    else:
        cfg = default_project_config()
        logger.debug("No config file found; using built-in defaults")

    network = os.environ.get(config.ENV_NETWORK)
    if network and network != cfg.default_network:
        logger.debug(f"Default network overridden by ${config.ENV_NETWORK}: {network}")
        cfg = cfg.with_network(network)

    return cfg


def dumps_config(cfg: ProjectConfig, fmt: str = "yaml") -> str:
    data = cfg.to_dict()
    if fmt == "yaml":
        return yaml.safe_dump(data, sort_keys=False, default_flow_style=False)
    if fmt == "json":
        return json.dumps(data, indent=2) + "\n"
    raise ValueError(f"Unsupported format: {fmt!r} (expected 'yaml' or 'json')")


def loads_config(text: str, fmt: str = "yaml") -> ProjectConfig:
    if fmt == "yaml":
        data = yaml.safe_load(text) or {}
    elif fmt == "json":
        data = json.loads(text)
    else:
        raise ValueError(f"Unsupported format: {fmt!r} (expected 'yaml' or 'json')")
    return ProjectConfig.from_dict(data)


def dump_config(cfg: ProjectConfig, path: Path) -> Path:
    """Write ``cfg`` to ``path``; the suffix picks YAML or JSON."""
    path = Path(path)
    text = dumps_config(cfg, _format_for(path))
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    try:
        tmp.write_text(text, encoding="utf-8")
        tmp.replace(path)  # atomic move
    except Exception:
        tmp.unlink(missing_ok=True)
        raise
    return path
