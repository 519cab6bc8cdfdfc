"""
The project build configuration record.

Mirrors the layout the build tool reads::

    defaultNetwork: hardhat
    paths:
      artifacts: ./artifacts
      cache: ./cache
      sources: ./contracts
      tests: ./test
    solidity:
      compilers:
        - version: 0.8.11
          settings:
            metadata: {bytecodeHash: none}
            optimizer: {enabled: true, runs: 800}
    vyper:
      compilers:
        - version: 0.3.3

The record is built once and never mutated. Compiler order is preserved but
carries no meaning: the build tool picks a compiler per source file by pragma.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path

from buildcfg import config
from buildcfg import utils
from buildcfg.compilers import (
    SOLIDITY_COMPILERS,
    VYPER_COMPILERS,
    SolidityCompiler,
    VyperCompiler,
)


@dataclass(frozen=True)
class ProjectPaths:
    artifacts: str = config.DEFAULT_ARTIFACTS_PATH
    cache: str = config.DEFAULT_CACHE_PATH
    sources: str = config.DEFAULT_SOURCES_PATH
    tests: str = config.DEFAULT_TESTS_PATH

    def __post_init__(self) -> None:
        seen: dict[str, str] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if not isinstance(value, str) or not value.strip():
                raise ValueError(f"paths.{f.name} must be a non-empty string, got: {value!r}")
            key = utils.normalize_path(value)
            if key in seen:
                raise ValueError(
                    f"paths.{f.name} and paths.{seen[key]} point to the same directory: {value!r}"
                )
            seen[key] = f.name

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectPaths":
        if not isinstance(data, dict):
            raise ValueError(f"paths must be a mapping, got: {data!r}")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown key(s) in paths: {', '.join(sorted(unknown))}")
        return cls(**data)

    def to_dict(self) -> dict:
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def resolve(self, root: Path) -> "ResolvedPaths":
        root = Path(root)
        return ResolvedPaths(
            **{f.name: (root / getattr(self, f.name)).resolve() for f in fields(self)}
        )


@dataclass(frozen=True)
class ResolvedPaths:
    """Absolute directories of a project on disk."""

    artifacts: Path
    cache: Path
    sources: Path
    tests: Path


def _compiler_entries(data: object, family: str) -> list:
    """
    Normalize the accepted shorthands into a list of raw compiler entries:

        solidity: "0.8.11"
        solidity: {version: "0.8.11", settings: {...}}
        solidity: {compilers: [...]}
    """
    if data is None:
        return []
    if isinstance(data, str):
        return [data]
    if not isinstance(data, dict):
        raise ValueError(f"{family} must be a version string or a mapping, got: {data!r}")
    if "compilers" in data:
        extra = set(data) - {"compilers"}
        if extra:
            raise ValueError(f"Unknown key(s) in {family}: {', '.join(sorted(extra))}")
        entries = data["compilers"]
        if not isinstance(entries, list):
            raise ValueError(f"{family}.compilers must be a list, got: {entries!r}")
        return entries
    return [data]


def _check_unique(versions: list[str], family: str) -> None:
    seen: set[str] = set()
    for version in versions:
        if version in seen:
            raise ValueError(f"{family}: compiler version {version} is declared more than once")
        seen.add(version)


@dataclass(frozen=True)
class ProjectConfig:
    default_network: str = config.DEFAULT_NETWORK
    paths: ProjectPaths = field(default_factory=ProjectPaths)
    solidity: tuple[SolidityCompiler, ...] = SOLIDITY_COMPILERS
    vyper: tuple[VyperCompiler, ...] = VYPER_COMPILERS

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so the record stays immutable
        object.__setattr__(self, "solidity", tuple(self.solidity))
        object.__setattr__(self, "vyper", tuple(self.vyper))
        self.validate()

    def validate(self) -> None:
        if not isinstance(self.default_network, str) or not self.default_network.strip():
            raise ValueError(
                f"defaultNetwork must be a non-empty string, got: {self.default_network!r}"
            )
        if not isinstance(self.paths, ProjectPaths):
            raise ValueError(f"paths must be ProjectPaths, got: {type(self.paths).__name__}")
        for compiler in self.solidity:
            if not isinstance(compiler, SolidityCompiler):
                raise ValueError(f"solidity entries must be SolidityCompiler, got: {compiler!r}")
        for compiler in self.vyper:
            if not isinstance(compiler, VyperCompiler):
                raise ValueError(f"vyper entries must be VyperCompiler, got: {compiler!r}")
        _check_unique(self.solidity_versions, "solidity")
        _check_unique(self.vyper_versions, "vyper")

    @property
    def solidity_versions(self) -> list[str]:
        return [c.version for c in self.solidity]

    @property
    def vyper_versions(self) -> list[str]:
        return [c.version for c in self.vyper]

    def versions(self, family: str) -> list[str]:
        if family == "solidity":
            return self.solidity_versions
        if family == "vyper":
            return self.vyper_versions
        raise ValueError(f"Unknown compiler family: {family!r}")

    def with_network(self, network: str) -> "ProjectConfig":
        return ProjectConfig(
            default_network=network,
            paths=self.paths,
            solidity=self.solidity,
            vyper=self.vyper,
        )

    @classmethod
    def from_dict(cls, data: dict) -> "ProjectConfig":
        if not isinstance(data, dict):
            raise ValueError(f"Configuration must be a mapping, got: {data!r}")
        unknown = set(data) - {"defaultNetwork", "paths", "solidity", "vyper"}
        if unknown:
            raise ValueError(f"Unknown configuration key(s): {', '.join(sorted(unknown))}")
        return cls(
            default_network=data.get("defaultNetwork", config.DEFAULT_NETWORK),
            paths=ProjectPaths.from_dict(data.get("paths") or {}),
            solidity=tuple(
                SolidityCompiler.from_dict(entry)
                for entry in _compiler_entries(data.get("solidity"), "solidity")
            ),
            vyper=tuple(
                VyperCompiler.from_dict(entry)
                for entry in _compiler_entries(data.get("vyper"), "vyper")
            ),
        )

    def to_dict(self) -> dict:
        return {
            "defaultNetwork": self.default_network,
            "paths": self.paths.to_dict(),
            "solidity": {"compilers": [c.to_dict() for c in self.solidity]},
            "vyper": {"compilers": [c.to_dict() for c in self.vyper]},
        }


def default_project_config() -> ProjectConfig:
    return ProjectConfig()
