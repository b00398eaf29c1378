"""Data models for Cargo manifests and lock files.

Defines dataclasses for declared dependencies, locked packages, and
the resolved dependencies that end up on the `cargo doc` command line.
All models are built once per invocation and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional


class DependencyKind(str, Enum):
    """Dependency tables a manifest can declare, keyed by table name."""

    NORMAL = "dependencies"
    BUILD = "build-dependencies"
    DEV = "dev-dependencies"


@dataclass(frozen=True)
class DependencySpec:
    """A single dependency entry declared in Cargo.toml.

    Attributes:
        name: Key as written in the manifest. For a renamed dependency
            this is the local alias.
        rename: True published package name when the entry carries
            ``package = "..."``, otherwise None.
        kind: Dependency table the entry was declared in.
        version_req: Version requirement string. Defaults to ``*`` for
            path, git, and workspace-inherited entries.
        path: Local path source, if any.
        git: Git repository source, if any.
        workspace: Whether the entry inherits from the workspace.
        target: Platform cfg for ``[target.<cfg>.*]`` entries.
    """

    name: str
    rename: Optional[str] = None
    kind: DependencyKind = DependencyKind.NORMAL
    version_req: str = "*"
    path: Optional[str] = None
    git: Optional[str] = None
    workspace: bool = False
    target: Optional[str] = None

    @property
    def package_name(self) -> str:
        """Name the package is published and documented under."""
        return self.rename or self.name

    @property
    def is_renamed(self) -> bool:
        return self.rename is not None and self.rename != self.name


@dataclass(frozen=True)
class LockedPackage:
    """A resolved package from Cargo.lock.

    Attributes:
        name: Package name.
        version: Exact resolved version.
        source: Registry or git source, None for local packages.
    """

    name: str
    version: str
    source: Optional[str] = None

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class Manifest:
    """Parsed contents of a Cargo.toml that matter for documentation.

    Attributes:
        path: File the manifest was read from.
        package_name: Name from the ``[package]`` section.
        package_version: Version from the ``[package]`` section, if set.
        dependencies: Every dependency entry across all kinds and targets.
    """

    path: str
    package_name: str
    package_version: Optional[str] = None
    dependencies: list[DependencySpec] = field(default_factory=list)

    def dependencies_of(self, kinds: Iterable[DependencyKind]) -> list[DependencySpec]:
        """Return the dependencies of the given kinds in manifest order.

        Args:
            kinds: Dependency kinds to keep.

        Returns:
            Matching DependencySpec entries, grouped by kind in the order
            the kinds were given.
        """
        result = []
        for kind in kinds:
            result.extend(dep for dep in self.dependencies if dep.kind == kind)
        return result


@dataclass
class LockFile:
    """Parsed contents of a Cargo.lock.

    Attributes:
        path: File the lock was read from.
        packages: All locked packages, in file order.
    """

    path: str
    packages: list[LockedPackage] = field(default_factory=list)

    def versions_of(self, name: str) -> list[LockedPackage]:
        """Return every locked package with the given name."""
        return [pkg for pkg in self.packages if pkg.name == name]


@dataclass(frozen=True)
class ResolvedDependency:
    """A direct dependency matched against the lock file.

    Attributes:
        name: True package name.
        spec: Manifest entry the dependency came from.
        locked: Locked package chosen for it.
        ambiguous: Whether the lock file holds the package more than once,
            in which case the selector must pin the version.
        source_conflict: Whether the chosen version is locked from more
            than one source, in which case the selector must name the
            source as well.
    """

    name: str
    spec: DependencySpec
    locked: LockedPackage
    ambiguous: bool = False
    source_conflict: bool = False

    @property
    def selector(self) -> str:
        """Package ID spec to pass to ``cargo doc -p``."""
        if self.source_conflict and self.locked.source:
            # Drop the commit fragment of git sources.
            source = self.locked.source.split("#", 1)[0]
            return f"{source}#{self.locked}"
        if self.ambiguous or self.source_conflict:
            return str(self.locked)
        return self.name
