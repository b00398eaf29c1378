"""Match manifest dependencies against Cargo.lock.

Turns each declared dependency into the true package name cargo knows
it by, and picks the locked version it resolved to. Dependencies that
are missing from the lock file are skipped with a warning.
"""

import logging
from typing import Iterable

from cargo_makedocs.manifest.models import (
    DependencyKind,
    DependencySpec,
    LockedPackage,
    LockFile,
    Manifest,
    ResolvedDependency,
)
from cargo_makedocs.manifest.versions import Version, VersionReq

logger = logging.getLogger(__name__)

ALL_KINDS = (DependencyKind.NORMAL, DependencyKind.BUILD, DependencyKind.DEV)


def _source_matches(spec: DependencySpec, pkg: LockedPackage) -> bool:
    """Whether a locked package comes from the kind of source spec names."""
    if pkg.source is None:
        return spec.path is not None
    if spec.git:
        return pkg.source.startswith("git+")
    return spec.path is None and not pkg.source.startswith("git+")


def select_locked_version(
    spec: DependencySpec, candidates: list[LockedPackage]
) -> LockedPackage:
    """Pick the newest locked package compatible with a requirement.

    Falls back to the newest locked version when none satisfies the
    requirement, which happens with a stale lock file. When the same
    version is locked from several sources, the one matching the entry
    (git, path or registry) is preferred.

    Args:
        spec: Manifest entry carrying the version requirement.
        candidates: Locked packages sharing the entry's package name.

    Returns:
        The chosen LockedPackage.
    """
    req = VersionReq.parse(spec.version_req)
    matching = [pkg for pkg in candidates if req.matches(Version.parse(pkg.version))]
    if not matching:
        logger.warning(
            "No locked version of %s matches %r, documenting the newest one",
            spec.package_name,
            spec.version_req,
        )
        matching = candidates
    return max(
        matching,
        key=lambda pkg: (Version.parse(pkg.version).sort_key(), _source_matches(spec, pkg)),
    )


def resolve_dependencies(
    manifest: Manifest,
    lock: LockFile,
    kinds: Iterable[DependencyKind] = ALL_KINDS,
) -> list[ResolvedDependency]:
    """Resolve the direct dependencies of a manifest.

    Renamed dependencies resolve to their published package name, since
    that is what ``cargo doc -p`` selects by. When the same package is
    declared under several kinds, the first declaration wins.

    Args:
        manifest: Parsed Cargo.toml.
        lock: Parsed Cargo.lock.
        kinds: Dependency kinds to include, in priority order.

    Returns:
        One ResolvedDependency per distinct package name, in manifest order.
    """
    resolved: dict[str, ResolvedDependency] = {}

    for spec in manifest.dependencies_of(kinds):
        name = spec.package_name
        if spec.is_renamed:
            logger.debug("Dependency %s is an alias for %s", spec.name, name)
        if name in resolved:
            continue

        candidates = lock.versions_of(name)
        if not candidates:
            logger.warning(
                "%s not found in %s (did you run `cargo build`?), skipping it",
                name,
                lock.path,
            )
            continue

        locked = select_locked_version(spec, candidates)
        ambiguous = len({(pkg.version, pkg.source) for pkg in candidates}) > 1
        sources = {pkg.source for pkg in candidates if pkg.version == locked.version}
        resolved[name] = ResolvedDependency(
            name=name,
            spec=spec,
            locked=locked,
            ambiguous=ambiguous,
            source_conflict=len(sources) > 1,
        )

    logger.info(
        "Resolved %d direct dependencies of %s", len(resolved), manifest.package_name
    )
    return list(resolved.values())
