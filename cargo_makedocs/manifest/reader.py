"""Cargo.toml and Cargo.lock reader.

Locates the manifest and lock file for the current crate and parses
them into the manifest data models. Any problem with either file is
reported as a ParseError.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Optional

from cargo_makedocs.errors import ParseError
from cargo_makedocs.manifest.models import (
    DependencyKind,
    DependencySpec,
    LockedPackage,
    LockFile,
    Manifest,
)
from cargo_makedocs.manifest.versions import Version, VersionReq

logger = logging.getLogger(__name__)

MANIFEST_FILE = "Cargo.toml"
LOCK_FILE = "Cargo.lock"


def _find_upwards(start: Path, file_name: str) -> Optional[Path]:
    for directory in (start, *start.parents):
        candidate = directory / file_name
        if candidate.is_file():
            return candidate
    return None


def find_manifest(start: Optional[str] = None) -> Path:
    """Find the nearest Cargo.toml in a directory or any of its parents.

    Args:
        start: Directory to start from. Defaults to the working directory.

    Returns:
        Path to the manifest file.

    Raises:
        ParseError: If no Cargo.toml exists in any ancestor directory.
    """
    origin = Path(start).resolve() if start else Path.cwd()
    manifest = _find_upwards(origin, MANIFEST_FILE)
    if manifest is None:
        raise ParseError(f"could not find {MANIFEST_FILE} in {origin} or any parent directory")
    logger.debug("Using manifest %s", manifest)
    return manifest


def find_lock_file(manifest_path: Path) -> Path:
    """Find the Cargo.lock that belongs to a manifest.

    Workspace members share the lock file at the workspace root, so the
    search starts in the manifest's directory and walks upwards.

    Args:
        manifest_path: Path to the crate's Cargo.toml.

    Returns:
        Path to the lock file.

    Raises:
        ParseError: If no Cargo.lock exists in any ancestor directory.
    """
    lock = _find_upwards(Path(manifest_path).resolve().parent, LOCK_FILE)
    if lock is None:
        raise ParseError(
            f"could not find {LOCK_FILE} for {manifest_path} "
            "(did you run `cargo build`?)"
        )
    logger.debug("Using lock file %s", lock)
    return lock


def _read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ParseError(f"file not found: {path}") from e
    except (OSError, UnicodeDecodeError) as e:
        raise ParseError(f"could not read {path}: {e}") from e


def _load_toml(source: str, file_path: str) -> dict[str, Any]:
    try:
        return tomllib.loads(source)
    except tomllib.TOMLDecodeError as e:
        raise ParseError(f"could not parse {file_path}: {e}") from e


def _check_requirement(req: str, name: str, file_path: str) -> str:
    try:
        VersionReq.parse(req)
    except ValueError as e:
        raise ParseError(f"{file_path}: dependency {name}: {e}") from e
    return req


class ManifestReader:
    """Reads Cargo manifests and lock files into data models.

    Accepts the subset of the Cargo formats that affects which packages
    are documented: the ``[package]`` name, the dependency tables for
    every kind (including ``[target.<cfg>.*]`` tables and the legacy
    underscore spellings), and the ``[[package]]`` list of the lock.
    """

    def read_manifest(self, file_path: str) -> Manifest:
        """Read and parse a Cargo.toml file.

        Args:
            file_path: Path to the manifest.

        Returns:
            The parsed Manifest.

        Raises:
            ParseError: If the file is missing or malformed.
        """
        path = Path(file_path)
        return self.parse_manifest(_read_text(path), str(path))

    def parse_manifest(self, source: str, file_path: str = MANIFEST_FILE) -> Manifest:
        """Parse Cargo.toml source text.

        Args:
            source: Manifest contents.
            file_path: Path reported in errors and stored on the result.

        Returns:
            The parsed Manifest.

        Raises:
            ParseError: If the text is not valid TOML, has no ``[package]``
                section, or declares an invalid dependency.
        """
        data = _load_toml(source, file_path)

        package = data.get("package")
        if not isinstance(package, dict):
            if "workspace" in data:
                raise ParseError(
                    f"{file_path} is a virtual workspace manifest; "
                    "run inside a member crate or pass --manifest-path"
                )
            raise ParseError(f"{file_path} has no [package] section")
        name = package.get("name")
        if not isinstance(name, str):
            raise ParseError(f"{file_path}: [package] has no name")
        version = package.get("version")

        manifest = Manifest(
            path=file_path,
            package_name=name,
            package_version=version if isinstance(version, str) else None,
        )

        manifest.dependencies.extend(self._parse_tables(data, None, file_path))
        targets = data.get("target", {})
        if isinstance(targets, dict):
            for cfg, target_data in targets.items():
                if isinstance(target_data, dict):
                    manifest.dependencies.extend(
                        self._parse_tables(target_data, cfg, file_path)
                    )

        logger.debug(
            "Parsed %s: package %s with %d dependencies",
            file_path,
            name,
            len(manifest.dependencies),
        )
        return manifest

    def read_lock_file(self, file_path: str) -> LockFile:
        """Read and parse a Cargo.lock file.

        Args:
            file_path: Path to the lock file.

        Returns:
            The parsed LockFile.

        Raises:
            ParseError: If the file is missing or malformed.
        """
        path = Path(file_path)
        return self.parse_lock_file(_read_text(path), str(path))

    def parse_lock_file(self, source: str, file_path: str = LOCK_FILE) -> LockFile:
        """Parse Cargo.lock source text.

        Args:
            source: Lock file contents.
            file_path: Path reported in errors and stored on the result.

        Returns:
            The parsed LockFile.

        Raises:
            ParseError: If the text is not valid TOML, has no
                ``[[package]]`` entries, or an entry lacks a name or a
                valid version.
        """
        data = _load_toml(source, file_path)

        entries = data.get("package")
        if not isinstance(entries, list):
            raise ParseError(f"{file_path} has no [[package]] entries")

        lock = LockFile(path=file_path)
        for index, entry in enumerate(entries):
            if not isinstance(entry, dict):
                raise ParseError(f"{file_path}: package entry {index} is not a table")
            name = entry.get("name")
            version = entry.get("version")
            if not isinstance(name, str) or not isinstance(version, str):
                raise ParseError(
                    f"{file_path}: package entry {index} needs a name and a version"
                )
            try:
                Version.parse(version)
            except ValueError as e:
                raise ParseError(f"{file_path}: package {name}: {e}") from e
            source_id = entry.get("source")
            lock.packages.append(
                LockedPackage(
                    name=name,
                    version=version,
                    source=source_id if isinstance(source_id, str) else None,
                )
            )

        logger.debug("Parsed %s: %d locked packages", file_path, len(lock.packages))
        return lock

    def _parse_tables(
        self, data: dict[str, Any], target: Optional[str], file_path: str
    ) -> list[DependencySpec]:
        specs = []
        for kind in DependencyKind:
            table = data.get(kind.value)
            if table is None:
                table = data.get(kind.value.replace("-", "_"))
            if table is None:
                continue
            if not isinstance(table, dict):
                raise ParseError(f"{file_path}: [{kind.value}] is not a table")
            for key, value in table.items():
                specs.append(self._parse_entry(key, value, kind, target, file_path))
        return specs

    def _parse_entry(
        self,
        key: str,
        value: Any,
        kind: DependencyKind,
        target: Optional[str],
        file_path: str,
    ) -> DependencySpec:
        if isinstance(value, str):
            return DependencySpec(
                name=key,
                kind=kind,
                version_req=_check_requirement(value, key, file_path),
                target=target,
            )

        if not isinstance(value, dict):
            raise ParseError(f"{file_path}: invalid value for dependency {key}")

        version = value.get("version")
        path = value.get("path")
        git = value.get("git")
        workspace = value.get("workspace") is True
        if version is None and path is None and git is None and not workspace:
            raise ParseError(
                f"{file_path}: dependency {key} is invalid "
                "(needs a version, path, git, or workspace source)"
            )
        if version is not None and not isinstance(version, str):
            raise ParseError(f"{file_path}: dependency {key} has a non-string version")

        package = value.get("package")
        return DependencySpec(
            name=key,
            rename=package if isinstance(package, str) else None,
            kind=kind,
            # path, git and workspace entries without a version accept any
            # locked version
            version_req=_check_requirement(version, key, file_path) if version else "*",
            path=path if isinstance(path, str) else None,
            git=git if isinstance(git, str) else None,
            workspace=workspace,
            target=target,
        )
