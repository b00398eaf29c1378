"""Tests for the manifest and lock file data models."""

from cargo_makedocs.manifest.models import (
    DependencyKind,
    DependencySpec,
    LockedPackage,
    LockFile,
    Manifest,
    ResolvedDependency,
)


class TestDependencySpec:
    """Tests for DependencySpec."""

    def test_defaults(self) -> None:
        spec = DependencySpec(name="serde")
        assert spec.kind == DependencyKind.NORMAL
        assert spec.version_req == "*"
        assert spec.rename is None
        assert spec.workspace is False

    def test_package_name_without_rename(self) -> None:
        spec = DependencySpec(name="serde")
        assert spec.package_name == "serde"
        assert spec.is_renamed is False

    def test_package_name_uses_true_name_for_alias(self) -> None:
        spec = DependencySpec(name="http_client", rename="reqwest")
        assert spec.package_name == "reqwest"
        assert spec.is_renamed is True

    def test_kind_values_are_table_names(self) -> None:
        assert DependencyKind.BUILD.value == "build-dependencies"
        assert DependencyKind.DEV.value == "dev-dependencies"


class TestLockedPackage:
    """Tests for LockedPackage."""

    def test_str_is_pkgid(self) -> None:
        assert str(LockedPackage(name="syn", version="2.0.50")) == "syn@2.0.50"


class TestManifest:
    """Tests for Manifest."""

    def test_dependencies_of_groups_by_kind_order(self) -> None:
        manifest = Manifest(
            path="Cargo.toml",
            package_name="demo",
            dependencies=[
                DependencySpec(name="tempfile", kind=DependencyKind.DEV),
                DependencySpec(name="serde"),
                DependencySpec(name="cc", kind=DependencyKind.BUILD),
                DependencySpec(name="log"),
            ],
        )
        deps = manifest.dependencies_of([DependencyKind.NORMAL, DependencyKind.BUILD])
        assert [d.name for d in deps] == ["serde", "log", "cc"]

    def test_dependencies_of_no_kinds(self) -> None:
        manifest = Manifest(
            path="Cargo.toml",
            package_name="demo",
            dependencies=[DependencySpec(name="serde")],
        )
        assert manifest.dependencies_of([]) == []


class TestLockFile:
    """Tests for LockFile lookups."""

    def test_versions_of(self) -> None:
        lock = LockFile(
            path="Cargo.lock",
            packages=[
                LockedPackage(name="syn", version="1.0.109"),
                LockedPackage(name="quote", version="1.0.35"),
                LockedPackage(name="syn", version="2.0.50"),
            ],
        )
        assert [p.version for p in lock.versions_of("syn")] == ["1.0.109", "2.0.50"]
        assert lock.versions_of("missing") == []


class TestResolvedDependency:
    """Tests for package selectors."""

    def test_selector_is_bare_name(self) -> None:
        dep = ResolvedDependency(
            name="serde",
            spec=DependencySpec(name="serde"),
            locked=LockedPackage(name="serde", version="1.0.197"),
        )
        assert dep.selector == "serde"

    def test_selector_pins_version_when_ambiguous(self) -> None:
        dep = ResolvedDependency(
            name="syn",
            spec=DependencySpec(name="syn", version_req="1"),
            locked=LockedPackage(name="syn", version="1.0.109"),
            ambiguous=True,
        )
        assert dep.selector == "syn@1.0.109"

    def test_selector_names_source_on_conflict(self) -> None:
        dep = ResolvedDependency(
            name="serde",
            spec=DependencySpec(name="serde", git="https://github.com/serde-rs/serde"),
            locked=LockedPackage(
                name="serde",
                version="1.0.0",
                source="git+https://github.com/serde-rs/serde#abc123",
            ),
            ambiguous=True,
            source_conflict=True,
        )
        assert dep.selector == "git+https://github.com/serde-rs/serde#serde@1.0.0"

    def test_selector_for_local_package_on_conflict(self) -> None:
        dep = ResolvedDependency(
            name="serde",
            spec=DependencySpec(name="serde", path="../serde"),
            locked=LockedPackage(name="serde", version="1.0.0"),
            ambiguous=True,
            source_conflict=True,
        )
        assert dep.selector == "serde@1.0.0"
