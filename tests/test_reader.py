"""Tests for reading Cargo.toml and Cargo.lock."""

import textwrap
from pathlib import Path

import pytest

from cargo_makedocs.errors import ParseError
from cargo_makedocs.manifest.models import DependencyKind
from cargo_makedocs.manifest.reader import ManifestReader, find_lock_file, find_manifest

MANIFEST = textwrap.dedent("""\
    [package]
    name = "demo"
    version = "0.1.0"

    [dependencies]
    serde = "1.0"
    rand = { version = "0.8", features = ["small_rng"] }
    local = { path = "../local" }
    libc = { git = "https://github.com/rust-lang/libc" }
    web = { package = "reqwest", version = "0.11" }
    shared = { workspace = true }

    [dev-dependencies]
    tempfile = "3"

    [build-dependencies]
    cc = "1.0"

    [target.'cfg(unix)'.dependencies]
    nix = "0.27"
""")

LOCK = textwrap.dedent("""\
    version = 3

    [[package]]
    name = "demo"
    version = "0.1.0"

    [[package]]
    name = "serde"
    version = "1.0.197"
    source = "registry+https://github.com/rust-lang/crates.io-index"
""")


@pytest.fixture
def reader() -> ManifestReader:
    return ManifestReader()


class TestParseManifest:
    """Tests for parsing manifest text."""

    def test_package_section(self, reader: ManifestReader) -> None:
        manifest = reader.parse_manifest(MANIFEST)
        assert manifest.package_name == "demo"
        assert manifest.package_version == "0.1.0"

    def test_all_dependency_kinds(self, reader: ManifestReader) -> None:
        manifest = reader.parse_manifest(MANIFEST)
        kinds = {d.name: d.kind for d in manifest.dependencies}
        assert kinds["serde"] == DependencyKind.NORMAL
        assert kinds["tempfile"] == DependencyKind.DEV
        assert kinds["cc"] == DependencyKind.BUILD
        assert len(manifest.dependencies) == 9

    def test_version_requirements(self, reader: ManifestReader) -> None:
        deps = {d.name: d for d in reader.parse_manifest(MANIFEST).dependencies}
        assert deps["serde"].version_req == "1.0"
        assert deps["rand"].version_req == "0.8"

    def test_path_git_and_workspace_accept_any_version(self, reader: ManifestReader) -> None:
        deps = {d.name: d for d in reader.parse_manifest(MANIFEST).dependencies}
        assert deps["local"].version_req == "*"
        assert deps["local"].path == "../local"
        assert deps["libc"].git == "https://github.com/rust-lang/libc"
        assert deps["shared"].workspace is True
        assert deps["shared"].version_req == "*"

    def test_renamed_dependency(self, reader: ManifestReader) -> None:
        deps = {d.name: d for d in reader.parse_manifest(MANIFEST).dependencies}
        assert deps["web"].rename == "reqwest"
        assert deps["web"].package_name == "reqwest"

    def test_target_dependencies(self, reader: ManifestReader) -> None:
        deps = {d.name: d for d in reader.parse_manifest(MANIFEST).dependencies}
        assert deps["nix"].target == "cfg(unix)"
        assert deps["nix"].kind == DependencyKind.NORMAL

    def test_legacy_underscore_tables(self, reader: ManifestReader) -> None:
        source = '[package]\nname = "demo"\n\n[dev_dependencies]\nquickcheck = "1"\n'
        manifest = reader.parse_manifest(source)
        assert manifest.dependencies[0].kind == DependencyKind.DEV

    def test_no_dependencies(self, reader: ManifestReader) -> None:
        manifest = reader.parse_manifest('[package]\nname = "demo"\n')
        assert manifest.dependencies == []

    def test_invalid_toml(self, reader: ManifestReader) -> None:
        with pytest.raises(ParseError, match="could not parse"):
            reader.parse_manifest("[package\nname = ")

    def test_missing_package_section(self, reader: ManifestReader) -> None:
        with pytest.raises(ParseError, match=r"no \[package\]"):
            reader.parse_manifest('[dependencies]\nserde = "1"\n')

    def test_virtual_manifest(self, reader: ManifestReader) -> None:
        with pytest.raises(ParseError, match="virtual workspace"):
            reader.parse_manifest('[workspace]\nmembers = ["a"]\n')

    def test_dependency_without_source(self, reader: ManifestReader) -> None:
        source = '[package]\nname = "demo"\n\n[dependencies]\nserde = { features = ["derive"] }\n'
        with pytest.raises(ParseError, match="serde is invalid"):
            reader.parse_manifest(source)

    def test_dependency_with_bad_value(self, reader: ManifestReader) -> None:
        source = '[package]\nname = "demo"\n\n[dependencies]\nserde = 1\n'
        with pytest.raises(ParseError, match="invalid value"):
            reader.parse_manifest(source)

    def test_dependency_with_bad_requirement(self, reader: ManifestReader) -> None:
        source = '[package]\nname = "demo"\n\n[dependencies]\nserde = "not-a-version"\n'
        with pytest.raises(ParseError, match="serde"):
            reader.parse_manifest(source)


class TestParseLockFile:
    """Tests for parsing lock file text."""

    def test_packages(self, reader: ManifestReader) -> None:
        lock = reader.parse_lock_file(LOCK)
        assert [p.name for p in lock.packages] == ["demo", "serde"]
        assert lock.packages[0].source is None
        assert lock.packages[1].source.startswith("registry+")

    def test_missing_packages(self, reader: ManifestReader) -> None:
        with pytest.raises(ParseError, match="no \\[\\[package\\]\\]"):
            reader.parse_lock_file("version = 3\n")

    def test_entry_without_version(self, reader: ManifestReader) -> None:
        with pytest.raises(ParseError, match="needs a name and a version"):
            reader.parse_lock_file('[[package]]\nname = "serde"\n')

    def test_entry_with_invalid_version(self, reader: ManifestReader) -> None:
        with pytest.raises(ParseError, match="serde"):
            reader.parse_lock_file('[[package]]\nname = "serde"\nversion = "1.x"\n')


class TestReadFiles:
    """Tests for reading and locating files on disk."""

    def test_read_manifest(self, reader: ManifestReader, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text(MANIFEST)
        manifest = reader.read_manifest(str(path))
        assert manifest.path == str(path)
        assert manifest.package_name == "demo"

    def test_read_missing_manifest(self, reader: ManifestReader, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="file not found"):
            reader.read_manifest(str(tmp_path / "Cargo.toml"))

    def test_read_lock_file(self, reader: ManifestReader, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.lock"
        path.write_text(LOCK)
        assert len(reader.read_lock_file(str(path)).packages) == 2

    def test_find_manifest_in_ancestor(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text(MANIFEST)
        nested = tmp_path / "src" / "bin"
        nested.mkdir(parents=True)
        assert find_manifest(str(nested)) == (tmp_path / "Cargo.toml").resolve()

    def test_find_manifest_from_cwd(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        (tmp_path / "Cargo.toml").write_text(MANIFEST)
        monkeypatch.chdir(tmp_path)
        assert find_manifest().resolve() == (tmp_path / "Cargo.toml").resolve()

    def test_find_manifest_missing(self, tmp_path: Path) -> None:
        with pytest.raises(ParseError, match="could not find Cargo.toml"):
            find_manifest(str(tmp_path))

    def test_find_lock_file_at_workspace_root(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.lock").write_text(LOCK)
        member = tmp_path / "member"
        member.mkdir()
        (member / "Cargo.toml").write_text(MANIFEST)
        lock = find_lock_file(member / "Cargo.toml")
        assert lock == (tmp_path / "Cargo.lock").resolve()

    def test_find_lock_file_missing(self, tmp_path: Path) -> None:
        (tmp_path / "Cargo.toml").write_text(MANIFEST)
        with pytest.raises(ParseError, match="cargo build"):
            find_lock_file(tmp_path / "Cargo.toml")
