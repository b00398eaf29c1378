"""Semantic versions and Cargo version requirements.

Implements the subset of Cargo's requirement syntax found in manifests:
bare and caret requirements, tilde, wildcard, and comparison operators,
optionally joined with commas. Used to pick the locked version a
manifest entry actually resolved to when Cargo.lock holds several.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional, Union

_VERSION_RE = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)

_COMPARATOR_RE = re.compile(
    r"^(=|>=|<=|>|<|~|\^)?\s*"
    r"(\d+|[*xX])(?:\.(\d+|[*xX]))?(?:\.(\d+|[*xX]))?"
    r"(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$"
)

_WILDCARDS = {"*", "x", "X"}

PreKey = tuple[tuple[int, Union[int, str]], ...]


def _pre_key(pre: Optional[str]) -> tuple[int, PreKey]:
    """Sort key for a pre-release tag; releases sort after pre-releases."""
    if pre is None:
        return (1, ())
    parts: list[tuple[int, Union[int, str]]] = []
    for ident in pre.split("."):
        if ident.isdigit():
            parts.append((0, int(ident)))
        else:
            parts.append((1, ident))
    return (0, tuple(parts))


def _compare_pre(a: Optional[str], b: Optional[str]) -> int:
    key_a, key_b = _pre_key(a), _pre_key(b)
    return (key_a > key_b) - (key_a < key_b)


@dataclass(frozen=True)
class Version:
    """A semantic version as found in Cargo.lock.

    Attributes:
        major: Major component.
        minor: Minor component.
        patch: Patch component.
        pre: Pre-release tag without the leading dash, if any.
    """

    major: int
    minor: int
    patch: int
    pre: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse a ``MAJOR.MINOR.PATCH[-PRE][+BUILD]`` string.

        Raises:
            ValueError: If the text is not a valid semantic version.
        """
        match = _VERSION_RE.match(text.strip())
        if not match:
            raise ValueError(f"invalid version: {text!r}")
        major, minor, patch, pre = match.groups()
        return cls(int(major), int(minor), int(patch), pre)

    def sort_key(self) -> tuple:
        return (self.major, self.minor, self.patch, _pre_key(self.pre))

    def __str__(self) -> str:
        base = f"{self.major}.{self.minor}.{self.patch}"
        return f"{base}-{self.pre}" if self.pre else base


@dataclass(frozen=True)
class Comparator:
    """One comparator of a requirement, e.g. ``>=1.2`` or ``~0.3.1``.

    Missing components are None and widen the match the way Cargo does.
    A None major means a bare wildcard.
    """

    op: str
    major: Optional[int]
    minor: Optional[int] = None
    patch: Optional[int] = None
    pre: Optional[str] = None

    @classmethod
    def parse(cls, text: str) -> Comparator:
        """Parse a single comparator.

        Raises:
            ValueError: If the text is not a valid comparator.
        """
        match = _COMPARATOR_RE.match(text.strip())
        if not match:
            raise ValueError(f"invalid version requirement: {text!r}")
        op, major, minor, patch, pre = match.groups()

        parts: list[Optional[int]] = []
        for part in (major, minor, patch):
            if part is None or part in _WILDCARDS:
                break
            parts.append(int(part))
        wildcard = len(parts) < 3 and any(
            p in _WILDCARDS for p in (major, minor, patch) if p is not None
        )
        if wildcard:
            if op not in (None, "="):
                raise ValueError(f"wildcard not allowed with {op!r}: {text!r}")
            op = "="
            pre = None
        parts.extend([None] * (3 - len(parts)))

        if pre is not None and parts[2] is None:
            raise ValueError(f"pre-release needs a full version: {text!r}")

        return cls(op=op or "^", major=parts[0], minor=parts[1], patch=parts[2], pre=pre)

    def matches(self, version: Version) -> bool:
        if self.major is None:
            return True
        if self.op == "=":
            return self._matches_exact(version)
        if self.op == ">":
            return self._matches_greater(version)
        if self.op == ">=":
            return self._matches_exact(version) or self._matches_greater(version)
        if self.op == "<":
            return self._matches_less(version)
        if self.op == "<=":
            return self._matches_exact(version) or self._matches_less(version)
        if self.op == "~":
            return self._matches_tilde(version)
        return self._matches_caret(version)

    def _matches_exact(self, v: Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is None:
            return True
        if v.minor != self.minor:
            return False
        if self.patch is None:
            return True
        return v.patch == self.patch and _compare_pre(v.pre, self.pre) == 0

    def _matches_greater(self, v: Version) -> bool:
        if v.major != self.major:
            return v.major > self.major
        if self.minor is None:
            return False
        if v.minor != self.minor:
            return v.minor > self.minor
        if self.patch is None:
            return False
        if v.patch != self.patch:
            return v.patch > self.patch
        return _compare_pre(v.pre, self.pre) > 0

    def _matches_less(self, v: Version) -> bool:
        if v.major != self.major:
            return v.major < self.major
        if self.minor is None:
            return False
        if v.minor != self.minor:
            return v.minor < self.minor
        if self.patch is None:
            return False
        if v.patch != self.patch:
            return v.patch < self.patch
        return _compare_pre(v.pre, self.pre) < 0

    def _matches_tilde(self, v: Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is not None and v.minor != self.minor:
            return False
        if self.patch is None:
            return True
        if v.patch != self.patch:
            return v.patch > self.patch
        return _compare_pre(v.pre, self.pre) >= 0

    def _matches_caret(self, v: Version) -> bool:
        if v.major != self.major:
            return False
        if self.minor is None:
            return True
        if self.patch is None:
            if self.major > 0:
                return v.minor >= self.minor
            return v.minor == self.minor
        if self.major > 0:
            if v.minor != self.minor:
                return v.minor > self.minor
        elif v.minor != self.minor:
            return False
        elif self.minor == 0 and v.patch != self.patch:
            # ^0.0.K only ever matches 0.0.K
            return False
        if v.patch != self.patch:
            return v.patch > self.patch
        return _compare_pre(v.pre, self.pre) >= 0


@dataclass(frozen=True)
class VersionReq:
    """A full requirement: comparators that must all match."""

    comparators: tuple[Comparator, ...]

    @classmethod
    def parse(cls, text: str) -> VersionReq:
        """Parse a requirement such as ``"1.2"``, ``">=1, <3"``, or ``"*"``.

        Raises:
            ValueError: If any comparator is invalid.
        """
        text = text.strip()
        if not text:
            return cls((Comparator(op="=", major=None),))
        return cls(tuple(Comparator.parse(part) for part in text.split(",")))

    def matches(self, version: Version) -> bool:
        """Check whether a version satisfies every comparator.

        Pre-release versions only match when some comparator names a
        pre-release of the same major.minor.patch, as in Cargo.
        """
        if not all(c.matches(version) for c in self.comparators):
            return False
        if version.pre is None:
            return True
        return any(
            c.pre is not None
            and (c.major, c.minor, c.patch)
            == (version.major, version.minor, version.patch)
            for c in self.comparators
        )
