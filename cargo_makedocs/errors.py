"""Exception types raised by cargo-makedocs.

Library code raises these; the CLI turns them into an error message
and a non-zero exit code.
"""


class MakedocsError(Exception):
    """Base class for all fatal cargo-makedocs errors."""


class ParseError(MakedocsError):
    """Cargo.toml or Cargo.lock is missing, unreadable, or malformed."""


class LaunchError(MakedocsError):
    """A cargo subprocess could not be started."""
