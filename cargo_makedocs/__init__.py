"""cargo-makedocs.

A `cargo doc` wrapper that only builds documentation for a crate's
direct dependencies, found by scanning Cargo.toml and Cargo.lock.
"""

__version__ = "0.1.0"
