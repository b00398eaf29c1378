"""Entry point for cargo-makedocs.

Installed as the ``cargo-makedocs`` executable, which cargo finds on
PATH and runs as ``cargo-makedocs makedocs ...`` for ``cargo makedocs ...``.
"""

from cargo_makedocs.cli.commands import cargo


def main() -> None:
    """Launch the CLI."""
    cargo(prog_name="cargo-makedocs")


if __name__ == "__main__":
    main()
