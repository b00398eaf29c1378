"""Build and run the `cargo doc` invocation.

Turns the final package set into a `cargo doc --no-deps` command line
and runs it in the foreground, with cargo's output passed straight
through to the terminal.
"""

import logging
import shlex
import subprocess
from dataclasses import dataclass
from typing import Iterable, Mapping, Optional

from cargo_makedocs.errors import LaunchError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DocCommand:
    """A fully built cargo command line.

    Attributes:
        argv: Program followed by its arguments.
    """

    argv: tuple[str, ...]

    @property
    def program(self) -> str:
        return self.argv[0]

    def __str__(self) -> str:
        return shlex.join(self.argv)


def build_doc_command(
    targets: Iterable[str],
    program: str = "cargo",
    selectors: Optional[Mapping[str, str]] = None,
    root_pkgid: Optional[str] = None,
    document_private_items: bool = False,
    open_docs: bool = False,
    manifest_path: Optional[str] = None,
) -> DocCommand:
    """Build the `cargo doc` command for a set of packages.

    Args:
        targets: Package names to document.
        program: Cargo executable.
        selectors: Optional package ID specs by name, used in place of
            the bare name (e.g. ``"syn@1.0.109"``).
        root_pkgid: Package ID of the current crate, to document it too.
        document_private_items: Pass ``--document-private-items``.
        open_docs: Pass ``--open``.
        manifest_path: Pass ``--manifest-path``.

    Returns:
        The DocCommand, with one ``-p`` per package in name order.
    """
    selectors = selectors or {}
    argv = [program, "doc", "--no-deps"]
    for name in sorted(targets):
        argv.extend(["-p", selectors.get(name, name)])
    if root_pkgid:
        argv.extend(["-p", root_pkgid])
    if document_private_items:
        argv.append("--document-private-items")
    if open_docs:
        argv.append("--open")
    if manifest_path:
        argv.extend(["--manifest-path", manifest_path])
    return DocCommand(tuple(argv))


def query_root_pkgid(program: str = "cargo", manifest_path: Optional[str] = None) -> str:
    """Ask cargo for the package ID of the current crate.

    Args:
        program: Cargo executable.
        manifest_path: Optional manifest to query instead of the one
            cargo finds from the working directory.

    Returns:
        The package ID spec printed by ``cargo pkgid``.

    Raises:
        LaunchError: If cargo cannot be started or ``cargo pkgid`` fails.
    """
    argv = [program, "pkgid"]
    if manifest_path:
        argv.extend(["--manifest-path", manifest_path])
    try:
        result = subprocess.run(argv, capture_output=True, text=True, check=True)
    except OSError as e:
        raise LaunchError(f"could not launch {program}: {e}") from e
    except subprocess.CalledProcessError as e:
        raise LaunchError(f"`{shlex.join(argv)}` failed: {e.stderr.strip()}") from e

    pkgid = result.stdout.strip()
    if not pkgid:
        raise LaunchError(f"`{shlex.join(argv)}` printed no package ID")
    logger.debug("Root package ID: %s", pkgid)
    return pkgid


def run_command(command: DocCommand) -> int:
    """Run a command in the foreground and return its exit code.

    Standard output and error are inherited, so the child's output is
    not captured or altered. The terminal delivers Ctrl-C to the child
    as well, so on the first interrupt the child is given the chance to
    exit on its own; a second interrupt propagates.

    Args:
        command: The command to run.

    Returns:
        The child's exit code, or 128 plus the signal number if it was
        killed by a signal.

    Raises:
        LaunchError: If the program cannot be started.
        KeyboardInterrupt: If interrupted again while the child is
            shutting down.
    """
    logger.info("Running %s", command)
    try:
        process = subprocess.Popen(list(command.argv))
    except OSError as e:
        raise LaunchError(f"could not launch {command.program}: {e}") from e

    try:
        code = process.wait()
    except KeyboardInterrupt:
        logger.debug("Interrupted, waiting for %s to exit", command.program)
        code = process.wait()

    if code < 0:
        code = 128 - code
    logger.debug("%s exited with %d", command.program, code)
    return code
