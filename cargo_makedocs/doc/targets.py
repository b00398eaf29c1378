"""Compose the final set of packages to document."""

import logging
from typing import Iterable

logger = logging.getLogger(__name__)


def compose_targets(
    direct: Iterable[str],
    exclude: Iterable[str] = (),
    include: Iterable[str] = (),
) -> set[str]:
    """Apply exclusions, then inclusions, to the direct dependency names.

    Computes ``(direct - exclude) | include``. Because inclusions are
    applied last, a name given both to ``-e`` and ``-i`` is documented,
    however often and in whatever order the flags were repeated. Names
    are compared exactly; included names are not checked against the
    lock file.

    Args:
        direct: Resolved direct dependency names.
        exclude: Names to drop.
        include: Names to force in.

    Returns:
        The set of package names to document.
    """
    excluded = set(exclude)
    included = set(include)
    targets = (set(direct) - excluded) | included

    overridden = excluded & included
    if overridden:
        logger.info("Included despite exclusion: %s", ", ".join(sorted(overridden)))
    logger.debug("Documenting %d packages", len(targets))
    return targets
