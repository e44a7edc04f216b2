"""
L1 Domain — Version comparison (pure).

Debian ordering (``epoch:upstream-revision``, ``~`` sorting before
everything) via ``debian.debian_support.Version``; the comparator is
an object so callers and tests can substitute another ordering.
No I/O, no subprocess.
"""

from __future__ import annotations

import logging

from debian.debian_support import Version

from auxpkg.core.services.aux_install.domain.dependency_expr import OPERATORS

logger = logging.getLogger(__name__)


class VersionComparator:
    """Compare version strings with Debian semantics."""

    def compare(self, v1: str, v2: str) -> int:
        """Return -1, 0 or 1 as ``v1`` is less than, equal to or greater than ``v2``."""
        a, b = Version(v1), Version(v2)
        if a < b:
            return -1
        if a > b:
            return 1
        return 0

    def satisfies(
        self,
        version: str,
        operator: str | None,
        required: str | None,
    ) -> bool:
        """Check ``version <operator> required``.

        An alternative without an operator or version accepts any version.

        Raises:
            ValueError: On an operator outside ``<< <= = >= >>``.
        """
        if operator is None or required is None:
            return True
        if operator not in OPERATORS:
            raise ValueError(f"Unknown version operator: {operator!r}")

        try:
            cmp = self.compare(version, required)
        except ValueError as e:
            logger.warning("Cannot compare %r with %r: %s", version, required, e)
            return False

        if operator == "<<":
            return cmp < 0
        if operator == "<=":
            return cmp <= 0
        if operator == "=":
            return cmp == 0
        if operator == ">=":
            return cmp >= 0
        return cmp > 0  # ">>"

    def sort_key(self, version: str) -> Version:
        """Key for ``sorted()``; highest version last."""
        return Version(version)


DEFAULT_COMPARATOR = VersionComparator()
