"""
L1 Domain — Dependency expression parsing (pure).

A dependency expression is a ``|``-separated list of alternatives,
each ``name[op version]`` with ``op`` one of ``<< <= = >= >>``.
Debian's parenthesised form (``libfoo (>= 1.2)``) is accepted too.
No I/O, no subprocess.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

OPERATORS = ("<<", "<=", "=", ">=", ">>")

_ALTERNATIVE_RE = re.compile(
    r"""
    ^\s*
    (?P<name>[A-Za-z0-9@_+][A-Za-z0-9@_+.\-]*)      # package name
    (?::(?P<archq>[A-Za-z0-9\-]+))?                  # optional :any / :native
    \s*
    (?:
        \(?\s*
        (?P<op><<|<=|>=|>>|=)
        \s*
        (?P<version>[^\s()|]+)
        \s*\)?
    )?
    \s*$
    """,
    re.VERBOSE,
)


@dataclass(frozen=True)
class Alternative:
    """One ``name[op version]`` alternative of an expression."""

    name: str
    operator: str | None = None
    version: str | None = None
    arch_qualifier: str | None = None

    @property
    def constrained(self) -> bool:
        return self.operator is not None and self.version is not None

    def __str__(self) -> str:
        if self.constrained:
            return f"{self.name}{self.operator}{self.version}"
        return self.name


@dataclass(frozen=True)
class DependencyExpression:
    """An ordered OR-list of alternatives."""

    raw: str
    alternatives: tuple[Alternative, ...]

    @property
    def names(self) -> list[str]:
        return [alt.name for alt in self.alternatives]


def parse_alternative(text: str) -> Alternative:
    """Parse a single alternative.

    Raises:
        ValueError: If ``text`` is not ``name[op version]``.
    """
    match = _ALTERNATIVE_RE.match(text)
    if not match:
        raise ValueError(f"Invalid dependency alternative: {text!r}")
    return Alternative(
        name=match.group("name"),
        operator=match.group("op"),
        version=match.group("version"),
        arch_qualifier=match.group("archq"),
    )


def parse_expression(text: str) -> DependencyExpression:
    """Parse ``a|b>=2|c`` into a DependencyExpression.

    Empty alternatives (``a||b``) are dropped.

    Raises:
        ValueError: If any alternative is malformed, or none remain.
    """
    parts = [p for p in text.split("|") if p.strip()]
    if not parts:
        raise ValueError(f"Empty dependency expression: {text!r}")
    return DependencyExpression(
        raw=text.strip(),
        alternatives=tuple(parse_alternative(p) for p in parts),
    )


def dependency_names(expressions: list[str]) -> set[str]:
    """Every package name mentioned by any alternative of any expression."""
    names: set[str] = set()
    for text in expressions:
        names.update(parse_expression(text).names)
    return names


def provided_names(expressions: list[str]) -> dict[str, str | None]:
    """Parse ``Provides`` entries into ``{name: version-or-None}``.

    ``foo=1.2`` declares a versioned provide; ``foo`` an unversioned one.
    """
    provided: dict[str, str | None] = {}
    for text in expressions:
        for alt in parse_expression(text).alternatives:
            provided[alt.name] = alt.version if alt.operator == "=" else None
    return provided
