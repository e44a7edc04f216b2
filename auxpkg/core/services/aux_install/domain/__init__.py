"""
L1 Domain — ``__init__.py`` re-exports all pure domain functions.

These functions have NO subprocess calls, NO filesystem access,
NO network calls. Pure input→output.
"""

from auxpkg.core.services.aux_install.domain.dag import (  # noqa: F401
    find_cycles,
    strongly_connected_components,
)
from auxpkg.core.services.aux_install.domain.dependency_expr import (  # noqa: F401
    OPERATORS,
    Alternative,
    DependencyExpression,
    dependency_names,
    parse_alternative,
    parse_expression,
    provided_names,
)
from auxpkg.core.services.aux_install.domain.errors import (  # noqa: F401
    CyclicDependency,
    RecursionExceeded,
    ResolutionError,
    UnknownPackage,
    UnsatisfiableDependency,
)
from auxpkg.core.services.aux_install.domain.version_compare import (  # noqa: F401
    DEFAULT_COMPARATOR,
    VersionComparator,
)
