"""
L4 Execution — ``__init__.py`` re-exports the subprocess runner.

Everything that spawns a process goes through here.
"""

from auxpkg.core.services.aux_install.execution.subprocess_runner import (  # noqa: F401
    run_command,
)
