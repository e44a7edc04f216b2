"""
L3 Detection — ``__init__.py`` re-exports all detection functions.

Read-only probes. No side effects.
"""

from auxpkg.core.services.aux_install.detection.distro_arch import (  # noqa: F401
    current_distro_arch,
    detect_arch,
    detect_distro,
)
