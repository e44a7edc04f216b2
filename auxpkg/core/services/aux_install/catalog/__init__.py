"""
L3 Catalog — ``__init__.py`` re-exports the package sources.

The Catalog itself is pure once built; the loaders touch the
filesystem (dpkg status, apt lists, archive cache) and the network.
"""

from auxpkg.core.services.aux_install.catalog.aux_archive import (  # noqa: F401
    CatalogError,
    archive_url,
    decode_archive,
    fetch_archive,
    load_aux_archive,
    parse_record,
    parse_records,
)
from auxpkg.core.services.aux_install.catalog.catalog import (  # noqa: F401
    Catalog,
    CatalogEntry,
)
from auxpkg.core.services.aux_install.catalog.system_index import (  # noqa: F401
    SystemIndex,
    load_system_index,
)
