"""
L3 Catalog — Auxiliary repository archive.

The auxiliary repository publishes its whole package list as one
gzip-compressed JSON document, regenerated every few minutes. This
module downloads it, keeps a cached copy, and turns its entries into
PackageRecords.

Relation keys follow the makedeb variable convention:
``Depends``, ``focal_Depends``, ``Depends_amd64``, ``focal_Depends_amd64``.
"""

from __future__ import annotations

import gzip
import json
import logging
import re
import time
import urllib.error
import urllib.request
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from auxpkg import __version__
from auxpkg.core.models import DependencyTable, DistroArchKey, Origin, PackageRecord

logger = logging.getLogger(__name__)

ARCHIVE_NAME = "packages-meta-ext-v2.json.gz"
CACHE_FILE = "cache.gz"

_RELATION_KEY_RE = re.compile(
    r"^(?:(?P<distro>[a-z0-9]+)_)?"
    r"(?P<rel>Depends|MakeDepends|CheckDepends|Conflicts|Provides)"
    r"(?:_(?P<arch>[a-z0-9]+))?$"
)

_RELATION_FIELDS = {
    "Depends": "depends",
    "MakeDepends": "makedepends",
    "CheckDepends": "checkdepends",
    "Conflicts": "conflicts",
    "Provides": "provides",
}


class CatalogError(Exception):
    """The auxiliary archive could not be fetched, decoded or validated."""


def archive_url(mpr_url: str) -> str:
    return f"{mpr_url.rstrip('/')}/{ARCHIVE_NAME}"


def fetch_archive(mpr_url: str, timeout: int = 60) -> bytes:
    """Download the compressed archive.

    Raises:
        CatalogError: On any HTTP or network failure.
    """
    url = archive_url(mpr_url)
    logger.info("Downloading package archive from %s", url)
    req = urllib.request.Request(url, headers={"User-Agent": f"auxpkg/{__version__}"})
    try:
        with urllib.request.urlopen(req, timeout=timeout) as resp:
            return resp.read()
    except urllib.error.HTTPError as e:
        raise CatalogError(f"Failed to download {url}: HTTP {e.code}") from e
    except (urllib.error.URLError, OSError) as e:
        raise CatalogError(f"Failed to download {url}: {e}") from e


def decode_archive(data: bytes) -> list[dict[str, Any]]:
    """Decompress and validate an archive.

    Raises:
        CatalogError: If the data is not gzip, not JSON, or not a list
            of objects each carrying ``Name`` and ``Version``.
    """
    try:
        raw = gzip.decompress(data)
    except (OSError, EOFError) as e:
        raise CatalogError(f"Package archive is not valid gzip data: {e}") from e
    try:
        entries = json.loads(raw)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise CatalogError(f"Package archive is not valid JSON: {e}") from e

    if not isinstance(entries, list):
        raise CatalogError("Package archive must be a JSON list")
    for i, entry in enumerate(entries):
        if not isinstance(entry, dict) or "Name" not in entry or "Version" not in entry:
            raise CatalogError(f"Package archive entry {i} is missing Name/Version")
    return entries


def parse_record(entry: dict[str, Any]) -> PackageRecord:
    """Turn one archive entry into an auxiliary PackageRecord.

    Raises:
        CatalogError: The entry has no Name or Version, or a field of
            the wrong type.
    """
    name = entry.get("Name")
    version = entry.get("Version")
    if not name or not version:
        raise CatalogError(f"Package archive entry {name or '<unnamed>'} is missing Name/Version")

    tables = {field: DependencyTable() for field in _RELATION_FIELDS.values()}

    for key, value in entry.items():
        match = _RELATION_KEY_RE.match(key)
        if not match or not value:
            continue
        if isinstance(value, str):
            value = [value]
        dist_key = DistroArchKey(match.group("distro"), match.group("arch"))
        tables[_RELATION_FIELDS[match.group("rel")]].add(dist_key, [str(v) for v in value])

    try:
        return PackageRecord(
            name=name,
            base=entry.get("PackageBase") or name,
            version=version,
            origin=Origin.AUXILIARY,
            description=entry.get("Description") or "",
            maintainer=entry.get("Maintainer"),
            **tables,
        )
    except ValidationError as e:
        raise CatalogError(f"Invalid package archive entry {name}: {e}") from e


def parse_records(entries: list[dict[str, Any]]) -> dict[str, PackageRecord]:
    """Index archive entries by package name; later duplicates win."""
    records: dict[str, PackageRecord] = {}
    for entry in entries:
        record = parse_record(entry)
        records[record.name] = record
    return records


# ── Cache ──────────────────────────────────────────────────────


def _cache_is_fresh(path: Path, max_age: float) -> bool:
    if not path.is_file():
        return False
    return (time.time() - path.stat().st_mtime) < max_age


def load_aux_archive(
    mpr_url: str,
    cache_dir: str | Path,
    max_age: float = 300,
    *,
    refresh: bool = False,
) -> dict[str, PackageRecord]:
    """Return the auxiliary catalog, downloading it when the cache is stale.

    A cached archive that fails to decode is deleted and fetched again
    once; a freshly downloaded archive that fails to decode raises.

    Args:
        mpr_url: Base URL of the auxiliary repository.
        cache_dir: Directory holding ``cache.gz``.
        max_age: Seconds a cached archive stays fresh.
        refresh: Ignore the cache and always download.

    Raises:
        CatalogError: When no valid archive can be obtained.
    """
    cache_path = Path(cache_dir) / CACHE_FILE

    if not refresh and _cache_is_fresh(cache_path, max_age):
        try:
            entries = decode_archive(cache_path.read_bytes())
            logger.debug("Using cached package archive %s", cache_path)
            return parse_records(entries)
        except CatalogError as e:
            logger.warning("Cached package archive is corrupt, refetching: %s", e)
            cache_path.unlink(missing_ok=True)

    data = fetch_archive(mpr_url)
    records = parse_records(decode_archive(data))

    try:
        cache_path.parent.mkdir(parents=True, exist_ok=True)
        cache_path.write_bytes(data)
    except OSError as e:
        logger.warning("Could not write package archive cache %s: %s", cache_path, e)

    logger.info("Loaded %d auxiliary packages", len(records))
    return records
