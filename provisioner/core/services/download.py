"""
Downloads — signing keys and tool archives.

Uses ``urllib.request``; no timeout is applied, a stalled transfer
blocks the run like any other external step.
"""

from __future__ import annotations

import io
import logging
import tarfile
import urllib.request
from pathlib import Path

logger = logging.getLogger(__name__)

_USER_AGENT = "proxy-balancer-install/1.0"


def fetch_bytes(url: str) -> bytes:
    """Download ``url`` and return the body.

    Raises:
        OSError: On any network or HTTP failure (``URLError`` is an OSError).
    """
    logger.debug("Downloading %s", url)
    req = urllib.request.Request(url, headers={"User-Agent": _USER_AGENT})
    with urllib.request.urlopen(req) as resp:
        return resp.read()


def extract_tarball(data: bytes, target: Path) -> list[str]:
    """Extract a gzip tarball into ``target``; returns top-level names.

    Raises:
        tarfile.TarError: If the archive is corrupt.
    """
    target.mkdir(parents=True, exist_ok=True)
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
        tar.extractall(target, filter="data")
        return sorted({name.split("/", 1)[0] for name in tar.getnames()})
