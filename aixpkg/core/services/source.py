"""
Source resolver — turn a package locator into a local path.

``http``, ``https`` and ``ftp`` locators are downloaded into a private
temporary directory that lives only as long as the ``resolve_source``
block. The file keeps the locator's final path segment as its name, so
suffix-based type detection works on the download too. Anything else
is returned unchanged and treated as a filesystem path.
"""

from __future__ import annotations

import logging
import shutil
import ssl
import tempfile
import urllib.error
import urllib.request
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path, PurePosixPath
from urllib.parse import urlparse

from aixpkg.core.errors import SourceFetchError

logger = logging.getLogger(__name__)

REMOTE_SCHEMES = ("http", "https", "ftp")
_CHUNK = 64 * 1024


def is_remote(locator: str | None) -> bool:
    if not locator:
        return False
    return urlparse(locator).scheme.lower() in REMOTE_SCHEMES


def _ssl_context(verify_ssl: bool) -> ssl.SSLContext:
    context = ssl.create_default_context()
    if not verify_ssl:
        context.check_hostname = False
        context.verify_mode = ssl.CERT_NONE
    return context


def fetch(locator: str, destination: Path, *, verify_ssl: bool = False, timeout: float = 300) -> Path:
    """Download ``locator`` to ``destination``.

    Raises:
        SourceFetchError: Transport failure or a non-200 HTTP reply.
    """
    scheme = urlparse(locator).scheme.lower()
    context = None
    if scheme == "https":
        if not verify_ssl:
            logger.warning("Certificate verification disabled for %s", locator)
        context = _ssl_context(verify_ssl)

    logger.warning("Fetching %s", locator)
    try:
        with urllib.request.urlopen(locator, timeout=timeout, context=context) as resp:
            status = getattr(resp, "status", None)
            if scheme in ("http", "https") and status != 200:
                raise SourceFetchError(f"Can't download package {locator} (HTTP {status})")
            with destination.open("wb") as fh:
                shutil.copyfileobj(resp, fh, _CHUNK)
    except urllib.error.HTTPError as e:
        raise SourceFetchError(f"Can't download package {locator} (HTTP {e.code})") from e
    except (urllib.error.URLError, OSError) as e:
        raise SourceFetchError(f"Can't download package {locator}: {e}") from e

    logger.debug("Downloaded %s to %s", locator, destination)
    return destination


@contextmanager
def resolve_source(
    locator: str | None,
    *,
    verify_ssl: bool = False,
    download_dir: str | None = None,
) -> Iterator[str | None]:
    """Yield a local path for ``locator`` (or None when there is no source).

    Downloads are removed when the block exits, on every exit path.
    """
    if not is_remote(locator):
        yield locator
        return

    assert locator is not None
    filename = PurePosixPath(urlparse(locator).path).name or "package"
    workdir = Path(tempfile.mkdtemp(prefix="aixpkg-", dir=download_dir))
    try:
        yield str(fetch(locator, workdir / filename, verify_ssl=verify_ssl))
    finally:
        shutil.rmtree(workdir, ignore_errors=True)
        logger.debug("Removed download directory %s", workdir)
