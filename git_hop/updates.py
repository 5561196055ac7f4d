"""Background lookup of the latest released version."""
import logging
import re
import threading
from typing import Optional, Tuple

import httpx

logger = logging.getLogger(__name__)

PACKAGE_NAME = 'git-hop'
PYPI_URL = f'https://pypi.org/pypi/{PACKAGE_NAME}/json'
VERSION_PATTERN = re.compile(r'^\d+\.\d+\.\d+$')


def parse_version(version: str) -> Tuple[int, ...]:
    return tuple(int(part) for part in version.split('.'))


def is_newer(latest: str, current: str) -> bool:
    """Compare dotted versions numerically; unparsable ones are never newer."""
    if not VERSION_PATTERN.match(latest) or not VERSION_PATTERN.match(current):
        return False
    return parse_version(latest) > parse_version(current)


class UpdateChecker:
    """Fire-and-forget lookup of the latest version on PyPI.

    The request runs on a daemon thread that is never joined, so it can
    never hold up process exit. Whatever arrived by exit time is read
    from latest_version; failures leave it None.
    """

    def __init__(self, timeout: float = 3.0, url: str = PYPI_URL):
        self.timeout = timeout
        self.url = url
        self.latest_version: Optional[str] = None
        self._thread: Optional[threading.Thread] = None

    def start(self) -> None:
        self._thread = threading.Thread(target=self._fetch, name='update-check', daemon=True)
        self._thread.start()

    def _fetch(self) -> None:
        try:
            response = httpx.get(self.url, timeout=self.timeout)
            response.raise_for_status()
            version = response.json()['info']['version'].strip()
        except (httpx.HTTPError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.debug("Update check failed: %s", e)
            return

        if not VERSION_PATTERN.match(version):
            logger.debug("Ignoring unexpected version string %r", version)
            return

        logger.debug("Latest released version is %s", version)
        self.latest_version = version
