"""Defines strategies for discovering the releases published upstream."""

import json
from typing import Optional

import aiohttp
from bs4 import BeautifulSoup
from loguru import logger

from .exceptions import NetworkError, ParseError
from .models import ReleaseStrategy
from .version import Version


def extract_versions(html: str, selector: str = "a.inline-link") -> list[Version]:
    """
    Pull every version number out of a release index page.

    Each element matching ``selector`` contributes its first text child;
    anything that does not parse as ``M.m.p`` is skipped silently.

    Returns:
        Versions in document order, duplicates included.
    """
    soup = BeautifulSoup(html, "html.parser")
    versions = []
    for element in soup.select(selector):
        text = next(iter(element.strings), None)
        if text is None:
            continue
        version = Version.parse(text)
        if version is not None:
            versions.append(version)
    return versions


async def _fetch_text(session: aiohttp.ClientSession, url: str) -> str:
    try:
        async with session.get(url) as response:
            response.raise_for_status()
            return await response.text()
    except aiohttp.ClientResponseError as e:
        raise NetworkError(
            f"Failed to fetch {url}: HTTP {e.status}", url=url, status=e.status,
            original_error=e,
        ) from e
    except (aiohttp.ClientError, TimeoutError) as e:
        raise NetworkError(
            f"Failed to fetch {url}: {e}", url=url, original_error=e
        ) from e


class HtmlReleaseStrategy:
    """Scrapes version numbers from the HTML release notes index."""

    def __init__(self, url: str, selector: str = "a.inline-link"):
        self.url = url
        self.selector = selector

    async def fetch_versions(self, session: aiohttp.ClientSession) -> list[Version]:
        html = await _fetch_text(session, self.url)
        versions = extract_versions(html, self.selector)
        logger.debug(
            f"Found {len(versions)} versions matching '{self.selector}' on {self.url}"
        )
        return versions


class JsonReleaseStrategy:
    """Reads the latest version from a JSON product-details document."""

    def __init__(self, url: str, key: str = "LATEST_THUNDERBIRD_VERSION"):
        self.url = url
        self.key = key

    async def fetch_versions(self, session: aiohttp.ClientSession) -> list[Version]:
        text = await _fetch_text(session, self.url)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise ParseError(
                f"Release index at {self.url} is not valid JSON", original_error=e
            ) from e
        value = data.get(self.key) if isinstance(data, dict) else None
        if not isinstance(value, str):
            logger.debug(f"Key '{self.key}' missing from {self.url}")
            return []
        version = Version.parse(value)
        return [version] if version is not None else []


class ReleaseDiscoverer:
    """Finds the newest release offered by a strategy."""

    def __init__(self, strategy: ReleaseStrategy):
        self.strategy = strategy

    async def latest(self, session: aiohttp.ClientSession) -> Optional[Version]:
        """
        Return the highest version the strategy reports.

        Returns:
            The maximum Version, or None when nothing parsed.

        Raises:
            NetworkError: If the index could not be fetched.
        """
        versions = sorted(await self.strategy.fetch_versions(session))
        if not versions:
            return None
        return versions[-1]
