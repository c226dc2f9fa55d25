"""Remote release catalog backed by the source-tarball index or a tag API."""

from __future__ import annotations

import logging
import re
from html.parser import HTMLParser
from typing import TYPE_CHECKING, Iterator, Protocol

from .client import HttpClient
from .errors import MalformedCatalogResponse
from .release import Release, is_stable, newest_plain_matching, select_newer, try_parse_release

if TYPE_CHECKING:
    from .config import MongerSettings

logger = logging.getLogger(__name__)

DEFAULT_INDEX_URL = "https://dl.mongodb.org/dl/src"
DEFAULT_TAGS_URL = "https://api.github.com/repos/mongodb/mongo/tags?per_page=100"

_SOURCE_TARBALL_RE = re.compile(r"src/mongodb-src-r(\d+\.\d+\.\d+)\.tar\.gz$")
_RELEASE_TAG_RE = re.compile(r"^r(\d+\.\d+\.\d+)$")


class Listing(Protocol):
    url: str

    def entries(self) -> Iterator[str]: ...

    def release_of(self, entry: str) -> Release | None: ...


class _LinkParser(HTMLParser):
    def __init__(self) -> None:
        super().__init__()
        self.links: list[str] = []
        self.anchors = 0

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag != "a":
            return
        self.anchors += 1
        for name, value in attrs:
            if name == "href" and value:
                self.links.append(value)


class HtmlIndexListing:
    """Anchors of an HTML directory index, newest first as the server lists them."""

    def __init__(self, client: HttpClient, url: str = DEFAULT_INDEX_URL) -> None:
        self.client = client
        self.url = url

    def entries(self) -> Iterator[str]:
        response = self.client.get(self.url)
        parser = _LinkParser()
        parser.feed(response.text)
        parser.close()
        if parser.anchors == 0:
            raise MalformedCatalogResponse(self.url, "no links in index page")
        yield from parser.links

    def release_of(self, entry: str) -> Release | None:
        match = _SOURCE_TARBALL_RE.search(entry)
        return try_parse_release(match.group(1)) if match else None


class TagApiListing:
    """Paginated JSON tag list; pages are fetched only as entries are consumed."""

    def __init__(self, client: HttpClient, url: str = DEFAULT_TAGS_URL) -> None:
        self.client = client
        self.url = url

    def entries(self) -> Iterator[str]:
        next_url: str | None = self.url
        while next_url:
            response = self.client.get(next_url)
            try:
                payload = response.json()
            except ValueError as exc:
                raise MalformedCatalogResponse(next_url, "invalid JSON payload") from exc
            if not isinstance(payload, list):
                raise MalformedCatalogResponse(next_url, "expected a JSON array of tags")
            for item in payload:
                if isinstance(item, dict) and isinstance(item.get("name"), str):
                    yield item["name"]
            next_url = (response.links.get("next") or {}).get("url")
            if next_url:
                logger.debug("following tag page %s", next_url)

    def release_of(self, entry: str) -> Release | None:
        match = _RELEASE_TAG_RE.match(entry.strip())
        return try_parse_release(match.group(1)) if match else None


class VersionCatalog:
    def __init__(self, listing: Listing) -> None:
        self.listing = listing

    @property
    def url(self) -> str:
        return self.listing.url

    def releases(self) -> Iterator[Release]:
        """Lazily yield plain releases in listing order; each call starts a fresh scan."""
        for entry in self.listing.entries():
            release = self.listing.release_of(entry)
            if release is None or not release.is_plain:
                continue
            yield release

    def list_stable(self) -> list[Release]:
        return sorted({r for r in self.releases() if is_stable(r)}, reverse=True)

    def list_development(self) -> Release | None:
        newest: Release | None = None
        for release in self.releases():
            if not is_stable(release):
                newest = select_newer(newest, release)
        return newest

    def newest_matching(self, major: int, minor: int) -> Release | None:
        return newest_plain_matching(self.releases(), major, minor)


def catalog_from_settings(settings: "MongerSettings", client: HttpClient) -> VersionCatalog:
    if settings.catalog_backend == "tags":
        return VersionCatalog(TagApiListing(client, settings.tags_url))
    return VersionCatalog(HtmlIndexListing(client, settings.catalog_url))
