"""Core engine for the monger MongoDB version manager."""

from .catalog import HtmlIndexListing, TagApiListing, VersionCatalog
from .client import HttpClient
from .config import MongerSettings, load_settings
from .errors import (
    BinaryNotFound,
    ExtractionFailed,
    HomeDirectoryUnavailable,
    HttpFailure,
    MalformedCatalogResponse,
    MongerError,
    NoReleasesFound,
    SubprocessFailed,
    UnknownOperatingSystem,
    UnsupportedPlatform,
    VersionNotFound,
)
from .monger import Monger
from .platform import OS_MAP, OS_NAMES, PlatformTag, identify
from .process import LaunchMode, ProcessLauncher
from .release import Release, parse_release
from .resolver import InstalledVersion, PinnedRelease, SystemVersion, VersionResolver
from .store import VersionStore
from .urls import DownloadTarget, build_download_target

__all__ = [
    "Monger",
    "MongerSettings",
    "load_settings",
    "HttpClient",
    "VersionCatalog",
    "HtmlIndexListing",
    "TagApiListing",
    "VersionResolver",
    "SystemVersion",
    "InstalledVersion",
    "PinnedRelease",
    "VersionStore",
    "LaunchMode",
    "ProcessLauncher",
    "Release",
    "parse_release",
    "PlatformTag",
    "OS_MAP",
    "OS_NAMES",
    "identify",
    "DownloadTarget",
    "build_download_target",
    "MongerError",
    "VersionNotFound",
    "NoReleasesFound",
    "MalformedCatalogResponse",
    "UnsupportedPlatform",
    "UnknownOperatingSystem",
    "BinaryNotFound",
    "SubprocessFailed",
    "ExtractionFailed",
    "HttpFailure",
    "HomeDirectoryUnavailable",
]
