"""Error types raised by the monger engine."""

from __future__ import annotations


class MongerError(Exception):
    """Base error for every failure surfaced by monger."""


class VersionNotFound(MongerError):
    def __init__(self, version: str) -> None:
        super().__init__(f"Unable to find version {version}")
        self.version = version


class NoReleasesFound(MongerError):
    def __init__(self, url: str) -> None:
        super().__init__(f"no stable releases were listed by {url}")
        self.url = url


class MalformedCatalogResponse(MongerError):
    def __init__(self, url: str, detail: str = "") -> None:
        message = f"response from {url} did not match expected structure"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.url = url


class UnsupportedPlatform(MongerError):
    def __init__(self, os_name: str) -> None:
        super().__init__(f"{os_name} is unsupported")
        self.os_name = os_name


class UnknownOperatingSystem(MongerError):
    def __init__(self, detail: str = "") -> None:
        message = "Unable to identify operating system"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class BinaryNotFound(MongerError):
    def __init__(self, binary: str, version: str) -> None:
        super().__init__(
            f"Unable to find binary `{binary}` for version {version}. Run `monger get {version}` "
            "and try again if you're sure the version and binary name are correct"
        )
        self.binary = binary
        self.version = version


class SubprocessFailed(MongerError):
    def __init__(self, command: str, exit_code: int | None) -> None:
        detail = f" (exit={exit_code})" if exit_code is not None else ""
        super().__init__(f"`{command}` command failed{detail}")
        self.command = command
        self.exit_code = exit_code


class ExtractionFailed(MongerError):
    def __init__(self, archive: str, detail: str) -> None:
        super().__init__(f"unable to extract {archive}: {detail}")
        self.archive = archive


class HttpFailure(MongerError):
    def __init__(self, url: str, detail: str = "", status_code: int | None = None) -> None:
        message = f"HTTP request to {url} failed"
        if status_code is not None:
            message = f"{message} (status={status_code})"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class HomeDirectoryUnavailable(MongerError):
    def __init__(self) -> None:
        super().__init__("Unable to find home directory")
