from __future__ import annotations

import pytest

from monger_core.platform import (
    OS_MAP,
    OSX_NOSSL,
    OSX_SSL,
    WINDOWS_2008,
    WINDOWS_2008R2,
    WINDOWS_2008R2_SSL,
)
from monger_core.release import parse_release
from monger_core.urls import NAMING_RULES, build_download_target, target_from_url


@pytest.mark.parametrize(
    ("os_name", "url"),
    [
        ("amazon", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-amazon-3.4.6.tgz"),
        ("debian71", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-debian71-3.4.6.tgz"),
        ("debian81", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-debian81-3.4.6.tgz"),
        ("legacy", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-3.4.6.tgz"),
        ("rhel62", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-rhel62-3.4.6.tgz"),
        ("rhel70", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-rhel70-3.4.6.tgz"),
        ("suse11", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-suse11-3.4.6.tgz"),
        ("suse12", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-suse12-3.4.6.tgz"),
        ("ubuntu1204", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-ubuntu1204-3.4.6.tgz"),
        ("ubuntu1404", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-ubuntu1404-3.4.6.tgz"),
        ("ubuntu1604", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-ubuntu1604-3.4.6.tgz"),
        ("ubuntu1604-arm", "https://fastdl.mongodb.org/linux/mongodb-linux-arm64-ubuntu1604-3.4.6.tgz"),
        ("ubuntu1804", "https://fastdl.mongodb.org/linux/mongodb-linux-x86_64-ubuntu1804-3.4.6.tgz"),
    ],
)
def test_linux_urls(os_name: str, url: str) -> None:
    target = build_download_target(OS_MAP[os_name], parse_release("3.4.6"))
    assert target.url == url
    assert target.filename == url.rsplit("/", 1)[-1]
    assert target.dirname == target.filename[: -len(".tgz")]


def test_osx_ssl_marker_is_dropped_from_dirname() -> None:
    ssl = build_download_target(OSX_SSL, parse_release("3.4.6"))
    assert ssl.url == "https://fastdl.mongodb.org/osx/mongodb-osx-ssl-x86_64-3.4.6.tgz"
    assert ssl.dirname == "mongodb-osx-x86_64-3.4.6"

    nossl = build_download_target(OSX_NOSSL, parse_release("3.4.6"))
    assert nossl.url == "https://fastdl.mongodb.org/osx/mongodb-osx-x86_64-3.4.6.tgz"
    assert nossl.dirname == "mongodb-osx-x86_64-3.4.6"


@pytest.mark.parametrize(
    ("version", "filename", "dirname"),
    [
        ("3.5.3", "mongodb-osx-ssl-x86_64-3.5.3.tgz", "mongodb-osx-x86_64-3.5.3"),
        ("3.5.4", "mongodb-osx-ssl-x86_64-3.5.4.tgz", "mongodb-macOS-x86_64-3.5.4"),
        ("3.5.13", "mongodb-osx-ssl-x86_64-3.5.13.tgz", "mongodb-macOS-x86_64-3.5.13"),
        ("3.6.0", "mongodb-osx-ssl-x86_64-3.6.0.tgz", "mongodb-osx-x86_64-3.6.0"),
        ("4.1.0", "mongodb-osx-ssl-x86_64-4.1.0.tgz", "mongodb-osx-x86_64-4.1.0"),
        ("4.1.1", "mongodb-macos-x86_64-4.1.1.tgz", "mongodb-macos-x86_64-4.1.1"),
        ("4.2.3", "mongodb-macos-x86_64-4.2.3.tgz", "mongodb-macos-x86_64-4.2.3"),
    ],
)
def test_macos_naming_eras(version: str, filename: str, dirname: str) -> None:
    target = build_download_target(OSX_SSL, parse_release(version))
    assert target.filename == filename
    assert target.dirname == dirname
    assert target.url == f"https://fastdl.mongodb.org/osx/{filename}"


def test_nossl_build_never_uses_new_macos_filename() -> None:
    target = build_download_target(OSX_NOSSL, parse_release("4.2.0"))
    assert target.filename == "mongodb-osx-x86_64-4.2.0.tgz"


@pytest.mark.parametrize(
    ("tag", "url"),
    [
        (WINDOWS_2008, "https://fastdl.mongodb.org/win32/mongodb-win32-x86_64-3.4.6-signed.msi"),
        (WINDOWS_2008R2, "https://fastdl.mongodb.org/win32/mongodb-win32-x86_64-2008plus-3.4.6-signed.msi"),
        (
            WINDOWS_2008R2_SSL,
            "https://fastdl.mongodb.org/win32/mongodb-win32-x86_64-2008plus-ssl-3.4.6-signed.msi",
        ),
    ],
)
def test_windows_urls(tag, url: str) -> None:
    assert build_download_target(tag, parse_release("3.4.6")).url == url


def test_custom_base_url_and_rule_order() -> None:
    target = build_download_target(
        OS_MAP["legacy"], parse_release("4.0.0"), base_url="http://mirror.local/mongo/"
    )
    assert target.url == "http://mirror.local/mongo/linux/mongodb-linux-x86_64-4.0.0.tgz"
    assert [rule.name for rule in NAMING_RULES] == ["macos-filename", "ssl-not-in-dirname", "macos-dirname"]


def test_target_from_url() -> None:
    target = target_from_url("https://example.test/builds/mongodb-linux-x86_64-enterprise-4.2.0.tgz?sig=1")
    assert target.filename == "mongodb-linux-x86_64-enterprise-4.2.0.tgz"
    assert target.dirname == "mongodb-linux-x86_64-enterprise-4.2.0"
    assert target_from_url("http://x/a/b.tar.gz").dirname == "b"
    with pytest.raises(ValueError):
        target_from_url("http://example.test/")
