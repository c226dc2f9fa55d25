from __future__ import annotations

from pathlib import Path

import pytest

from monger_core.errors import UnknownOperatingSystem, UnsupportedPlatform
from monger_core.platform import (
    OS_MAP,
    OS_NAMES,
    Architecture,
    detect_linux,
    identify,
    platform_from_name,
    read_os_release,
)
from monger_core.release import parse_release


@pytest.mark.parametrize(
    ("distro_id", "version_id", "machine", "expected"),
    [
        ("ubuntu", "18.04", "x86_64", "ubuntu1804"),
        ("ubuntu", "20.04", "x86_64", "ubuntu1804"),
        ("ubuntu", "16.04", "x86_64", "ubuntu1604"),
        ("ubuntu", "16.04", "aarch64", "ubuntu1604-arm"),
        ("ubuntu", "14.04", "x86_64", "ubuntu1404"),
        ("ubuntu", "12.04", "x86_64", "ubuntu1204"),
        ("amzn", "2", "x86_64", "amazon"),
        ("centos", "7", "x86_64", "rhel70"),
        ("rhel", "6.9", "x86_64", "rhel62"),
        ("suse", "12.3", "x86_64", "suse12"),
        ("suse", "11", "x86_64", "suse11"),
        ("debian", "8", "x86_64", "debian81"),
        ("debian", "7.11", "x86_64", "debian71"),
        ("debian", "10", "x86_64", "legacy"),
        ("ubuntu", "10.04", "x86_64", "legacy"),
        ("arch", None, "x86_64", "legacy"),
    ],
)
def test_detect_linux_distributions(distro_id: str, version_id: str | None, machine: str, expected: str) -> None:
    info = {"ID": distro_id}
    if version_id is not None:
        info["VERSION_ID"] = version_id
    assert detect_linux(info, machine).name == expected


def test_detect_linux_requires_id() -> None:
    with pytest.raises(UnknownOperatingSystem):
        detect_linux({"VERSION_ID": "18.04"})


def test_identify_linux_reads_os_release() -> None:
    tag = identify(
        parse_release("4.2.0"),
        system="Linux",
        machine="x86_64",
        os_release_reader=lambda: {"ID": "ubuntu", "VERSION_ID": "18.04"},
    )
    assert tag is OS_MAP["ubuntu1804"]
    assert tag.arch is Architecture.X86_64


def test_identify_macos_depends_on_release_major() -> None:
    assert identify(parse_release("2.6.12"), system="Darwin").name == "osx-nossl"
    assert identify(parse_release("3.0.0"), system="Darwin").name == "osx"


def test_identify_rejects_windows_and_unknown_hosts() -> None:
    with pytest.raises(UnsupportedPlatform):
        identify(parse_release("4.2.0"), system="Windows")
    with pytest.raises(UnsupportedPlatform):
        identify(parse_release("4.2.0"), system="FreeBSD")


def test_read_os_release_strips_quotes(tmp_path: Path) -> None:
    path = tmp_path / "os-release"
    path.write_text('# comment\nID=ubuntu\nVERSION_ID="18.04"\nNAME=\'Ubuntu\'\n\n', encoding="utf-8")
    info = read_os_release([tmp_path / "missing", path])
    assert info == {"ID": "ubuntu", "VERSION_ID": "18.04", "NAME": "Ubuntu"}


def test_read_os_release_without_file_is_unknown_os(tmp_path: Path) -> None:
    with pytest.raises(UnknownOperatingSystem):
        read_os_release([tmp_path / "nope"])


def test_platform_names_table_is_read_only() -> None:
    assert "osx-nossl" in OS_NAMES
    assert list(OS_NAMES) == sorted(OS_NAMES)
    assert platform_from_name("ubuntu1604-arm").arch is Architecture.ARM
    with pytest.raises(TypeError):
        OS_MAP["custom"] = OS_MAP["legacy"]  # type: ignore[index]
    with pytest.raises(UnsupportedPlatform):
        platform_from_name("win32")
