"""Shared fixtures: sample records and in-memory repository archives."""

import io
import tarfile

import pytest

AG_DESC = """%FILENAME%
mingw-w64-x86_64-ag-2.2.0-1-any.pkg.tar.xz

%NAME%
mingw-w64-x86_64-ag

%BASE%
mingw-w64-ag

%VERSION%
2.2.0-1

%DESC%
The Silver Searcher: An attempt to make something better than ack, which itself is better than grep (mingw-w64)

%CSIZE%
79428

%ISIZE%
145408

%MD5SUM%
3368b34f1506e7fd84185901dfd5ac2f

%SHA256SUM%
c2b39a45ddd3983f3f4d7f6df34935999454a4bff345d88c8c6e66c81a2f6d7e

%PGPSIG%
iHUEABEIAB0WIQStNRxQrghXdetZMztfku/BpH1FoQUCXQOnfgAKCRBfku/BpH1FoZzhAQCEjnsM18ZCqJHhEE0BwXVsH9ONj87w0Wt8W77ZElUcKwD/RcnlD4Ef7gmOdl+puSDMUNylHQ2wlOdumaVSkQlOhLw=

%URL%
https://geoff.greer.fm/ag

%LICENSE%
Apache

%ARCH%
any

%BUILDDATE%
1560520506

%PACKAGER%
Alexey Pavlov <alexpux@gmail.com>

%DEPENDS%
mingw-w64-x86_64-pcre
mingw-w64-x86_64-xz
mingw-w64-x86_64-zlib

%MAKEDEPENDS%
mingw-w64-x86_64-gcc
mingw-w64-x86_64-pkg-config

"""


def minimal_desc(name: str, version: str = "1.0-1", base: str | None = None, depends: list[str] | None = None) -> str:
    """Smallest desc record a `Package` accepts."""
    lines = [
        "%FILENAME%",
        f"{name}-{version}-x86_64.pkg.tar.zst",
        "",
        "%NAME%",
        name,
        "",
    ]
    if base is not None:
        lines += ["%BASE%", base, ""]
    lines += [
        "%VERSION%",
        version,
        "",
        "%CSIZE%",
        "1024",
        "",
        "%ISIZE%",
        "4096",
        "",
        "%SHA256SUM%",
        "0" * 64,
        "",
        "%ARCH%",
        "x86_64",
        "",
        "%BUILDDATE%",
        "1700000000",
        "",
        "%PACKAGER%",
        "Test Packager <test@example.org>",
        "",
    ]
    if depends:
        lines += ["%DEPENDS%", *depends, ""]
    return "\n".join(lines) + "\n"


def build_archive(members: dict[str, str]) -> bytes:
    """Gzip tar holding one regular file per `path: text` entry."""
    buffer = io.BytesIO()
    with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
        for path, text in members.items():
            data = text.encode("utf-8")
            info = tarfile.TarInfo(path)
            info.size = len(data)
            tar.addfile(info, io.BytesIO(data))
    return buffer.getvalue()


@pytest.fixture
def ag_desc() -> str:
    return AG_DESC


@pytest.fixture
def db_archive() -> bytes:
    return build_archive(
        {
            "glibc-2.39-1/desc": minimal_desc("glibc", "2.39-1", base="glibc", depends=["linux-api-headers>=4.10"]),
            "libwinpthread-12.0-1/desc": minimal_desc("libwinpthread", "12.0-1", base="winpthreads"),
            "libwinpthread-git-12.0.r1-1/desc": minimal_desc(
                "libwinpthread-git", "12.0.r1-1", base="winpthreads-git"
            ),
            "README": "not a package",
        }
    )


@pytest.fixture
def files_archive() -> bytes:
    return build_archive(
        {
            "glibc-2.39-1/files": "%FILES%\nusr/\nusr/lib/\nusr/lib/libc.so.6\n\n",
            "orphan-1.0-1/files": "%FILES%\nusr/bin/orphan\n\n",
        }
    )


@pytest.fixture
def desc_factory():
    return minimal_desc


@pytest.fixture
def archive_factory():
    return build_archive
