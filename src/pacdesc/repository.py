"""
Load a repository database (`<repo>.db.tar.gz`, optionally `<repo>.files.tar.gz`)
from a mirror or from local archive bytes, and index its packages.

Example:
    repo = asyncio.run(Repository.load("core", "https://mirror.example/core/os/x86_64"))
    glibc = repo["glibc"]
    for package in repo:
        print(package.name)
"""

import io
import logging
import tarfile
from collections import defaultdict
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Literal

import httpx

from .decoder import decode
from .errors import DescError, HttpStatusError, RepositoryError
from .models import Package, PackageFiles

logger = logging.getLogger(__name__)

VCS_SUFFIXES = ["-cvs", "-svn", "-hg", "-darcs", "-bzr", "-git"]
DESC_MEMBER = "desc"
FILES_MEMBER = "files"
DEFAULT_TIMEOUT = 30.0

Stage = Literal[
    "loading_db",
    "loading_db_chunk",
    "reading_db_file",
    "db_done",
    "loading_files",
    "loading_files_chunk",
    "reading_files_file",
    "files_done",
]


@dataclass(frozen=True)
class Progress:
    """A loading progress event passed to the progress callback."""

    stage: Stage
    bytes_read: int | None = None
    total: int | None = None
    member: str | None = None

    def __str__(self) -> str:
        if self.stage == "loading_db":
            return "Loading repository database"
        if self.stage == "loading_db_chunk":
            if self.total is not None:
                return f"Loading repository: {self.bytes_read} of {self.total} bytes"
            return f"Loading repository: {self.bytes_read} bytes"
        if self.stage == "reading_db_file":
            return f"Loading repository file: {self.member}"
        if self.stage == "db_done":
            return "Database loaded"
        if self.stage == "loading_files":
            return "Loading files metadata"
        if self.stage == "loading_files_chunk":
            if self.total is not None:
                return f"Loading files metadata: {self.bytes_read} of {self.total} bytes"
            return f"Loading files metadata: {self.bytes_read} bytes"
        if self.stage == "reading_files_file":
            return f"Loading files metadata file: {self.member}"
        return "Files metadata loaded"


ProgressCallback = Callable[[Progress], None]


def _ignore_progress(progress: Progress) -> None:
    pass


class _PackageIndex:
    """Packages of one database load, with the lookup maps built from them."""

    def __init__(self) -> None:
        self.packages: list[Package] = []
        self.by_name: dict[str, Package] = {}
        self.by_base: dict[str, Package] = {}
        self.by_name_version: dict[str, Package] = {}
        self.files: dict[str, list[str]] = {}
        self.linked_sources: dict[str, list[Package]] = defaultdict(list)

    def insert(self, package: Package) -> None:
        if package.base is not None:
            if package.base in self.by_base:
                logger.warning(f"Found package {package.name} with already registered base name! Ignoring...")
            else:
                self.by_base[package.base] = package
        self.by_name[package.name] = package
        self.by_name_version[package.name_and_version] = package
        self.packages.append(package)
        for suffix in VCS_SUFFIXES:
            if package.name.endswith(suffix):
                self.linked_sources[package.name[: -len(suffix)]].append(package)


def _iter_members(archive: bytes, member_name: str) -> Iterator[tuple[str, bytes]]:
    """Yield (path, content) of every `<dir>/<member_name>` file in a compressed tar."""
    try:
        with tarfile.open(fileobj=io.BytesIO(archive), mode="r:*") as tar:
            for member in tar:
                if not member.isfile() or not member.name.endswith(f"/{member_name}"):
                    continue
                handle = tar.extractfile(member)
                if handle is None:
                    continue
                yield member.name, handle.read()
    except tarfile.TarError as e:
        raise RepositoryError(f"Cannot read repository archive: {e}") from e


class Repository:
    """An indexed pacman repository database."""

    def __init__(
        self,
        name: str,
        url: str | None = None,
        files_metadata: bool = False,
        progress: ProgressCallback | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        encoding: str = "utf-8",
    ):
        self.name = name
        self.url = url.rstrip("/") if url else None
        self.files_metadata = files_metadata
        self.timeout = timeout
        self.encoding = encoding
        self._progress = progress or _ignore_progress
        self._index = _PackageIndex()

    # -------------------------------------------------------------------------
    # Loading
    # -------------------------------------------------------------------------

    @classmethod
    def from_archives(
        cls,
        name: str,
        db_archive: bytes,
        files_archive: bytes | None = None,
        progress: ProgressCallback | None = None,
        encoding: str = "utf-8",
    ) -> "Repository":
        """Build a repository from already downloaded archive bytes."""
        repo = cls(name, files_metadata=files_archive is not None, progress=progress, encoding=encoding)
        repo._index = repo._build_index(db_archive, files_archive)
        return repo

    @classmethod
    async def load(
        cls,
        name: str,
        url: str,
        files_metadata: bool = False,
        progress: ProgressCallback | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> "Repository":
        """Download and index `<url>/<name>.db.tar.gz` (and `.files.tar.gz` if requested)."""
        repo = cls(name, url, files_metadata=files_metadata, progress=progress, timeout=timeout)
        await repo.reload()
        return repo

    async def reload(self) -> None:
        """Download the databases again; the current index is kept if loading fails."""
        if self.url is None:
            raise RepositoryError(f"Repository {self.name} has no URL to load from")
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            self._progress(Progress("loading_db"))
            db_archive = await self._download(
                client, f"{self.url}/{self.name}.db.tar.gz", "loading_db_chunk"
            )
            files_archive = None
            if self.files_metadata:
                self._progress(Progress("loading_files"))
                files_archive = await self._download(
                    client, f"{self.url}/{self.name}.files.tar.gz", "loading_files_chunk"
                )
        self._index = self._build_index(db_archive, files_archive)

    async def _download(self, client: httpx.AsyncClient, url: str, stage: Stage) -> bytes:
        buffer = bytearray()
        async with client.stream("GET", url) as response:
            if not response.is_success:
                raise HttpStatusError(url, response.status_code)
            length = response.headers.get("content-length")
            total = int(length) if length is not None and length.isdigit() else None
            async for chunk in response.aiter_bytes():
                buffer.extend(chunk)
                self._progress(Progress(stage, bytes_read=len(buffer), total=total))
        logger.debug(f"Downloaded {len(buffer)} bytes from {url}")
        return bytes(buffer)

    def _build_index(self, db_archive: bytes, files_archive: bytes | None) -> _PackageIndex:
        index = _PackageIndex()
        for path, content in _iter_members(db_archive, DESC_MEMBER):
            self._progress(Progress("reading_db_file", member=path))
            try:
                package = decode(content.decode(self.encoding), Package)
            except (DescError, UnicodeDecodeError):
                logger.error(f"Failed to decode package description {path}")
                raise
            index.insert(package)
        self._progress(Progress("db_done"))

        if files_archive is not None:
            for path, content in _iter_members(files_archive, FILES_MEMBER):
                self._progress(Progress("reading_files_file", member=path))
                try:
                    files = decode(content.decode(self.encoding), PackageFiles)
                except (DescError, UnicodeDecodeError):
                    logger.error(f"Failed to decode files metadata {path}")
                    raise
                name_version = path.rsplit("/", 2)[-2]
                package = index.by_name_version.get(name_version)
                if package is None:
                    logger.warning(f"Files metadata {path} has no matching package, skipping")
                    continue
                index.files[package.name] = files.files
            self._progress(Progress("files_done"))

        logger.info(f"Indexed {len(index.packages)} packages of repository {self.name}")
        return index

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get_by_name(self, name: str) -> Package | None:
        return self._index.by_name.get(name)

    def get_by_base(self, base: str) -> Package | None:
        """Package by base name. Not every package has one."""
        return self._index.by_base.get(base)

    def get_by_name_and_version(self, name_version: str) -> Package | None:
        """Package by `<name>-<version>`, e.g. `glibc-2.39-1`."""
        return self._index.by_name_version.get(name_version)

    def files(self, name: str) -> list[str] | None:
        """Files of a package; always None unless files metadata was loaded."""
        return self._index.files.get(name)

    def linked_sources(self, name: str) -> list[Package]:
        """VCS packages (`<name>-git`, `<name>-svn`, ...) built from the same sources as `name`.

        `name` itself need not be a package of this repository: no base entry
        is made up for a VCS package whose stripped name is missing, so
        `repo[name]` may raise `KeyError` while this list is non-empty.
        """
        return list(self._index.linked_sources.get(name, []))

    def package_url(self, key: str) -> str:
        if self.url is None:
            raise RepositoryError(f"Repository {self.name} has no URL")
        return f"{self.url}/{self[key].file_name}"

    async def download_package(self, key: str) -> bytes:
        """Download the archive of a package found by base name, name, or name and version."""
        url = self.package_url(key)
        async with httpx.AsyncClient(timeout=self.timeout, follow_redirects=True) as client:
            response = await client.get(url)
        if not response.is_success:
            raise HttpStatusError(url, response.status_code)
        return response.content

    def __getitem__(self, key: str) -> Package:
        package = self.get_by_base(key) or self.get_by_name(key) or self.get_by_name_and_version(key)
        if package is None:
            raise KeyError(key)
        return package

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        try:
            self[key]
        except KeyError:
            return False
        return True

    def __iter__(self) -> Iterator[Package]:
        return iter(self._index.packages)

    def __len__(self) -> int:
        return len(self._index.packages)
