"""
Schemas of the records stored in a repository database: one `desc` member
per package in `<repo>.db.tar.gz`, one `files` member per package in
`<repo>.files.tar.gz`.
"""

from datetime import datetime, timezone
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, PlainSerializer, field_validator

from .dependency import Dependency, parse_dependency
from .shapes import TEXT, U64, IntWidth


def _from_timestamp(value: Any) -> Any:
    if isinstance(value, int):
        return datetime.fromtimestamp(value, tz=timezone.utc)
    return value


def _to_timestamp(value: datetime) -> int:
    return int(value.timestamp())


# Unix seconds on the wire, an aware UTC datetime in Python
BuildDate = Annotated[
    datetime,
    IntWidth(64),
    BeforeValidator(_from_timestamp),
    PlainSerializer(_to_timestamp, return_type=int),
]

# One dependency string per line
DependencySpec = Annotated[
    Dependency,
    TEXT,
    BeforeValidator(parse_dependency),
    PlainSerializer(str, return_type=str),
]


class Package(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    file_name: str = Field(..., alias="FILENAME", description="Package archive file name")
    name: str = Field(..., alias="NAME")
    base: str | None = Field(None, alias="BASE", description="Name of the package base it was built from")
    version: str = Field(..., alias="VERSION")
    description: str | None = Field(None, alias="DESC")
    groups: list[str] | None = Field(None, alias="GROUPS")
    compressed_size: U64 = Field(..., alias="CSIZE", description="Archive size in bytes")
    installed_size: U64 = Field(..., alias="ISIZE", description="Installed files size in bytes")
    md5_sum: str | None = Field(None, alias="MD5SUM")
    sha256_sum: str = Field(..., alias="SHA256SUM")
    pgp_signature: str | None = Field(None, alias="PGPSIG", description="Base64 detached signature")
    home_url: str | None = Field(None, alias="URL")
    license: list[str] | None = Field(None, alias="LICENSE")
    architecture: str = Field(..., alias="ARCH")
    build_date: BuildDate = Field(..., alias="BUILDDATE")
    packager: str = Field(..., alias="PACKAGER")
    replaces: list[str] | None = Field(None, alias="REPLACES")
    conflicts: list[str] | None = Field(None, alias="CONFLICTS")
    provides: list[str] | None = Field(None, alias="PROVIDES")
    depends: list[DependencySpec] | None = Field(None, alias="DEPENDS", description="Run-time dependencies")
    optdepends: list[DependencySpec] | None = Field(None, alias="OPTDEPENDS")
    makedepends: list[DependencySpec] | None = Field(None, alias="MAKEDEPENDS", description="Build-time dependencies")
    checkdepends: list[DependencySpec] | None = Field(None, alias="CHECKDEPENDS")

    @field_validator(
        "groups",
        "license",
        "replaces",
        "conflicts",
        "provides",
        "depends",
        "optdepends",
        "makedepends",
        "checkdepends",
    )
    @classmethod
    def _empty_list_is_absent(cls, value: list | None) -> list | None:
        # An empty list field has the same text as a missing one
        return value or None

    @property
    def name_and_version(self) -> str:
        return f"{self.name}-{self.version}"


class PackageFiles(BaseModel):
    files: list[str] = Field(..., alias="FILES")

