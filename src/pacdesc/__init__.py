"""Reader and writer for pacman repository package descriptions.

Example:
    >>> from pydantic import BaseModel, Field
    >>> from pacdesc import decode, encode
    >>> class Entry(BaseModel):
    ...     name: str = Field(alias="NAME")
    ...     depends: list[str] = Field(alias="DEPENDS")
    >>> entry = decode("%NAME%\\nsample-pkg\\n\\n%DEPENDS%\\nlibfoo\\nlibbar\\n\\n", Entry)
    >>> encode(entry)
    '%NAME%\\nsample-pkg\\n\\n%DEPENDS%\\nlibfoo\\nlibbar\\n\\n'
"""

from .decoder import decode, decode_bytes, decode_raw
from .dependency import Dependency, DependencyConstraint, DependencyParseError, DependencyVersion
from .encoder import encode
from .errors import (
    CharacterOverflow,
    DelimiterExpected,
    DescDecodeError,
    DescEncodeError,
    DescError,
    EmptyValueNotAllowed,
    HttpStatusError,
    IntegerFormatError,
    MalformedFieldName,
    RecordValidationError,
    RepositoryError,
    RootMustBeRecord,
    TrailingData,
    UnexpectedEnd,
    UnsupportedValueKind,
    ValueNotEncodable,
)
from .models import BuildDate, DependencySpec, Package, PackageFiles
from .repository import Progress, Repository
from .shapes import CHAR, I8, I16, I32, I64, TEXT, U8, U16, U32, U64, Char, IntWidth

__all__ = [
    "CHAR",
    "I8",
    "I16",
    "I32",
    "I64",
    "TEXT",
    "U8",
    "U16",
    "U32",
    "U64",
    "BuildDate",
    "Char",
    "CharacterOverflow",
    "DelimiterExpected",
    "Dependency",
    "DependencyConstraint",
    "DependencyParseError",
    "DependencySpec",
    "DependencyVersion",
    "DescDecodeError",
    "DescEncodeError",
    "DescError",
    "EmptyValueNotAllowed",
    "HttpStatusError",
    "IntWidth",
    "IntegerFormatError",
    "MalformedFieldName",
    "Package",
    "PackageFiles",
    "Progress",
    "RecordValidationError",
    "RepositoryError",
    "Repository",
    "RootMustBeRecord",
    "TrailingData",
    "UnexpectedEnd",
    "UnsupportedValueKind",
    "ValueNotEncodable",
    "decode",
    "decode_bytes",
    "decode_raw",
    "encode",
]
