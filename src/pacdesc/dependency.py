"""
Dependency strings as found in DEPENDS, MAKEDEPENDS, OPTDEPENDS, ... fields.

A dependency is a package name optionally followed by a version constraint
(`glibc>=2.38`) and, for optional dependencies, a description
(`python: for the helper scripts`).
"""

from __future__ import annotations

import enum

from pydantic import BaseModel, ConfigDict


class DependencyParseError(ValueError):
    """Raised when a dependency string has a constraint without a version."""


class DependencyConstraint(str, enum.Enum):
    LESS_THAN = "<"
    MORE_THAN = ">"
    EQUALS = "="
    MORE_OR_EQUALS = ">="
    LESS_OR_EQUALS = "<="


# Two-character operators must be tried first
CONSTRAINT_PREFIXES = [
    DependencyConstraint.MORE_OR_EQUALS,
    DependencyConstraint.LESS_OR_EQUALS,
    DependencyConstraint.LESS_THAN,
    DependencyConstraint.MORE_THAN,
    DependencyConstraint.EQUALS,
]

DESCRIPTION_SEPARATOR = ": "


class DependencyVersion(BaseModel):
    model_config = ConfigDict(frozen=True)

    constraint: DependencyConstraint
    version: str

    @classmethod
    def parse(cls, value: str) -> DependencyVersion:
        """Parse a constraint and version such as `>=1.0`."""
        for constraint in CONSTRAINT_PREFIXES:
            if value.startswith(constraint.value):
                version = value[len(constraint.value) :]
                if not version:
                    raise DependencyParseError(f"Version not found in {value!r}")
                return cls(constraint=constraint, version=version)
        raise DependencyParseError(f"Constraint not found in {value!r}")

    def __str__(self) -> str:
        return f"{self.constraint.value}{self.version}"


class Dependency(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    version: DependencyVersion | None = None
    description: str | None = None

    @classmethod
    def parse(cls, value: str) -> Dependency:
        """Parse `name[<op><version>][: description]`."""
        requirement, separator, description = value.partition(DESCRIPTION_SEPARATOR)
        pos = -1
        for char in "<>=":
            pos = requirement.find(char)
            if pos != -1:
                break
        if pos == -1:
            return cls(name=requirement, description=description if separator else None)
        return cls(
            name=requirement[:pos],
            version=DependencyVersion.parse(requirement[pos:]),
            description=description if separator else None,
        )

    def __str__(self) -> str:
        text = self.name
        if self.version is not None:
            text += str(self.version)
        if self.description is not None:
            text += DESCRIPTION_SEPARATOR + self.description
        return text


def parse_dependency(value: object) -> object:
    """Pydantic before-validator: parse strings, pass anything else through."""
    if isinstance(value, str):
        return Dependency.parse(value)
    return value
