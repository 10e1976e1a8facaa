import pytest

from pacdesc.dependency import (
    Dependency,
    DependencyConstraint,
    DependencyParseError,
    DependencyVersion,
    parse_dependency,
)


@pytest.mark.parametrize(
    "text,name,constraint,version",
    [
        ("glibc", "glibc", None, None),
        ("glibc>=2.38", "glibc", DependencyConstraint.MORE_OR_EQUALS, "2.38"),
        ("glibc<=2.38", "glibc", DependencyConstraint.LESS_OR_EQUALS, "2.38"),
        ("glibc<3", "glibc", DependencyConstraint.LESS_THAN, "3"),
        ("glibc>2", "glibc", DependencyConstraint.MORE_THAN, "2"),
        ("glibc=2.39-1", "glibc", DependencyConstraint.EQUALS, "2.39-1"),
    ],
)
def test_parse(text, name, constraint, version):
    dependency = Dependency.parse(text)
    assert dependency.name == name
    if constraint is None:
        assert dependency.version is None
    else:
        assert dependency.version == DependencyVersion(constraint=constraint, version=version)
    assert str(dependency) == text


def test_parse_with_description():
    dependency = Dependency.parse("python>=3.11: for the helper scripts")
    assert dependency.name == "python"
    assert str(dependency.version) == ">=3.11"
    assert dependency.description == "for the helper scripts"
    assert str(dependency) == "python>=3.11: for the helper scripts"


@pytest.mark.parametrize("text", ["glibc>=", "glibc=", "glibc<"])
def test_constraint_without_version(text):
    with pytest.raises(DependencyParseError):
        Dependency.parse(text)


def test_version_without_constraint():
    with pytest.raises(DependencyParseError):
        DependencyVersion.parse("2.38")


def test_parse_dependency_passes_non_strings_through():
    dependency = Dependency(name="zlib")
    assert parse_dependency(dependency) is dependency
    assert parse_dependency("zlib") == dependency
