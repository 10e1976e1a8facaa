import enum

import pytest
from pydantic import BaseModel, Field

from pacdesc.decoder import decode
from pacdesc.encoder import LineWriter, encode, encode_scalar
from pacdesc.errors import ValueNotEncodable
from pacdesc.models import Package


class Sample(BaseModel):
    name: str = Field(alias="NAME")
    depends: list[str] = Field(alias="DEPENDS")
    description: str | None = Field(None, alias="DESC")


class Inner(BaseModel):
    value: str = Field(alias="VALUE")


class Outer(BaseModel):
    inner: Inner = Field(alias="INNER")
    name: str = Field(alias="NAME")


class Mode(enum.Enum):
    FAST = "fast"


def test_line_writer():
    writer = LineWriter()
    assert writer.to_string() == ""
    writer.push("%NAME%")
    writer.push("x")
    writer.push("")
    assert writer.to_string() == "%NAME%\nx\n\n"


def test_encode_mapping():
    text = encode({"NAME": "sample-pkg", "DEPENDS": ["libfoo", "libbar"]})
    assert text == "%NAME%\nsample-pkg\n\n%DEPENDS%\nlibfoo\nlibbar\n\n"


def test_encode_model_omits_absent_fields():
    sample = Sample(NAME="sample-pkg", DEPENDS=[])
    assert encode(sample) == "%NAME%\nsample-pkg\n\n%DEPENDS%\n\n"


def test_encode_empty_record():
    assert encode({}) == ""


def test_encode_integers():
    assert encode({"SIZE": 0, "DELTA": -12}) == "%SIZE%\n0\n\n%DELTA%\n-12\n\n"


def test_round_trip_model():
    sample = Sample(NAME="sample-pkg", DEPENDS=["libfoo"], DESC="A sample")
    assert decode(encode(sample), Sample) == sample


def test_round_trip_nested_record():
    outer = Outer(INNER=Inner(VALUE="x"), NAME="outer")
    text = encode(outer)
    assert text == "%INNER%\n%VALUE%\nx\n\n\n%NAME%\nouter\n\n"
    assert decode(text, Outer) == outer


def test_package_text_is_reproduced(ag_desc):
    assert encode(decode(ag_desc, Package)) == ag_desc


@pytest.mark.parametrize(
    "value",
    [True, Mode.FAST, "", "two\nlines", 1.5, b"raw"],
)
def test_encode_scalar_rejects(value):
    with pytest.raises(ValueNotEncodable):
        encode_scalar(value)


@pytest.mark.parametrize(
    "record",
    [
        {"LIST": [["a"]]},
        {"LIST": [{"A": "b"}]},
        {"LIST": ["a", None]},
        {"BAD\nKEY": "x"},
    ],
)
def test_encode_rejects_unrepresentable_records(record):
    with pytest.raises(ValueNotEncodable):
        encode(record)


def test_encode_rejects_non_record_root():
    with pytest.raises(ValueNotEncodable):
        encode(["a", "b"])


def test_empty_optional_sequence_is_written_as_absent(desc_factory):
    package = decode(desc_factory("zlib"), Package).model_copy(update={"groups": []})
    text = encode(package)
    assert "%GROUPS%" not in text
    assert decode(text, Package).groups is None


class Tagged(BaseModel):
    tags: list[str] | None = Field(None, alias="TAGS")
    value: str = Field(alias="VALUE")


class HoldsTagged(BaseModel):
    inner: Tagged = Field(alias="INNER")
    name: str = Field(alias="NAME")


class MaybeTagged(BaseModel):
    inner: Tagged | None = Field(None, alias="INNER")
    name: str = Field(alias="NAME")


class OnlyTags(BaseModel):
    tags: list[str] | None = Field(None, alias="TAGS")


class HoldsOnlyTags(BaseModel):
    inner: OnlyTags | None = Field(None, alias="INNER")
    name: str = Field(alias="NAME")


class RequiredTags(BaseModel):
    tags: list[str] | None = Field(alias="TAGS")


class TestNestedOptionalValues:
    def test_empty_optional_sequence_in_nested_record(self):
        holder = HoldsTagged(INNER=Tagged(TAGS=[], VALUE="x"), NAME="n")
        text = encode(holder)
        assert text == "%INNER%\n%VALUE%\nx\n\n\n%NAME%\nn\n\n"
        assert decode(text, HoldsTagged) == HoldsTagged(INNER=Tagged(VALUE="x"), NAME="n")

    def test_nested_optional_sequence_round_trip(self):
        holder = HoldsTagged(INNER=Tagged(TAGS=["a", "b"], VALUE="x"), NAME="n")
        assert decode(encode(holder), HoldsTagged) == holder

    def test_optional_nested_record_round_trip(self):
        holder = MaybeTagged(INNER=Tagged(VALUE="x"), NAME="n")
        text = encode(holder)
        assert text == "%INNER%\n%VALUE%\nx\n\n\n%NAME%\nn\n\n"
        assert decode(text, MaybeTagged) == holder
        assert decode(encode(MaybeTagged(NAME="n")), MaybeTagged).inner is None

    def test_empty_optional_record_is_rejected(self):
        with pytest.raises(ValueNotEncodable, match="INNER"):
            encode(HoldsOnlyTags(INNER=OnlyTags(), NAME="n"))

    def test_empty_sequence_in_required_optional_field_is_rejected(self):
        with pytest.raises(ValueNotEncodable, match="TAGS"):
            encode(RequiredTags(TAGS=[]))


class TestMappingTarget:
    def test_empty_sequence_under_optional_values_is_rejected(self):
        with pytest.raises(ValueNotEncodable):
            encode({"A": []}, dict[str, list[str] | None])

    def test_empty_sequence_round_trip(self):
        text = encode({"A": []}, dict[str, list[str]])
        assert text == "%A%\n\n"
        assert decode(text, dict[str, list[str]]) == {"A": []}

    def test_optional_values_round_trip(self):
        record = {"A": ["1", "2"], "B": ["3"]}
        target = dict[str, list[str] | None]
        assert decode(encode(record, target), target) == record

    def test_target_must_be_record(self):
        with pytest.raises(ValueNotEncodable):
            encode({"A": "x"}, list[str])
