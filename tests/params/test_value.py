from dataclasses import dataclass

import numpy as np
import pytest

from rush.params import LenientConversionRules, ParamValue, TypeMismatchError, ValueKind


@pytest.mark.parametrize(
    "raw,kind",
    [
        (True, ValueKind.BOOL),
        (3, ValueKind.INT),
        (3.5, ValueKind.FLOAT),
        ("bot1", ValueKind.STRING),
        ([1, 2], ValueKind.ARRAY),
        ({"a": 1}, ValueKind.STRUCT),
        (np.float32(1.5), ValueKind.FLOAT),
    ],
)
def test_from_raw_tags_native_values(raw, kind):
    assert ParamValue.from_raw(raw).kind is kind


def test_from_raw_rejects_unsupported_types():
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw(None)
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw(b"bytes")


def test_convert_exact_kinds():
    assert ParamValue.from_raw(True).convert(bool) is True
    assert ParamValue.from_raw(7).convert(int) == 7
    assert ParamValue.from_raw("x").convert(str) == "x"
    assert ParamValue.from_raw({"b": [1, 2]}).convert(dict) == {"b": [1, 2]}


def test_int_widens_to_float():
    out = ParamValue.from_raw(2).convert(float)
    assert out == 2.0
    assert isinstance(out, float)


@pytest.mark.parametrize(
    "raw,target",
    [
        (1.5, int),
        (True, int),
        (1, bool),
        ("3", int),
        ("3.5", float),
        (3, str),
        ([1], dict),
        ({"a": 1}, list),
    ],
)
def test_incompatible_conversion_raises_type_mismatch(raw, target):
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw(raw).convert(target)


def test_type_mismatch_is_a_type_error():
    with pytest.raises(TypeError):
        ParamValue.from_raw("x").convert(int)


def test_numpy_scalar_targets_check_range():
    assert ParamValue.from_raw(200).convert(np.uint8) == np.uint8(200)
    assert ParamValue.from_raw(1.25).convert(np.float32) == np.float32(1.25)
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw(300).convert(np.uint8)


def test_convert_into_attribute_and_mapping():
    @dataclass
    class _Config:
        speed: float = 0.0

    cfg = _Config()
    ParamValue.from_raw(3).convert_into(cfg, "speed", float)
    assert cfg.speed == 3.0

    out: dict[str, object] = {}
    ParamValue.from_raw("bot1").convert_into(out, "name", str)
    assert out == {"name": "bot1"}

    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw("fast").convert_into(cfg, "speed", float)
    assert cfg.speed == 3.0


def test_convert_sequence_replaces_existing_contents():
    value = ParamValue.from_raw([1, 2, 3])
    out = [9.0, 9.0, 9.0, 9.0, 9.0]

    result = value.convert_sequence(float, out)

    assert result is out
    assert out == [1.0, 2.0, 3.0]
    assert value.convert_sequence(int) == [1, 2, 3]


def test_convert_sequence_failure_leaves_out_untouched():
    value = ParamValue.from_raw([1, "two"])
    out = [0]

    with pytest.raises(TypeMismatchError):
        value.convert_sequence(int, out)
    assert out == [0]


def test_convert_sequence_requires_array():
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw("abc").convert_sequence(str)


def test_as_array_builds_numpy_matrix():
    value = ParamValue.from_raw([[1, 0], [0, 2.5]])
    arr = value.as_array()

    assert arr.shape == (2, 2)
    assert arr.dtype == np.float64
    np.testing.assert_allclose(arr, [[1.0, 0.0], [0.0, 2.5]])

    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw([1, "x"]).as_array()
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw([[1, 2], [3]]).as_array()
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw(1.0).as_array()


def test_value_is_immutable_snapshot_of_source():
    source = [1, 2]
    value = ParamValue.from_raw(source)
    source.append(3)

    assert value.to_python() == [1, 2]
    with pytest.raises(AttributeError):
        value.kind = ValueKind.INT  # type: ignore[misc]


def test_indexing_arrays_and_structs():
    value = ParamValue.from_raw({"gains": [0.1, 0.2], "name": "pid"})

    assert value["gains"][1].convert(float) == 0.2
    assert len(value["gains"]) == 2
    with pytest.raises(KeyError):
        value["missing"]


@pytest.mark.parametrize(
    "raw,text",
    [
        (True, "1"),
        (False, "0"),
        (42, "42"),
        (3.5, "3.5"),
        (0.1 + 0.2, "0.3"),
        ("bot1", "bot1"),
        ([1, 2.5, "a"], "{1,2.5,a}"),
        ({"b": 2, "a": [True]}, "[a:{1},b:2]"),
    ],
)
def test_str_renders_xmlrpc_text(raw, text):
    assert str(ParamValue.from_raw(raw)) == text


def test_lenient_rules_parse_strings():
    rules = LenientConversionRules()

    assert ParamValue.from_raw("12").convert(int, rules=rules) == 12
    assert ParamValue.from_raw(" 0.5 ").convert(float, rules=rules) == 0.5
    assert ParamValue.from_raw("on").convert(bool, rules=rules) is True
    assert ParamValue.from_raw(0).convert(bool, rules=rules) is False
    assert ParamValue.from_raw(3.5).convert(str, rules=rules) == "3.5"
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw("maybe").convert(bool, rules=rules)
    with pytest.raises(TypeMismatchError):
        ParamValue.from_raw("x1").convert(int, rules=rules)


@pytest.mark.parametrize("raw", [True, False, 0, 0.0, "", [], {}])
def test_box_is_truthy_regardless_of_content(raw):
    value = ParamValue.from_raw(raw)

    assert bool(value) is True


def test_store_value_can_be_used_in_condition():
    from rush.params import InMemoryRegistry, ParamStore

    store = ParamStore(InMemoryRegistry({"/a/flag": False}), namespace="/a", grace_period=0)

    assert store.get("flag")
    assert store.get("flag").convert(bool) is False
