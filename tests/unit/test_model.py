import copy
import pickle
import typing as t
from dataclasses import dataclass

import pytest

from tristate import Option, TriState

ABSENT: TriState[int] = TriState()
NULL: TriState[int] = TriState.null()
VALUE: TriState[int] = TriState(5)


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        pytest.param(ABSENT, (True, False, False), id="absent"),
        pytest.param(NULL, (False, True, False), id="null"),
        pytest.param(VALUE, (False, False, True), id="value"),
        pytest.param(TriState.wrap(None), (False, False, True), id="value none"),
    ],
)
def test_predicates_are_mutually_exclusive(state: TriState[int], expected: tuple[bool, bool, bool]) -> None:
    assert (state.is_absent, state.is_null, state.is_value) == expected


def test_default_is_absent() -> None:
    assert TriState() == TriState.absent()
    assert TriState().is_absent


@pytest.mark.parametrize(
    "value",
    [
        pytest.param(0, id="zero"),
        pytest.param("", id="empty str"),
        pytest.param([1, 2], id="list"),
        pytest.param(False, id="false"),
    ],
)
def test_wrap_keeps_value(value: object) -> None:
    state = TriState.wrap(value)

    assert state.is_value
    assert state.value() == value
    assert state.take() == value


@pytest.mark.parametrize(
    "state",
    [
        pytest.param(ABSENT, id="absent"),
        pytest.param(NULL, id="null"),
    ],
)
def test_value_and_take_return_none_without_value(state: TriState[int]) -> None:
    assert state.value() is None
    assert state.value(42) == 42
    assert state.take() is None


@pytest.mark.parametrize(
    ("state", "x", "expected"),
    [
        pytest.param(VALUE, 5, True, id="value equal"),
        pytest.param(VALUE, 6, False, id="value not equal"),
        pytest.param(NULL, None, False, id="null"),
        pytest.param(ABSENT, None, False, id="absent"),
    ],
)
def test_contains_value(state: TriState[int], x: object, expected: bool) -> None:
    assert state.contains_value(x) is expected


@pytest.mark.parametrize(
    ("state", "x", "expected"),
    [
        pytest.param(TriState(3), 3, True, id="value some equal"),
        pytest.param(TriState(3), 4, False, id="value some not equal"),
        pytest.param(TriState(3), None, False, id="value none"),
        pytest.param(NULL, None, True, id="null none"),
        pytest.param(NULL, 3, False, id="null some"),
        pytest.param(ABSENT, None, False, id="absent none"),
        pytest.param(ABSENT, 3, False, id="absent some"),
    ],
)
def test_contains(state: TriState[int], x: t.Optional[int], expected: bool) -> None:
    assert state.contains(x) is expected


@pytest.mark.parametrize(
    ("state", "func", "expected"),
    [
        pytest.param(VALUE, lambda x: str(x), TriState("5"), id="value to value"),
        pytest.param(VALUE, lambda x: None, NULL, id="value to null"),
        pytest.param(NULL, lambda x: "default" if x is None else x, TriState("default"), id="null to value"),
        pytest.param(NULL, lambda x: x, NULL, id="null to null"),
    ],
)
def test_map(
    state: TriState[int],
    func: t.Callable[[t.Optional[int]], t.Optional[str]],
    expected: TriState[str],
) -> None:
    assert state.map(func) == expected


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        pytest.param(VALUE, TriState(10), id="value"),
        pytest.param(NULL, NULL, id="null"),
    ],
)
def test_map_value(state: TriState[int], expected: TriState[int]) -> None:
    assert state.map_value(lambda x: x * 2) == expected


def test_map_does_not_call_func_on_absent(fail_func: t.Callable[[object], object]) -> None:
    assert ABSENT.map(fail_func) == ABSENT
    assert ABSENT.map_value(fail_func) == ABSENT


def test_map_value_does_not_call_func_on_null(fail_func: t.Callable[[object], object]) -> None:
    assert NULL.map_value(fail_func) == NULL


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        pytest.param(ABSENT, 5, id="absent keeps"),
        pytest.param(NULL, None, id="null clears"),
        pytest.param(TriState(7), 7, id="value replaces"),
    ],
)
def test_apply(state: TriState[int], expected: t.Optional[int]) -> None:
    assert state.apply(5) == expected


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        pytest.param(ABSENT, {"slot": 5}, id="absent keeps"),
        pytest.param(NULL, {"slot": None}, id="null clears"),
        pytest.param(TriState(7), {"slot": 7}, id="value replaces"),
    ],
)
def test_update_to_mapping(state: TriState[int], expected: dict[str, t.Optional[int]]) -> None:
    slot: dict[str, t.Optional[int]] = {"slot": 5}

    state.update_to(slot, "slot")

    assert slot == expected


def test_update_to_mapping_absent_does_not_create_key() -> None:
    target: dict[str, t.Optional[int]] = {}

    ABSENT.update_to(target, "slot")

    assert target == {}


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        pytest.param(ABSENT, 5, id="absent keeps"),
        pytest.param(NULL, None, id="null clears"),
        pytest.param(TriState(7), 7, id="value replaces"),
    ],
)
def test_update_to_attribute(state: TriState[int], expected: t.Optional[int]) -> None:
    target = Slot(value=5)

    state.update_to(target, "value")

    assert target.value == expected


def test_ordering() -> None:
    states = [TriState(2), TriState(1), NULL, ABSENT, TriState(0), NULL]

    assert sorted(states) == [ABSENT, NULL, NULL, TriState(0), TriState(1), TriState(2)]
    assert ABSENT < NULL < TriState(-100)
    assert TriState(2) >= TriState(2) > NULL >= NULL > ABSENT


def test_equality_and_hash() -> None:
    assert TriState(1) == TriState(1)
    assert TriState(1) != TriState(2)
    assert NULL != ABSENT
    assert TriState(None) != NULL
    assert TriState(1) != 1
    assert len({TriState(1), TriState(1), NULL, TriState.null(), ABSENT, TriState()}) == 3


def test_can_be_mapping_key() -> None:
    counts = {ABSENT: "absent", NULL: "null", TriState("x"): "x"}

    assert counts[TriState()] == "absent"
    assert counts[TriState.null()] == "null"
    assert counts[TriState("x")] == "x"


@pytest.mark.parametrize(
    "state",
    [
        pytest.param(ABSENT, id="absent"),
        pytest.param(NULL, id="null"),
        pytest.param(TriState([1, 2]), id="value"),
    ],
)
def test_copy_keeps_state(state: TriState[object]) -> None:
    assert copy.copy(state) == state
    assert copy.deepcopy(state) == state
    assert pickle.loads(pickle.dumps(state)) == state  # noqa: S301


def test_deepcopy_copies_payload() -> None:
    payload = [1, 2]
    state = TriState(payload)

    copied = copy.deepcopy(state)

    assert copied.value() == payload
    assert copied.value() is not payload


@pytest.mark.parametrize(
    ("state", "expected"),
    [
        pytest.param(ABSENT, "TriState()", id="absent"),
        pytest.param(NULL, "TriState.null()", id="null"),
        pytest.param(TriState("x"), "TriState('x')", id="value"),
    ],
)
def test_repr(state: TriState[object], expected: str) -> None:
    assert repr(state) == expected


@pytest.mark.parametrize(
    ("state", "nested"),
    [
        pytest.param(ABSENT, Option.empty(), id="absent"),
        pytest.param(NULL, Option.some(Option.empty()), id="null"),
        pytest.param(VALUE, Option.some(Option.some(5)), id="value"),
    ],
)
def test_nested_conversion(state: TriState[int], nested: Option[Option[int]]) -> None:
    assert state.to_nested() == nested
    assert TriState.from_nested(nested) == state
    assert TriState.from_nested(state.to_nested()) == state


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        pytest.param(5, VALUE, id="some"),
        pytest.param(None, ABSENT, id="none"),
    ],
)
def test_from_optional_never_returns_null(value: t.Optional[int], expected: TriState[int]) -> None:
    assert TriState.from_optional(value) == expected


@pytest.mark.parametrize(
    ("option", "expected"),
    [
        pytest.param(Option.some(5), VALUE, id="some"),
        pytest.param(Option.empty(), ABSENT, id="empty"),
    ],
)
def test_from_option_never_returns_null(option: Option[int], expected: TriState[int]) -> None:
    assert TriState.from_option(option) == expected


def test_from_lookup_returns_value() -> None:
    assert TriState.from_lookup(lambda: {"a": 1}["a"]) == TriState(1)


@pytest.mark.parametrize(
    "lookup",
    [
        pytest.param(lambda: {"a": 1}["b"], id="key error"),
        pytest.param(lambda: [][0], id="index error"),
    ],
)
def test_from_lookup_collapses_error_to_null(lookup: t.Callable[[], int]) -> None:
    assert TriState.from_lookup(lookup) == NULL


def test_from_lookup_collapses_custom_errors_to_null() -> None:
    def lookup() -> int:
        raise ConnectionError

    assert TriState.from_lookup(lookup, ConnectionError, LookupError) == NULL


def test_from_lookup_propagates_other_errors() -> None:
    def lookup() -> int:
        msg = "boom"
        raise RuntimeError(msg)

    with pytest.raises(RuntimeError, match="boom"):
        TriState.from_lookup(lookup)


@pytest.mark.parametrize(
    ("lookup", "expected"),
    [
        pytest.param(lambda: Wrapper(payload=42), TriState(42), id="ok"),
        pytest.param(lambda: {}["missing"], NULL, id="lookup error"),
    ],
)
def test_from_lookup_unwrap(lookup: t.Callable[[], "Wrapper"], expected: TriState[int]) -> None:
    assert TriState.from_lookup_unwrap(lookup, lambda wrapper: wrapper.payload) == expected


def test_from_lookup_logs_dropped_error(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level("DEBUG", logger="tristate.model")

    TriState.from_lookup(lambda: {}["missing"])

    assert "lookup failed" in caplog.text


@dataclass
class Slot:
    value: t.Optional[int]


@dataclass(frozen=True)
class Wrapper:
    payload: int


@pytest.fixture
def fail_func() -> t.Callable[[object], object]:
    def func(value: object) -> object:
        msg = "must not be called"
        raise AssertionError(msg, value)

    return func
