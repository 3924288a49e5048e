"""Tests for the invocation binder.

Why these tests exist:
- Context passing replaces closure rebinding; the opt-in rule must be exact
- Parameters must arrive positionally and in order
- Exceptions must pass through unchanged
"""

import functools

import pytest

from macrokit.core import accepts_context, bind, invoke


class Counter:
    def __init__(self) -> None:
        self.count = 0


def test_plain_function_does_not_take_context():
    assert accepts_context(lambda text: text) is False


@pytest.mark.parametrize("fn", [lambda self: self, lambda cls, x: cls], ids=["self", "cls"])
def test_receiver_named_first_parameter_takes_context(fn):
    assert accepts_context(fn) is True


def test_receiver_name_elsewhere_is_ignored():
    assert accepts_context(lambda value, self=None: value) is False


def test_var_positional_does_not_take_context():
    assert accepts_context(lambda *args: args) is False


def test_builtin_without_signature_does_not_take_context():
    assert accepts_context(len) is False
    assert invoke(len, [[1, 2, 3]]) == 3


def test_wrapped_callable_reports_wrapped_signature():
    def target(self, value):
        return value

    @functools.wraps(target)
    def wrapper(*args):
        return target(*args)

    assert accepts_context(wrapper) is True


def test_invoke_passes_params_in_order():
    assert invoke(lambda a, b, c: (a, b, c), [1, 2, 3]) == (1, 2, 3)


def test_invoke_without_params():
    assert invoke(lambda: "ok") == "ok"


def test_invoke_passes_context_first():
    counter = Counter()

    def bump(self, by):
        self.count += by
        return self.count

    assert invoke(bump, [5], counter) == 5
    assert counter.count == 5


def test_invoke_passes_none_context_when_absent():
    assert invoke(lambda self: self, []) is None


def test_invoke_propagates_exceptions_unchanged():
    error = LookupError("boom")

    def fail():
        raise error

    with pytest.raises(LookupError) as exc_info:
        invoke(fail)
    assert exc_info.value is error


def test_bind_pre_applies_context():
    counter = Counter()
    bound = bind(lambda self, by: self.count + by, counter)

    assert bound(2) == 2


def test_bind_leaves_plain_callables_alone():
    fn = lambda text: text.upper()  # noqa: E731
    assert bind(fn, object()) is fn
