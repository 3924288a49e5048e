"""End-to-end macro journeys through the public API.

Why these tests exist:
- Each scenario exercises registration, resolution and invocation together
- They read like the usage a host library would document
"""

import logging

import pytest

from macrokit import InMemoryCallRecorder, Macroable, MacroNotFoundError, get_registry, host_id


class Text(Macroable):
    def __init__(self, value: str = "") -> None:
        self.value = value


@pytest.fixture(autouse=True)
def clean_text():
    yield
    Text.flush_macros()


def test_shout_on_a_class():
    Text.register_macro("shout", lambda s: s.upper() + "!")

    assert Text.shout("hi") == "HI!"
    assert Text("x").shout("hi") == "HI!"


def test_admin_only_namespace():
    registry = get_registry()
    registry.builder("Api", "adminOnly").implement(lambda: "admin data").in_namespace("admin").register()

    assert registry.call_namespaced("admin", "Api", "adminOnly") == "admin data"
    with pytest.raises(MacroNotFoundError, match=r"Method Api::adminOnly does not exist\."):
        registry.call("Api", "adminOnly")


def test_beta_feature_conditional():
    registry = get_registry()
    (
        registry.builder("App", "betaFeature")
        .implement(lambda user: f"beta for {user}")
        .when(lambda params: bool(params) and params[0] == "beta-user")
        .register()
    )

    assert registry.call("App", "betaFeature", ["beta-user"]) == "beta for beta-user"
    with pytest.raises(MacroNotFoundError):
        registry.call("App", "betaFeature", ["normal-user"])


def test_cached_forever_runs_once():
    calls = []

    def expensive(n):
        calls.append(n)
        return n**2

    Text.macro_registry().builder(Text, "square").cached(expensive, ttl=0).register()

    results = [Text.square(4) for _ in range(5)]

    assert results == [16] * 5
    assert len(calls) == 1


def test_disable_and_enable_shout():
    registry = get_registry()
    Text.register_macro("shout", lambda s: s.upper() + "!")

    registry.disable(Text, "shout")
    with pytest.raises(AttributeError):
        Text.shout("hi")

    registry.enable(Text, "shout")
    assert Text.shout("hi") == "HI!"


def test_logged_instance_macro_with_recorder(caplog):
    recorder = InMemoryCallRecorder()

    def length(self):
        return len(self.value)

    Text.macro_registry().builder(Text, "length").logged(length, level="info", recorder=recorder).register()

    with caplog.at_level(logging.INFO, logger="macrokit.calls"):
        assert Text("hello").length() == 5

    assert [r.getMessage() for r in caplog.records if r.name == "macrokit.calls"] == [
        f"Executing macro 'length' on '{host_id(Text)}'",
        "Macro 'length' executed successfully",
    ]
    [record] = recorder.records()
    assert record.params == []
    assert record.result_type == "int"


def test_statistics_after_a_session():
    registry = get_registry()
    registry.register("A", "g", lambda: None)
    registry.register_conditional("A", "c", lambda: None, lambda params: True)
    registry.register_namespaced("ns", "A", "n", lambda: None)
    registry.disable("A", "g")

    assert registry.get_statistics().to_dict() == {
        "global": 1,
        "conditional": 1,
        "namespaced": 1,
        "disabled": 1,
        "total": 3,
    }
