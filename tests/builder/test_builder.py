"""Tests for MacroBuilder.

Why these tests exist:
- register() is the only commit point; duplicates must be refused per scope
- Decorator setters replace the implementation rather than stacking
- The stored definition is what tag/priority queries read
"""

import pytest

from macrokit import InvalidMacroError, MacroBuilder, MacroScope, get_registry


def test_fluent_setters_return_builder(registry):
    builder = registry.builder("TestClass", "fluent")

    assert builder.implement(lambda: None) is builder
    assert builder.with_metadata({"a": 1}) is builder
    assert builder.add_metadata("b", 2) is builder
    assert builder.overwrite() is builder
    assert builder.validate_with({"x": lambda v: True}) is builder
    assert builder.validate_parameter("y", lambda v: True) is builder
    assert builder.describe("desc") is builder
    assert builder.tag("t") is builder
    assert builder.priority(5) is builder
    assert builder.when(lambda params: True) is builder


def test_builder_uses_default_registry_when_none_given():
    MacroBuilder("TestClass", "defaulted").implement(lambda: "ok").register()

    assert get_registry().call("TestClass", "defaulted") == "ok"


def test_register_global(registry):
    definition = registry.builder("TestClass", "builderMethod").implement(lambda: "built").register()

    assert definition.scope is MacroScope.GLOBAL
    assert definition.namespace is None
    assert registry.call("TestClass", "builderMethod") == "built"


def test_register_conditional(registry):
    (
        registry.builder("App", "beta")
        .implement(lambda: "beta")
        .when(lambda params: bool(params) and params[0] == "beta-user")
        .register()
    )

    assert registry.has_conditional_macro("App", "beta", ["beta-user"])
    assert not registry.has_conditional_macro("App", "beta", ["normal-user"])
    assert not registry.has_global_macro("App", "beta")


def test_register_namespaced(registry):
    definition = (
        registry.builder("Api", "adminOnly").implement(lambda: "secret").in_namespace("admin").register()
    )

    assert definition.scope is MacroScope.NAMESPACED
    assert definition.namespace == "admin"
    assert registry.call_namespaced("admin", "Api", "adminOnly") == "secret"


def test_condition_wins_over_namespace(registry):
    builder = registry.builder("Api", "both").implement(lambda: None).in_namespace("admin").when(lambda p: True)

    assert builder.scope is MacroScope.CONDITIONAL
    builder.register()
    assert registry.get_conditional_macro("Api", "both") is not None
    assert registry.get_namespaced_macro("admin", "Api", "both") is None


def test_empty_namespace_rejected(registry):
    with pytest.raises(InvalidMacroError, match="Namespace cannot be empty"):
        registry.builder("Api", "x").in_namespace("")


@pytest.mark.parametrize("setter", ["implement", "when", "chainable", "cached", "logged"])
def test_non_callables_rejected(registry, setter):
    with pytest.raises(InvalidMacroError, match="must be callable"):
        getattr(registry.builder("T", "m"), setter)("not callable")


def test_register_requires_implementation(registry):
    with pytest.raises(InvalidMacroError, match="Macro 'empty' must have an implementation"):
        registry.builder("TestClass", "empty").register()


def test_register_only_once(registry):
    builder = registry.builder("TestClass", "once").implement(lambda: None)
    builder.register()

    with pytest.raises(InvalidMacroError, match="already been registered by this builder"):
        builder.register()


# --- Duplicate protection ---


def test_duplicate_global_refused(registry):
    registry.builder("TestClass", "existing").implement(lambda: "original").register()

    with pytest.raises(InvalidMacroError) as exc_info:
        registry.builder("TestClass", "existing").implement(lambda: "new").register()

    assert str(exc_info.value) == "Macro 'existing' already exists for class 'TestClass'"
    assert registry.call("TestClass", "existing") == "original"


def test_duplicate_conditional_refused(registry):
    registry.register_conditional("App", "beta", lambda: "a", lambda params: False)

    with pytest.raises(InvalidMacroError) as exc_info:
        registry.builder("App", "beta").implement(lambda: "b").when(lambda params: True).register()

    assert str(exc_info.value) == "Conditional macro 'beta' already exists for class 'App'"


def test_duplicate_namespaced_refused(registry):
    registry.register_namespaced("admin", "Api", "purge", lambda: "a")

    with pytest.raises(InvalidMacroError) as exc_info:
        registry.builder("Api", "purge").implement(lambda: "b").in_namespace("admin").register()

    assert str(exc_info.value) == "Namespaced macro 'purge' already exists for class 'Api' in namespace 'admin'"


def test_disabled_entry_still_counts_as_existing(registry):
    registry.register("T", "m", lambda: "a")
    registry.disable("T", "m")

    with pytest.raises(InvalidMacroError, match="already exists"):
        registry.builder("T", "m").implement(lambda: "b").register()


def test_duplicate_check_is_per_scope(registry):
    registry.register("T", "m", lambda: "global")

    registry.builder("T", "m").implement(lambda: "ns").in_namespace("ns").register()

    assert registry.call("T", "m") == "global"
    assert registry.call_namespaced("ns", "T", "m") == "ns"


def test_overwrite_replaces(registry):
    registry.builder("TestClass", "existing").implement(lambda: "original").register()
    registry.builder("TestClass", "existing").implement(lambda: "new").overwrite().register()

    assert registry.call("TestClass", "existing") == "new"


def test_overwrite_can_be_switched_off_again(registry):
    registry.register("T", "m", lambda: "a")

    with pytest.raises(InvalidMacroError):
        registry.builder("T", "m").implement(lambda: "b").overwrite().overwrite(False).register()


# --- Decorators ---


def test_chainable_returns_builder_on_none(registry):
    builder = registry.builder("T", "chain").chainable(lambda: None)
    builder.register()

    assert registry.call("T", "chain") is builder


def test_chainable_passes_through_results(registry):
    registry.builder("T", "value").chainable(lambda x: x * 2).register()

    assert registry.call("T", "value", [21]) == 42


def test_last_decorator_wins(registry):
    calls = []

    def first():
        calls.append("first")

    def second():
        calls.append("second")
        return "second"

    registry.builder("T", "m").logged(first).chainable(second).register()

    assert registry.call("T", "m") == "second"
    assert calls == ["second"]


def test_cached_uses_settings_ttl(registry):
    builder = registry.builder("T", "m").cached(lambda: 1)

    assert builder.implementation.cache.ttl == registry.settings.default_cache_ttl


def test_cached_uses_builder_clock(registry, clock):
    calls = []

    def compute(x):
        calls.append(x)
        return x + len(calls)

    MacroBuilder("T", "m", registry=registry, clock=clock).cached(compute, ttl=10).register()

    assert registry.call("T", "m", [1]) == 2
    assert registry.call("T", "m", [1]) == 2
    clock.advance(10)
    assert registry.call("T", "m", [1]) == 3


def test_logged_rejects_unknown_level(registry):
    with pytest.raises(InvalidMacroError, match="Unknown log level"):
        registry.builder("T", "m").logged(lambda: None, level="loud")


def test_decorated_macro_keeps_context_opt_in(registry):
    class Account:
        balance = 7

    registry.builder(Account, "balance_of").cached(lambda self, bonus: self.balance + bonus, ttl=0).register()

    assert registry.call(Account, "balance_of", [3], instance=Account()) == 10


# --- Definition ---


def test_definition_snapshot(registry):
    rule = lambda value: isinstance(value, str)  # noqa: E731
    definition = (
        registry.builder("Greeter", "shout")
        .implement(lambda text: text.upper())
        .describe("Upper-cases text")
        .with_metadata({"since": "1.0"})
        .add_metadata("owner", "core")
        .validate_parameter("text", rule)
        .tag("text", "format")
        .tag("text")
        .priority(3)
        .register()
    )

    assert definition.description == "Upper-cases text"
    assert definition.metadata == {"since": "1.0", "owner": "core"}
    assert definition.validation_rules == {"text": rule}
    assert definition.tags == ("text", "format")
    assert definition.priority == 3
    assert registry.get_definition("Greeter", "shout") == definition


def test_repr(registry):
    assert repr(registry.builder("Greeter", "shout")) == "MacroBuilder(host='Greeter', name='shout', scope=global)"
