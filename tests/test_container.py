import pytest

from nest_ioc import (
    Container,
    ContainerSettings,
    DependencyExpectedError,
    DependencyNotFoundError,
    DependencySlot,
    DuplicateRegistrationError,
    FrozenRegistryError,
    InvalidKeyError,
    NamespaceNode,
    NamespaceNotFoundError,
)


class Connection:
    pass


class Mailer:
    pass


# --- Resolution and memoization ---

def test_memoized_dependency_resolves_to_identical_object(container):
    calls = []

    def new_connection():
        calls.append(1)
        return Connection()

    container.register("db", new_connection, memoize=True)
    first = container.resolve("db")
    assert container.resolve("db") is first
    assert container["db"] is first
    assert container.fetch("db") is first
    assert len(calls) == 1


def test_non_memoized_dependency_runs_provider_on_every_call(container):
    calls = []
    container.register("conn", lambda: calls.append(1) or Connection())

    results = [container.resolve("conn") for _ in range(4)]
    assert len(calls) == 4
    assert len({id(r) for r in results}) == 4


def test_default_memoization_comes_from_settings():
    eager = Container(settings=ContainerSettings(default_memoize=True))
    eager.register("db", Connection)
    assert eager.resolve("db") is eager.resolve("db")
    assert eager.has_dependency("db", memoized=True)

    lazy = Container()
    lazy.register("db", Connection)
    assert lazy.resolve("db") is not lazy.resolve("db")


def test_literal_values_are_registered_as_constants(container):
    container.register("answer", 42)
    container.register("hosts", ["a", "b"])
    assert container.resolve("answer") == 42
    assert container.resolve("hosts") is container.resolve("hosts")


def test_provider_may_resolve_other_dependencies(container):
    container.register("config", {"dsn": "sqlite://"})
    container.register("db", lambda: ("db", container.resolve("config")["dsn"]), memoize=True)
    container.register("repo", lambda: ("repo", container["db"]))
    assert container.resolve("repo") == ("repo", ("db", "sqlite://"))


# --- Namespaces ---

def test_namespace_block_registers_relative_paths(container):
    container.namespace("services", lambda c: c.register("mailer", Mailer))

    assert isinstance(container.resolve("services.mailer"), Mailer)
    assert container.has_namespace("services") is True
    assert container.has_dependency("services") is False
    assert container.has_dependency("services.mailer") is True


def test_nested_namespaces_and_dotted_registration(container):
    def services(c):
        c.register("mailer", Mailer)
        c.namespace("queue", lambda c: c.register("worker", "worker"))
        c.register("sms.gateway", "gateway")

    container.namespace("services", services)
    container.register("db", Connection)

    assert container.resolve("services.queue.worker") == "worker"
    assert container.resolve("services.sms.gateway") == "gateway"
    assert container.has_namespace("services.sms")
    assert container.keys(all_variants=True) == [
        "services.mailer",
        "services.queue.worker",
        "services.sms.gateway",
        "db",
    ]


def test_resolve_is_root_relative_inside_namespace_blocks(container):
    container.register("config", "root-config")
    seen = []
    container.namespace("services", lambda c: seen.append(c.resolve("config")))
    assert seen == ["root-config"]


def test_namespace_without_definitions_creates_empty_namespace(container):
    container.namespace("empty")
    assert container.has_namespace("empty")
    assert container.keys() == ["empty"]
    assert container.keys(all_variants=True) == []


def test_resolving_a_namespace_raises_dependency_expected(container):
    container.namespace("services")
    with pytest.raises(DependencyExpectedError):
        container.resolve("services")


def test_missing_paths(container):
    container.namespace("services")
    with pytest.raises(NamespaceNotFoundError):
        container.resolve("missing.path")
    with pytest.raises(DependencyNotFoundError):
        container.resolve("services.path")
    with pytest.raises(DependencyNotFoundError):
        container.resolve("missing")


def test_predicates(container):
    container.register("db", Connection, memoize=True)
    container.namespace("services", lambda c: c.register("mailer", Mailer))

    assert container.has_key("db")
    assert "services.mailer" in container
    assert "services.sms" not in container
    assert "db.host" not in container
    assert container.has_dependency("db", memoized=True)
    assert not container.has_dependency("db", memoized=False)
    assert container.has_dependency("services.mailer", memoized=False)
    with pytest.raises(InvalidKeyError):
        container.has_namespace("bad..path")


# --- Duplicate policy ---

def test_reregistering_a_dependency_overrides_it_by_default(container):
    container.register("db", lambda: "old", memoize=True)
    assert container.resolve("db") == "old"
    container.register("db", lambda: "new", memoize=True)
    assert container.resolve("db") == "new"


def test_reregistering_a_sibling_keeps_cached_values(container):
    calls = []
    container.register("db", lambda: calls.append(1) or Connection(), memoize=True)
    first = container.resolve("db")
    container.register("cache", 1)
    container.register("cache", 2)
    assert container.resolve("db") is first
    assert len(calls) == 1


def test_duplicates_raise_when_overrides_are_disabled():
    c = Container(settings=ContainerSettings(allow_overrides=False))
    c.register("db", 1)
    with pytest.raises(DuplicateRegistrationError):
        c.register("db", 2)
    assert c.resolve("db") == 1
    c.namespace("services", lambda c: c.register("a", 1))
    c.namespace("services", lambda c: c.register("b", 2))
    assert c.keys(all_variants=True) == ["db", "services.a", "services.b"]


# --- Freeze ---

def test_freeze_gates_mutation_but_not_resolution(container):
    container.register("db", Connection, memoize=True)
    connection = container.resolve("db")
    container.freeze()

    assert container.is_frozen() is True
    with pytest.raises(FrozenRegistryError):
        container.register("x", 1)
    with pytest.raises(FrozenRegistryError):
        container.namespace("services")
    assert container.resolve("db") is connection
    container.freeze()
    assert container.is_frozen() is True


def test_freeze_does_not_clear_memoized_values(container):
    container.register("db", Connection, memoize=True)
    before = container.resolve("db")
    container.freeze()
    assert container.resolve("db") is before


def test_container_is_usable_after_failures(container):
    with pytest.raises(InvalidKeyError):
        container.register("", 1)
    with pytest.raises(DependencyNotFoundError):
        container.resolve("nope")

    def broken_definitions(c):
        c.register("a", 1)
        raise RuntimeError("broken definitions")

    with pytest.raises(RuntimeError):
        container.namespace("services", broken_definitions)
    container.register("db", 1)
    assert container.keys() == ["services", "db"]
    assert container.resolve("db") == 1
    assert container.resolve("services.a") == 1


# --- Reload ---

def test_reload_discards_registrations(container):
    container.register("db", Connection, memoize=True)
    container.resolve("db")
    container.reload()
    with pytest.raises(DependencyNotFoundError):
        container.resolve("db")
    assert container.keys() == []


def test_reload_unfreezes_and_replays_definitions():
    calls = []

    def definitions(c):
        c.register("db", lambda: calls.append(1) or Connection(), memoize=True)

    c = Container(definitions)
    c.register("extra", 1)
    first = c.resolve("db")
    c.freeze()

    c.reload()
    assert c.is_frozen() is False
    assert c.has_key("extra") is False
    second = c.resolve("db")
    assert second is not first
    assert len(calls) == 2


def test_freeze_on_build_applies_after_definitions_and_reload():
    c = Container(lambda c: c.register("db", 1), settings=ContainerSettings(freeze_on_build=True))
    assert c.is_frozen()
    assert c.resolve("db") == 1
    with pytest.raises(FrozenRegistryError):
        c.register("x", 1)
    c.reload()
    assert c.is_frozen()
    assert c.resolve("db") == 1


def test_failed_reload_keeps_previous_registry_and_observers():
    runs = []

    def definitions(c):
        runs.append(1)
        c.register("db", "conn")
        if len(runs) > 1:
            raise RuntimeError("definitions broke")

    c = Container(definitions, settings=ContainerSettings(freeze_on_build=True))
    log = []
    observer = c.observe("db", lambda path, value: log.append(value))

    with pytest.raises(RuntimeError, match="definitions broke"):
        c.reload()

    assert c.is_frozen() is True
    assert c.resolve("db") == "conn"
    assert c.keys() == ["db"]
    assert c.stats()["observers"] == 1
    assert c.unobserve(observer) is True
    assert log == []


def test_failed_reload_without_freeze_leaves_container_writable():
    fail = []

    def definitions(c):
        c.register("db", "conn")
        if fail:
            raise RuntimeError("definitions broke")

    c = Container(definitions)
    c.register("extra", 1)
    fail.append(True)
    with pytest.raises(RuntimeError):
        c.reload()

    assert c.keys() == ["db", "extra"]
    c.register("late", 2)
    assert c.resolve("late") == 2

    fail.clear()
    c.reload()
    assert c.keys() == ["db"]


# --- Observers ---

def test_observer_fires_once_with_registration_payload(container):
    log = []
    container.observe("db", lambda path, value: log.append((path, value)))
    container.register("db", 42)
    assert log == [("db", 42)]


def test_observer_receives_fully_qualified_path_from_namespace_blocks(container):
    log = []
    container.observe("services.mailer", lambda path, value: log.append((path, type(value))))
    container.namespace("services", lambda c: c.register("mailer", Mailer))
    assert log == [("services.mailer", Mailer)]


def test_namespace_observer_receives_the_namespace_node(container):
    log = []
    container.observe("services", lambda path, node: log.append(node))
    container.namespace("services", lambda c: c.register("mailer", Mailer))
    assert len(log) == 1
    assert isinstance(log[0], NamespaceNode)
    assert "mailer" in log[0]


def test_observer_of_memoized_dependency_shares_the_cached_value(container):
    log = []
    container.observe("db", lambda path, value: log.append(value))
    container.register("db", Connection, memoize=True)
    assert log[0] is container.resolve("db")


def test_unobserve_stops_notifications(container):
    log = []
    observer = container.subscribe("db", lambda path, value: log.append(value))
    assert container.unobserve(observer) is True
    assert container.unsubscribe(observer) is False
    container.register("db", 1)
    assert log == []


def test_clear_observers_for_a_path_and_for_all(container):
    log = []
    container.observe("db", lambda path, value: log.append(path))
    container.observe("cache", lambda path, value: log.append(path))

    container.clear_observers("db")
    container.register("db", 1)
    container.register("cache", 1)
    assert log == ["cache"]

    container.clear_listeners()
    container.register("cache", 2)
    assert log == ["cache"]


def test_reload_drops_observers(container):
    log = []
    container.observe("db", lambda path, value: log.append(value))
    container.reload()
    container.register("db", 1)
    assert log == []


def test_observer_errors_propagate_after_registration(container):
    def failing(path, value):
        raise RuntimeError("observer failed")

    container.observe("db", failing)
    with pytest.raises(RuntimeError, match="observer failed"):
        container.register("db", 1)
    assert container.resolve("db") == 1


def test_observer_may_resolve_dependencies_without_deadlock(container):
    container.register("config", "cfg")
    log = []
    container.observe("db", lambda path, value: log.append((value, container.resolve("config"))))
    container.register("db", "conn")
    assert log == [("conn", "cfg")]


def test_observer_handles_from_before_a_reload_are_stale(container):
    stale = container.observe("db", lambda path, value: None)
    container.reload()
    log = []
    fresh = container.observe("db", lambda path, value: log.append(value))

    assert fresh.identity != stale.identity
    assert container.unobserve(stale) is False
    container.register("db", 1)
    assert log == [1]


def test_implicitly_created_namespaces_are_notified_before_the_dependency(container):
    log = []
    container.observe("services", lambda path, node: log.append((path, type(node))))
    container.observe("services.mail", lambda path, node: log.append((path, type(node))))
    container.observe("services.mail.smtp", lambda path, value: log.append((path, value)))

    container.register("services.mail.smtp", "smtp")
    assert log == [
        ("services", NamespaceNode),
        ("services.mail", NamespaceNode),
        ("services.mail.smtp", "smtp"),
    ]

    container.register("services.mail.imap", "imap")
    assert len(log) == 3


def test_intermediate_namespaces_of_a_namespace_block_are_notified_first(container):
    log = []
    container.observe("a", lambda path, node: log.append(path))
    container.observe("a.b", lambda path, node: log.append(path))
    container.observe("a.b.c", lambda path, value: log.append(path))

    container.namespace("a.b", lambda c: c.register("c", 1))
    assert log == ["a", "a.b.c", "a.b"]


def test_observer_callbacks_register_relative_to_the_root(container):
    container.observe("services.mailer", lambda path, value: container.register("audit", path))
    container.namespace("services", lambda c: c.register("mailer", Mailer))

    assert container.resolve("audit") == "services.mailer"
    assert container.keys() == ["services", "audit"]
    assert container.keys(all_variants=True) == ["services.mailer", "audit"]


def test_providers_register_relative_to_the_root(container):
    def provider():
        container.register("created_by_provider", True)
        return "value"

    container.observe("services.lazy", lambda path, value: None)
    container.namespace("services", lambda c: c.register("lazy", provider))
    assert container.has_dependency("created_by_provider")
    assert not container.has_key("services.created_by_provider")


# --- Enumeration ---

def _wire(c):
    c.register("db", lambda: "conn")
    c.namespace("services", lambda c: c.register("mailer", lambda: "mailer"))
    c.register("logger", "log")


def test_keys(container):
    _wire(container)
    assert container.keys() == ["db", "services", "logger"]
    assert container.keys(all_variants=True) == ["db", "services.mailer", "logger"]


def test_each_dependency_iterator_and_visitor(container):
    _wire(container)
    pairs = list(container.each_dependency())
    assert [name for name, _ in pairs] == ["db", "services", "logger"]
    assert isinstance(pairs[1][1], NamespaceNode)
    assert list(iter(container)) == pairs

    visited = []
    assert container.each_dependency(yield_all=True, visitor=lambda n, v: visited.append((n, v))) is None
    assert visited == [("db", "conn"), ("services.mailer", "mailer"), ("logger", "log")]


def test_each_dependency_is_restartable(container):
    _wire(container)
    assert list(container.each_dependency(yield_all=True)) == list(container.each_dependency(yield_all=True))


def test_hash_tree(container):
    _wire(container)
    raw = container.hash_tree()
    assert isinstance(raw["db"], DependencySlot)
    assert isinstance(raw["services"]["mailer"], DependencySlot)
    assert container.to_dict(resolve_dependencies=True) == {
        "db": "conn",
        "services": {"mailer": "mailer"},
        "logger": "log",
    }


# --- Stats and logging ---

def test_stats_counts_resolutions_and_cache_hits(container):
    container.register("db", Connection, memoize=True)
    container.namespace("services", lambda c: c.register("mailer", Mailer))
    container.observe("db", lambda p, v: None)
    for _ in range(3):
        container.resolve("db")

    stats = container.stats()
    assert stats["container_id"] == container.container_id
    assert stats["total_resolves"] == 3
    assert stats["cache_hits"] == 2
    assert stats["registered_dependencies"] == 2
    assert stats["observers"] == 1
    assert stats["frozen"] is False


def test_container_ids_are_unique_unless_given():
    assert Container().container_id != Container().container_id
    assert Container(container_id="main").container_id == "main"


def test_debug_logging_of_lifecycle(captured_logs):
    c = Container(container_id="logtest-container")
    c.register("db", 1)
    c.freeze()
    c.reload()
    joined = "\n".join(captured_logs)
    assert "[logtest-] Registered dependency 'db'" in joined
    assert "Container frozen" in joined
    assert "Container reloaded" in joined


def test_debug_logging_tolerates_percent_in_container_id(captured_logs):
    c = Container(container_id="50%off-x")
    c.register("db", 1)
    assert "[50%off-x] Registered dependency 'db' (memoize=False)" in "\n".join(captured_logs)
