import pytest

from fluidshape.controller.collections import InMemoryProfileCollection
from fluidshape.model.errors import IdentityMissingError, RemoteOperationError
from fluidshape.model.history import ProfileHistoryCache
from fluidshape.model.parameters import ParameterSet


def record(name, timestamp_ms, **params):
    return {
        "name": name, "params": params, "area": "0.00",
        "timestamp": "12:00", "timestampMs": timestamp_ms, "createdBy": "someone",
    }


class FailingCollection(InMemoryProfileCollection):
    def upsert(self, profile_id, record):
        raise ConnectionError("network down")

    def delete(self, profile_id):
        raise ConnectionError("network down")


class BrokenSubscribeCollection(InMemoryProfileCollection):
    def subscribe(self, on_snapshot, on_error):
        raise ConnectionError("permission denied")


# ---- state machine ----

def test_starts_disconnected(history):
    assert not history.is_connected
    assert history.identity is None
    assert history.profiles == []


def test_connect_subscribes_and_loads_snapshot(clock):
    collection = InMemoryProfileCollection({"a": record("A", 100)})
    history = ProfileHistoryCache(collection, clock=clock)
    states = []
    history.connection_changed.connect(states.append)

    history.set_identity("user-1")

    assert history.is_connected
    assert [p.id for p in history.profiles] == ["a"]
    assert states == [True]


def test_malformed_timestamp_in_first_snapshot_keeps_connection(clock):
    collection = InMemoryProfileCollection({
        "a": record("A", 100),
        "b": record("B", "not-a-number"),
    })
    history = ProfileHistoryCache(collection, clock=clock)

    history.set_identity("user-1")

    assert history.is_connected
    assert [p.id for p in history.profiles] == ["a", "b"]


def test_revoking_identity_clears_view_and_unsubscribes(connected_history, collection):
    connected_history.save("One", ParameterSet().snapshot(), "1.00")
    assert len(connected_history.profiles) == 1

    connected_history.set_identity(None)

    assert not connected_history.is_connected
    assert connected_history.profiles == []
    # further remote changes are not observed
    collection.upsert("other", record("Other", 5))
    assert connected_history.profiles == []


def test_setting_same_identity_twice_is_a_no_op(connected_history):
    states = []
    connected_history.connection_changed.connect(states.append)
    connected_history.set_identity("user-1")
    assert states == []


def test_switching_identity_resubscribes(connected_history, collection):
    connected_history.set_identity("user-2")
    assert connected_history.identity == "user-2"
    collection.upsert("p", record("P", 1))
    assert [p.id for p in connected_history.profiles] == ["p"]


def test_subscribe_failure_stays_disconnected(clock):
    history = ProfileHistoryCache(BrokenSubscribeCollection(), clock=clock)
    errors = []
    history.error_occurred.connect(errors.append)

    history.set_identity("user-1")

    assert not history.is_connected
    assert history.identity is None
    assert errors == ["permission denied"]


# ---- save / delete ----

def test_save_without_identity_is_rejected(history, collection):
    with pytest.raises(IdentityMissingError):
        history.save("A", ParameterSet().snapshot(), "1.00")
    assert len(collection) == 0


def test_delete_without_identity_is_rejected(history):
    with pytest.raises(IdentityMissingError):
        history.delete("a")


def test_save_upserts_full_record(connected_history, collection):
    params = ParameterSet({"A": "12"})
    profile = connected_history.save("  Wide Duct ", params.snapshot(), "42.00")

    assert profile.id == "wide_duct"
    stored = collection.get("wide_duct")
    assert stored["name"] == "Wide Duct"
    assert stored["params"] == params.text_view()
    assert stored["area"] == "42.00"
    assert stored["createdBy"] == "user-1"
    assert stored["timestamp"] == "14:05"


def test_save_becomes_visible_through_reconciliation(connected_history):
    emitted = []
    connected_history.history_changed.connect(emitted.append)

    connected_history.save("A", ParameterSet().snapshot(), "1.00")

    assert len(emitted) == 1
    assert [p.name for p in emitted[0]] == ["A"]


def test_colliding_names_overwrite_same_record(connected_history, collection):
    first = connected_history.save("My Profile", ParameterSet({"A": "1"}).snapshot(), "1.00")
    connected_history.save("my   profile", ParameterSet({"A": "2"}).snapshot(), "2.00")
    last = connected_history.save("my_profile", ParameterSet({"A": "3"}).snapshot(), "3.00")

    assert len(collection) == 1
    assert [p.id for p in connected_history.profiles] == ["my_profile"]
    stored = connected_history.profiles[0]
    assert stored.name == "my_profile"
    assert stored.params["A"] == "3"
    # the original timestamp is superseded
    assert stored.timestamp_ms == last.timestamp_ms > first.timestamp_ms


def test_blank_name_gets_default(connected_history):
    connected_history.save("first", ParameterSet().snapshot(), "1.00")
    profile = connected_history.save("   ", ParameterSet().snapshot(), "1.00")
    assert profile.name == "Profile 2"
    assert profile.id == "profile_2"


def test_save_failure_is_reported_and_view_untouched(clock):
    collection = FailingCollection({"a": record("A", 100)})
    history = ProfileHistoryCache(collection, clock=clock)
    history.set_identity("user-1")
    before = history.profiles

    with pytest.raises(RemoteOperationError) as excinfo:
        history.save("B", ParameterSet().snapshot(), "1.00")

    assert isinstance(excinfo.value.__cause__, ConnectionError)
    assert history.profiles == before


def test_delete_failure_is_reported(clock):
    history = ProfileHistoryCache(FailingCollection({"a": record("A", 100)}), clock=clock)
    history.set_identity("user-1")

    with pytest.raises(RemoteOperationError):
        history.delete("a")
    assert [p.id for p in history.profiles] == ["a"]


def test_delete_removes_and_is_idempotent(connected_history, collection):
    connected_history.save("A", ParameterSet().snapshot(), "1.00")

    connected_history.delete("a")
    connected_history.delete("a")
    connected_history.delete("never-existed")

    assert connected_history.profiles == []
    assert len(collection) == 0


# ---- reconcile / select ----

def test_reconcile_orders_newest_first(connected_history):
    connected_history.reconcile({
        "x": record("X", 100),
        "y": record("Y", 300),
        "z": record("Z", 200),
    })
    assert [p.timestamp_ms for p in connected_history.profiles] == [300, 200, 100]


def test_reconcile_keeps_input_order_for_ties(connected_history):
    connected_history.reconcile({
        "b": record("B", 5),
        "a": record("A", 5),
        "c": record("C", 9),
    })
    assert [p.id for p in connected_history.profiles] == ["c", "b", "a"]


def test_reconcile_is_idempotent(connected_history):
    snapshot = {"x": record("X", 100), "y": record("Y", 300)}
    connected_history.reconcile(snapshot)
    first = connected_history.profiles
    connected_history.reconcile(snapshot)
    assert connected_history.profiles == first


def test_reconcile_replaces_whole_view(connected_history):
    connected_history.reconcile({"x": record("X", 100), "y": record("Y", 300)})
    connected_history.reconcile({"z": record("Z", 1)})
    assert [p.id for p in connected_history.profiles] == ["z"]


def test_reconcile_ignored_while_disconnected(history):
    history.reconcile({"x": record("X", 100)})
    assert history.profiles == []


def test_save_then_select_round_trips_text(connected_history):
    params = ParameterSet({"A": "007", "B": "4e1", "rho": "", "L_end": " 2.50"})
    profile = connected_history.save("Round Trip", params.snapshot(), "1.00")

    restored = ParameterSet()
    restored.restore(connected_history.select(profile.id))

    assert restored.text_view() == params.text_view()


def test_select_does_not_mutate(connected_history):
    connected_history.save("A", ParameterSet().snapshot(), "1.00")
    snapshot = connected_history.select("a")
    snapshot["A"] = "changed"
    assert connected_history.select("a")["A"] == "100"


def test_select_unknown_id(connected_history):
    with pytest.raises(KeyError):
        connected_history.select("missing")


def test_identity_for_is_exposed_on_cache():
    assert ProfileHistoryCache.identity_for("My Profile") == "my_profile"


def test_two_clients_share_one_collection(collection, clock):
    first = ProfileHistoryCache(collection, clock=clock)
    second = ProfileHistoryCache(collection, clock=clock)
    first.set_identity("user-1")
    second.set_identity("user-2")

    first.save("Shared", ParameterSet().snapshot(), "1.00")
    assert [p.id for p in second.profiles] == ["shared"]

    second.delete("shared")
    assert first.profiles == []
