import pytest

from smart_collection import (
    Collection,
    CollectionEvent,
    MutationKind,
    MutationState,
    NullMutationRecorder,
    begin_mutation,
)


def _record_events(collection: Collection) -> list[tuple]:
    events: list[tuple] = []

    def make_handler(name: str):
        def handler(_collection, *args):
            assert _collection is collection
            events.append((name, *(arg for arg in args if not callable(arg) and not hasattr(arg, "cancel"))))

        return handler

    for event in CollectionEvent:
        collection.on(event, make_handler(event.value))
    return events


def _cancel_when(collection: Collection, event: str, predicate, store: list | None = None) -> None:
    def handler(_collection, item, continuation):
        if predicate(item):
            continuation.cancel()
            if store is not None:
                store.append(continuation)

    collection.on(event, handler)


def test_add_without_cancel_commits_and_notifies_in_order():
    coll = Collection(recorder=NullMutationRecorder())
    events = _record_events(coll)

    coll.add("a")

    assert coll.items == ("a",)
    assert events == [("add-before", "a"), ("add", "a"), ("add-after", "a")]


def test_canceled_add_is_absent_and_fires_cancel_only():
    coll = Collection()
    _cancel_when(coll, "add-before", lambda item: item == "x")
    events = _record_events(coll)

    coll.add("x")

    assert coll.items == ()
    assert events == [("add-before", "x"), ("add-cancel", "x")]


def test_resumed_add_lands_at_requested_position_relative_to_current_items():
    coll = Collection()
    coll.add(["a", "b", "c"])
    resumes: list = []
    coll.on("add-cancel", lambda _c, item, resume: resumes.append(resume))
    _cancel_when(coll, "add-before", lambda item: item == "x")

    coll.add_at("x", 1)
    assert coll.items == ("a", "b", "c")

    coll.remove("a")
    events = _record_events(coll)
    assert resumes[0]() is True

    assert coll.items == ("b", "x", "c")
    assert events == [("add-resume", "x"), ("add", "x"), ("add-after", "x")]


def test_resume_appends_when_requested_position_is_no_longer_valid():
    coll = Collection()
    coll.add(["a", "b", "c"])
    resumes: list = []
    coll.on("add-cancel", lambda _c, item, resume: resumes.append(resume))
    _cancel_when(coll, "add-before", lambda item: item == "x")

    coll.add_at("x", 3)
    coll.remove_last()
    coll.remove_last()
    resumes[0]()

    assert coll.items == ("a", "x")


def test_canceled_remove_keeps_item_and_resume_removes_it_once():
    coll = Collection()
    coll.add(["a", "b"])
    resumes: list = []
    coll.on("remove-cancel", lambda _c, item, resume: resumes.append(resume))
    _cancel_when(coll, "remove-before", lambda item: item == "a")
    events = _record_events(coll)

    coll.remove("a")
    assert coll.items == ("a", "b")
    assert events == [("remove-before", "a"), ("remove-cancel", "a")]

    events.clear()
    assert resumes[0]() is True
    assert resumes[0]() is False

    assert coll.items == ("b",)
    assert events == [("remove-resume", "a"), ("remove", "a"), ("remove-after", "a")]


def test_cancel_twice_fires_cancel_notification_once():
    coll = Collection()
    results: list[bool] = []

    def veto(_c, item, continuation):
        results.append(continuation.cancel())
        results.append(continuation.cancel())

    coll.on("add-before", veto)
    cancels: list = []
    coll.on("add-cancel", lambda _c, item, resume: cancels.append(item))

    coll.add("x")

    assert results == [True, False]
    assert cancels == ["x"]


def test_cancel_and_resume_after_commit_are_noops():
    coll = Collection()
    kept: list = []
    coll.on("add-before", lambda _c, item, continuation: kept.append(continuation))
    adds: list = []
    coll.on("add", lambda _c, item: adds.append(item))

    coll.add("a")

    continuation = kept[0]
    assert continuation.state is MutationState.COMMITTED
    assert continuation.cancel() is False
    assert continuation.resume() is False
    assert adds == ["a"]
    assert coll.items == ("a",)


def test_resume_inside_cancel_handler_commits_synchronously():
    coll = Collection()
    events = _record_events(coll)
    _cancel_when(coll, "add-before", lambda item: True)
    coll.on("add-cancel", lambda _c, item, resume: resume())

    coll.add("a")

    assert coll.items == ("a",)
    assert events == [
        ("add-before", "a"),
        ("add-cancel", "a"),
        ("add-resume", "a"),
        ("add", "a"),
        ("add-after", "a"),
    ]


def test_second_cancel_subscriber_resuming_does_not_duplicate_commit():
    coll = Collection()
    _cancel_when(coll, "add-before", lambda item: True)
    coll.on("add-cancel", lambda _c, item, resume: resume())
    coll.on("add-cancel", lambda _c, item, resume: resume())
    adds: list = []
    coll.on("add", lambda _c, item: adds.append(item))

    coll.add("a")

    assert adds == ["a"]
    assert coll.items == ("a",)


def test_resume_during_before_notification_is_a_noop():
    coll = Collection()
    outcomes: list[bool] = []

    def veto_then_resume(_c, item, continuation):
        continuation.cancel()
        outcomes.append(continuation.resume())

    coll.on("add-before", veto_then_resume)

    coll.add("a")

    assert outcomes == [False]
    assert coll.items == ()


def test_handler_exception_propagates_and_leaves_mutation_uncommitted():
    coll = Collection()
    kept: list = []

    def explode(_c, item, continuation):
        kept.append(continuation)
        raise RuntimeError("boom")

    coll.on("add-before", explode)

    with pytest.raises(RuntimeError, match="boom"):
        coll.add("a")

    assert coll.items == ()
    assert kept[0].state is MutationState.PENDING
    assert kept[0].cancel() is False


def test_nested_mutation_inside_before_handler_keeps_captured_position():
    coll = Collection()
    coll.add(["a", "b"])
    resumes: list = []
    coll.on("add-cancel", lambda _c, item, resume: resumes.append(resume))

    def veto_and_replace(collection, item, continuation):
        if item == "x":
            continuation.cancel()
            collection.add("y")

    coll.on("add-before", veto_and_replace)

    coll.add_at("x", 0)
    assert coll.items == ("a", "b", "y")

    resumes[0]()
    assert coll.items == ("x", "a", "b", "y")


def test_removing_last_item_publishes_empty_after_remove_after():
    coll = Collection()
    coll.add("a")
    events = _record_events(coll)

    coll.remove("a")

    assert events == [
        ("remove-before", "a"),
        ("remove", "a"),
        ("remove-after", "a"),
        ("empty",),
    ]


def test_resumed_remove_of_item_already_gone_skips_commit_notifications():
    coll = Collection()
    coll.add(["a", "b"])
    resumes: list = []
    coll.on("remove-cancel", lambda _c, item, resume: resumes.append(resume))
    blocked = {"a"}

    def veto(_c, item, continuation):
        if item in blocked:
            continuation.cancel()

    coll.on("remove-before", veto)
    coll.remove("a")

    blocked.clear()
    coll.remove("a")
    assert coll.items == ("b",)

    removes: list = []
    coll.on("remove", lambda _c, item: removes.append(item))
    assert resumes[0]() is True
    assert removes == []
    assert coll.items == ("b",)


def test_begin_mutation_returns_state_tagged_mutation():
    coll = Collection()
    coll.on("add-before", lambda _c, item, continuation: item == "no" and continuation.cancel())

    committed = begin_mutation(coll, MutationKind.ADD, "yes")
    canceled = begin_mutation(coll, "add", "no", 0)

    assert committed.state is MutationState.COMMITTED
    assert committed.committed
    assert canceled.state is MutationState.CANCELED
    assert canceled.canceled
    assert canceled.position == 0
    assert canceled.kind is MutationKind.ADD
    assert coll.items == ("yes",)


def test_empty_is_published_when_remove_after_handler_refills_the_collection():
    coll = Collection()
    coll.add("a")
    empties: list[str] = []
    coll.on("empty", lambda _c: empties.append("empty"))

    def refill(collection, item):
        if item == "a":
            collection.add("refill")

    coll.on("remove-after", refill)

    coll.remove("a")

    assert empties == ["empty"]
    assert coll.items == ("refill",)


def test_remove_at_deletes_the_targeted_item_after_a_nested_removal_shifts_it():
    coll = Collection()
    coll.add(["a", "b", "c"])

    def drop_head(collection, item, continuation):
        if item == "c":
            collection.remove_first()

    coll.on("remove-before", drop_head)

    coll.remove_at(2)

    assert coll.items == ("b",)
