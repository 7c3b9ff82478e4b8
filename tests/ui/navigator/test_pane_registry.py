"""
Tests for PaneRegistry: registration, deduplication, weight order, reload.
"""
import asyncio

import pytest

from paneview.core.dispatch import UiDispatcher
from paneview.ui.navigator import PaneWeightCollisionError, collect_panes, diff_panes


def _warnings(records, text):
    return [r for r in records if r["level"].name == "WARNING" and text in r["message"]]


@pytest.mark.asyncio
async def test_duplicate_id_in_batch_first_registered_wins(make_navigator, make_pane, log_records):
    first = make_pane("Project", 10)
    second = make_pane("Project", 20)
    navigator = make_navigator()
    navigator.registry.register(first)
    navigator.registry.register(second)

    await navigator.initialize()

    assert navigator.get_pane("Project") is first
    assert [s.pane for s in navigator.content.slots] == [first]
    assert len(_warnings(log_records, "duplicated pane")) == 1
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_duplicate_id_after_start_is_dropped(make_navigator, make_pane, log_records):
    first = make_pane("Project", 10)
    navigator = make_navigator(first)
    await navigator.initialize()

    navigator.registry.register(make_pane("Project", 20))

    assert navigator.get_pane("Project") is first
    assert len(navigator.content.slots) == 1
    assert _warnings(log_records, "duplicated pane")
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_slots_follow_ascending_weight(make_navigator, make_pane):
    navigator = make_navigator(make_pane("C", 30), make_pane("A", 10), make_pane("B", 20))
    await navigator.initialize()

    assert [s.pane_id for s in navigator.content.slots] == ["A", "B", "C"]
    assert navigator.pane_ids() == ["A", "B", "C"]

    navigator.registry.register(make_pane("AB", 15))
    assert [s.pane_id for s in navigator.content.slots] == ["A", "AB", "B", "C"]
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_weight_collision_is_fatal(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10), make_pane("B", 10))

    with pytest.raises(PaneWeightCollisionError):
        await navigator.initialize()

    assert navigator.content.slots == []
    assert len(navigator.registry) == 0
    assert issubclass(PaneWeightCollisionError, AssertionError)
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_weight_collision_leaves_batch_pending(make_navigator, make_pane, log_records):
    navigator = make_navigator(make_pane("A", 10), make_pane("B", 20),
                               make_pane("C", 20), make_pane("D", 30))

    with pytest.raises(PaneWeightCollisionError):
        await navigator.initialize()

    assert navigator.content.slots == []
    assert navigator.current_view_id is None
    assert [p.id for p in navigator.registry.pending_panes()] == ["A", "B", "C", "D"]
    assert any(r["level"].name == "ERROR" for r in log_records)

    navigator.registry.unregister("C")
    navigator.registry.promote_pending()

    assert [s.pane_id for s in navigator.content.slots] == ["A", "B", "D"]
    assert navigator.current_view_id == "A"
    assert navigator.registry.pending_panes() == []
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_weight_collision_with_live_pane(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10))
    await navigator.initialize()

    with pytest.raises(PaneWeightCollisionError):
        navigator.registry.register(make_pane("B", 10))

    assert navigator.pane_ids() == ["A"]
    assert [s.pane_id for s in navigator.content.slots] == ["A"]
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_unregister_unknown_id_is_silent(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10))
    await navigator.initialize()

    assert not navigator.registry.unregister("Nope")
    assert navigator.pane_ids() == ["A"]
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_unregister_drops_pending_pane(make_navigator, make_pane):
    navigator = make_navigator()
    navigator.dispatcher = UiDispatcher.current()
    navigator.registry.register(make_pane("Pending", 20))
    assert len(navigator.registry.pending_panes()) == 1

    assert not navigator.registry.unregister("Pending")
    assert navigator.registry.pending_panes() == []


@pytest.mark.asyncio
async def test_unregister_selected_pane_selects_nearest(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10), make_pane("B", 20), make_pane("C", 30))
    await navigator.initialize()
    navigator.change_view("B")
    changes = []
    navigator.signals.pane_changed.connect(lambda old, new: changes.append((old, new)))

    assert navigator.registry.unregister("B")

    assert navigator.current_view_id == "C"
    assert [s.pane_id for s in navigator.content.slots] == ["A", "C"]
    assert changes == [("B", "C")]
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_unregister_last_pane_clears_selection(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10))
    await navigator.initialize()

    navigator.registry.unregister("A")

    assert navigator.current_view_id is None
    assert navigator.current_pane is None
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_hidden_panes_are_not_registered(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10), make_pane("Hidden", 20, initially_visible=False))
    await navigator.initialize()
    assert navigator.pane_ids() == ["A"]
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_reload_adds_and_disposes_panes(make_navigator, make_pane):
    keep = make_pane("Keep", 10)
    gone = make_pane("Gone", 20)
    navigator = make_navigator(keep, gone)
    await navigator.initialize()

    added = make_pane("New", 30)
    navigator.feed.add(added)
    assert navigator.get_pane("New") is added

    navigator.feed.remove(gone)
    assert gone.is_disposed
    assert navigator.pane_ids() == ["Keep", "New"]
    assert not keep.is_disposed
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_reload_from_worker_thread(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10))
    await navigator.initialize()
    loop = asyncio.get_running_loop()

    late = make_pane("Late", 20)
    await loop.run_in_executor(None, navigator.feed.add, late)
    await asyncio.sleep(0.02)

    assert navigator.pane_ids() == ["A", "Late"]
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_reload_is_idempotent(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10), make_pane("B", 20))
    await navigator.initialize()

    navigator.registry.reload()
    navigator.registry.reload()

    assert navigator.pane_ids() == ["A", "B"]
    assert len(navigator.content.slots) == 2
    await navigator.shutdown()


@pytest.mark.asyncio
async def test_removing_unknown_pane_disposes_it(make_navigator, make_pane):
    navigator = make_navigator(make_pane("A", 10))
    await navigator.initialize()
    stranger = make_pane("Stranger", 50)

    navigator.feed.remove(stranger)

    assert stranger.is_disposed
    assert navigator.pane_ids() == ["A"]
    await navigator.shutdown()


def test_collect_panes_first_contribution_wins(make_pane):
    a = make_pane("A", 20)
    a2 = make_pane("A", 5)
    b = make_pane("B", 10)

    panes, dropped = collect_panes([a, b, a2, a])

    assert list(panes) == ["B", "A"]
    assert panes["A"] is a
    assert dropped == [a2]


def test_diff_panes_by_identity(make_pane):
    a = make_pane("A", 10)
    b = make_pane("B", 20)
    b2 = make_pane("B", 20)
    c = make_pane("C", 30)
    hidden = make_pane("H", 40, initially_visible=False)

    removed, added = diff_panes([a, b], {"A": a, "B": b2, "C": c, "H": hidden})

    assert removed == [b]
    assert added == [b2, c]


@pytest.mark.asyncio
async def test_shutdown_disposes_panes(make_navigator, make_pane):
    pane = make_pane("A", 10)
    navigator = make_navigator(pane)
    await navigator.initialize()

    await navigator.shutdown()

    assert pane.is_disposed
    assert navigator.is_disposed
    navigator.feed.add(make_pane("After", 20))
    assert navigator.pane_ids() == []
