"""
Tests for undo/redo history.
"""

import pytest

from gradelab.models import Adjustments, RGBOffset
from gradelab.processing import HistoryStack


@pytest.fixture
def history():
    stack = HistoryStack()
    stack.initialize_session("session-1", Adjustments())
    return stack


def edit(history, current, **changes):
    """Record an action changing ``current`` and return the new state."""
    after = current.copy()
    for key, value in changes.items():
        setattr(after, key, value)
    history.add_action("adjustment", f"Set {', '.join(changes)}", current, after)
    return after


class TestUndoRedo:
    """Test undo and redo navigation."""

    def test_initial_state(self, history):
        """Test a fresh session has nothing to undo or redo."""
        assert not history.can_undo()
        assert not history.can_redo()
        assert history.get_current_adjustments() == Adjustments()

    def test_undo_redo_sequence(self, history):
        """Test stepping back to the original state and forward again."""
        a1 = edit(history, Adjustments(), exposure=1.0)
        a2 = edit(history, a1, contrast=0.2)

        assert history.undo() == a1
        assert history.undo() == Adjustments()
        assert not history.can_undo()
        assert history.undo() is None

        assert history.redo() == a1
        assert history.redo() == a2
        assert not history.can_redo()
        assert history.redo() is None
        assert history.get_current_adjustments() == a2

    def test_new_action_discards_redo_branch(self, history):
        """Test editing after undo drops the undone actions."""
        a1 = edit(history, Adjustments(), exposure=1.0)
        edit(history, a1, exposure=2.0)
        history.undo()

        a3 = edit(history, a1, saturation=0.5)

        assert not history.can_redo()
        assert len(history.actions) == 2
        assert history.undo() == a1
        assert history.redo() == a3

    def test_new_action_after_full_undo(self, history):
        """Test editing from the original state replaces all actions."""
        edit(history, Adjustments(), exposure=1.0)
        history.undo()

        a2 = edit(history, Adjustments(), tint=10.0)
        assert len(history.actions) == 1
        assert history.get_current_adjustments() == a2


class TestSnapshots:
    """Test snapshot handling."""

    def test_history_is_isolated_from_live_state(self, history):
        """Test mutating live adjustments never changes stored history."""
        live = Adjustments()
        before = live.copy()
        live.exposure = 1.0
        live.color_grading.shadows.red = 20
        history.add_action("adjustment", "edit", before, live)

        live.exposure = 3.0
        live.color_grading.shadows = RGBOffset(blue=50)

        current = history.get_current_adjustments()
        assert current.exposure == 1.0
        assert current.color_grading.shadows == RGBOffset(red=20)

    def test_auto_snapshot_every_ten_actions(self, history):
        """Test an automatic snapshot is taken every 10 actions."""
        current = Adjustments()
        for i in range(10):
            current = edit(history, current, exposure=i / 10)

        descriptions = [s.description for s in history.snapshots]
        assert descriptions == ["Session Start", "Auto-snapshot at action 10"]
        assert history.snapshots[-1].action_count == 10

    def test_restore_snapshot(self, history):
        """Test restoring a manual snapshot."""
        state = Adjustments(saturation=0.3)
        snapshot_id = history.create_snapshot("Look A", state)

        assert history.restore_snapshot(snapshot_id) == state
        assert history.restore_snapshot("missing") is None

    def test_snapshot_limit(self):
        """Test old snapshots are dropped beyond the limit."""
        history = HistoryStack(max_snapshots=2)
        history.initialize_session("s", Adjustments())
        history.create_snapshot("one", Adjustments())
        history.create_snapshot("two", Adjustments())

        assert [s.description for s in history.snapshots] == ["one", "two"]


class TestLimits:
    """Test action trimming."""

    def test_max_actions(self):
        """Test old actions are dropped and the baseline moves forward."""
        history = HistoryStack(max_actions=3)
        history.initialize_session("s", Adjustments())

        states = [Adjustments()]
        for i in range(1, 6):
            states.append(edit(history, states[-1], exposure=float(i)))

        assert len(history.actions) == 3
        history.undo()
        history.undo()
        assert history.undo() == states[2]
        assert not history.can_undo()

    def test_full_stack_keeps_auto_snapshot_interval(self):
        """Test edits past the action limit still snapshot only every 10 edits."""
        history = HistoryStack(max_actions=10, max_snapshots=3)
        history.initialize_session("s", Adjustments())
        history.create_snapshot("Mine", Adjustments(saturation=0.2))

        current = Adjustments()
        for i in range(15):
            current = edit(history, current, exposure=i / 10)

        assert len(history.actions) == 10
        descriptions = [s.description for s in history.snapshots]
        assert descriptions == ["Session Start", "Mine", "Auto-snapshot at action 10"]

    def test_from_config(self):
        """Test limits come from config."""
        history = HistoryStack.from_config({'history': {'max_actions': 5, 'max_snapshots': 2}})
        assert history.max_actions == 5
        assert history.max_snapshots == 2


class TestPersistence:
    """Test history export/import."""

    def test_export_import(self, history, tmp_path):
        """Test a session survives export and import."""
        a1 = edit(history, Adjustments(), exposure=1.0)
        edit(history, a1, exposure=2.0)
        history.undo()

        path = tmp_path / "history.json"
        history.export_history(path)

        restored = HistoryStack()
        restored.import_history(path)

        assert restored.session_id == "session-1"
        assert restored.get_current_adjustments() == a1
        assert restored.can_redo()
        assert restored.undo() == Adjustments()

    def test_summary(self, history):
        """Test the summary reflects the stack."""
        edit(history, Adjustments(), exposure=1.0)
        summary = history.get_history_summary()

        assert summary['session_id'] == "session-1"
        assert summary['total_actions'] == 1
        assert summary['can_undo'] is True
        assert summary['recent_actions'][0]['description'] == "Set exposure"

    def test_clear(self, history):
        """Test clearing removes actions and snapshots."""
        edit(history, Adjustments(), exposure=1.0)
        history.clear_history()
        assert history.actions == []
        assert history.snapshots == []
        assert not history.can_undo()
