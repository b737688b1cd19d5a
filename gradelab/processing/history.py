"""
Edit history for a grading session.

Every recorded edit keeps the adjustments on both sides of it, stored as
plain dicts. ``Adjustments.to_dict`` deep-copies nested grading and HSL
values, so mutating the live adjustments afterwards leaves the history
untouched.
"""

import copy
import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..models import Adjustments

logger = logging.getLogger(__name__)

AUTO_SNAPSHOT_EVERY = 10


def _stamp() -> str:
    return datetime.now().strftime('%H%M%S%f')


@dataclass
class HistoryAction:
    """One recorded edit: what changed and the states on either side."""
    action_id: str
    recorded_at: str
    kind: str  # "adjustment", "color_grading", "hsl", "preset"
    description: str
    before: Dict[str, Any]
    after: Dict[str, Any]
    details: Dict[str, Any] = field(default_factory=dict)


@dataclass
class HistorySnapshot:
    """Named copy of a full adjustment state."""
    snapshot_id: str
    taken_at: str
    description: str
    adjustments: Dict[str, Any]
    action_count: int = 0


class HistoryStack:
    """
    Linear undo/redo over Adjustments.

    ``cursor`` counts the actions currently applied: 0 is the session's
    baseline state, ``len(actions)`` is the newest edit. Recording an edit
    while the cursor is behind the newest one discards the undone tail.
    """

    def __init__(self, max_actions: int = 100, max_snapshots: int = 10):
        """
        Args:
            max_actions: Edits kept before the oldest are folded into the baseline
            max_snapshots: Snapshots kept before the oldest is dropped
        """
        self.max_actions = max_actions
        self.max_snapshots = max_snapshots

        self.session_id: Optional[str] = None
        self.baseline: Optional[Dict[str, Any]] = None
        self.actions: List[HistoryAction] = []
        self.snapshots: List[HistorySnapshot] = []
        self.cursor = 0
        # Edits recorded this session, including ones later trimmed or discarded
        self.recorded_count = 0

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'HistoryStack':
        limits = config.get('history', {}) or {}
        return cls(max_actions=limits.get('max_actions', 100),
                   max_snapshots=limits.get('max_snapshots', 10))

    def initialize_session(self, session_id: str, initial: Adjustments) -> None:
        """Start a fresh session whose baseline is ``initial``."""
        self.clear_history()
        self.session_id = session_id
        self.baseline = initial.to_dict()
        self.create_snapshot("Session Start", initial, action_count=0)
        logger.info(f"History session {session_id} started")

    def _state_at(self, cursor: int) -> Optional[Adjustments]:
        if cursor == 0:
            return None if self.baseline is None else Adjustments.from_dict(self.baseline)
        return Adjustments.from_dict(self.actions[cursor - 1].after)

    def add_action(self, action_type: str, description: str,
                   before: Adjustments, after: Adjustments,
                   metadata: Optional[Dict[str, Any]] = None) -> str:
        """
        Record an edit and make it current.

        Args:
            action_type: Category of the edit
            description: Label shown in history lists
            before: State the edit started from
            after: State the edit produced
            metadata: Free-form extras stored with the action

        Returns:
            The new action's ID
        """
        dropped = len(self.actions) - self.cursor
        if dropped:
            del self.actions[self.cursor:]
            logger.debug(f"Discarded {dropped} undone actions")

        action = HistoryAction(
            action_id=f"{self.session_id}_{len(self.actions)}_{_stamp()}",
            recorded_at=datetime.now().isoformat(),
            kind=action_type,
            description=description,
            before=before.to_dict(),
            after=after.to_dict(),
            details=copy.deepcopy(metadata) if metadata else {},
        )
        self.actions.append(action)

        overflow = len(self.actions) - self.max_actions
        if overflow > 0:
            self.baseline = self.actions[overflow].before
            del self.actions[:overflow]
        self.cursor = len(self.actions)
        self.recorded_count += 1

        if self.recorded_count % AUTO_SNAPSHOT_EVERY == 0:
            self.create_snapshot(f"Auto-snapshot at action {self.recorded_count}", after,
                                 action_count=self.cursor)

        logger.debug(f"Recorded {action_type}: {description}")
        return action.action_id

    def can_undo(self) -> bool:
        return self.cursor > 0

    def can_redo(self) -> bool:
        return self.cursor < len(self.actions)

    def undo(self) -> Optional[Adjustments]:
        """Step back one edit; None when already at the baseline."""
        if not self.can_undo():
            return None
        self.cursor -= 1
        logger.debug(f"Undo to {self.cursor}/{len(self.actions)}")
        return self._state_at(self.cursor)

    def redo(self) -> Optional[Adjustments]:
        """Re-apply the next undone edit; None when nothing is undone."""
        if not self.can_redo():
            return None
        self.cursor += 1
        logger.debug(f"Redo to {self.cursor}/{len(self.actions)}")
        return self._state_at(self.cursor)

    def get_current_adjustments(self) -> Optional[Adjustments]:
        """Adjustments at the cursor, or None before any session starts."""
        return self._state_at(self.cursor)

    def create_snapshot(self, description: str, adjustments: Adjustments,
                        action_count: Optional[int] = None) -> str:
        snapshot = HistorySnapshot(
            snapshot_id=f"snap_{self.session_id}_{len(self.snapshots)}_{_stamp()}",
            taken_at=datetime.now().isoformat(),
            description=description,
            adjustments=adjustments.to_dict(),
            action_count=self.cursor if action_count is None else action_count,
        )
        self.snapshots.append(snapshot)
        if len(self.snapshots) > self.max_snapshots:
            oldest = self.snapshots.pop(0)
            logger.debug(f"Snapshot limit reached, dropped '{oldest.description}'")
        return snapshot.snapshot_id

    def restore_snapshot(self, snapshot_id: str) -> Optional[Adjustments]:
        """
        Look up a snapshot's adjustments.

        The history itself is not modified; callers record the restore as
        a new action if they want it to be undoable.
        """
        match = next((s for s in self.snapshots if s.snapshot_id == snapshot_id), None)
        if match is None:
            logger.warning(f"No snapshot with id {snapshot_id}")
            return None
        logger.info(f"Restoring snapshot '{match.description}'")
        return Adjustments.from_dict(match.adjustments)

    def get_history_summary(self) -> Dict[str, Any]:
        recent = [
            {'action_id': a.action_id, 'timestamp': a.recorded_at,
             'action_type': a.kind, 'description': a.description}
            for a in self.actions[-5:]
        ]
        snapshots = [
            {'snapshot_id': s.snapshot_id, 'timestamp': s.taken_at,
             'description': s.description, 'action_count': s.action_count}
            for s in self.snapshots
        ]
        return {
            'session_id': self.session_id,
            'total_actions': len(self.actions),
            'current_position': self.cursor,
            'can_undo': self.can_undo(),
            'can_redo': self.can_redo(),
            'recent_actions': recent,
            'snapshots': snapshots,
        }

    def clear_history(self) -> None:
        """Forget every action and snapshot; the baseline is kept."""
        self.actions = []
        self.snapshots = []
        self.cursor = 0
        self.recorded_count = 0

    def export_history(self, file_path: Union[str, Path]) -> None:
        """Write the session to a JSON file."""
        payload = {
            'session_id': self.session_id,
            'baseline': self.baseline,
            'cursor': self.cursor,
            'recorded_count': self.recorded_count,
            'actions': [asdict(a) for a in self.actions],
            'snapshots': [asdict(s) for s in self.snapshots],
            'exported_at': datetime.now().isoformat(),
        }
        Path(file_path).write_text(json.dumps(payload, indent=2), encoding='utf-8')
        logger.info(f"History for {self.session_id} written to {file_path}")

    def import_history(self, file_path: Union[str, Path]) -> None:
        """Replace this stack's contents with a session saved by export_history."""
        payload = json.loads(Path(file_path).read_text(encoding='utf-8'))

        self.session_id = payload['session_id']
        self.baseline = payload['baseline']
        self.actions = [HistoryAction(**a) for a in payload['actions']]
        self.snapshots = [HistorySnapshot(**s) for s in payload['snapshots']]
        self.cursor = min(max(int(payload['cursor']), 0), len(self.actions))
        self.recorded_count = int(payload.get('recorded_count', len(self.actions)))

        logger.info(f"History for {self.session_id} loaded from {file_path}")
