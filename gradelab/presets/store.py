"""
In-memory preset store with optional JSON file persistence.

Built-in presets are seeded by ``init()`` and can never be updated or
deleted. Every preset handed in or out is a deep copy, so callers can keep
editing their live grading without touching stored snapshots.
"""

import copy
import json
import logging
import uuid
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ..errors import BuiltInPresetError, PresetError, PresetNotFoundError
from ..models import ColorGrading, HSLAdjustments
from .builtin import BUILTIN_PRESETS
from .models import Preset, now_ms

logger = logging.getLogger(__name__)

# Fields update_preset may change
_UPDATABLE_FIELDS = ('name', 'description', 'tags', 'adjustments', 'hsl_adjustments', 'thumbnail')


def generate_preset_id() -> str:
    return f"preset_{now_ms()}_{uuid.uuid4().hex[:9]}"


def _tag_list(tags: Optional[Union[str, List[str]]]) -> List[str]:
    """A single tag string counts as one tag."""
    if tags is None:
        return []
    if isinstance(tags, str):
        return [tags]
    return list(tags)


class PresetStore:
    """Create, update, delete, duplicate and search color grading presets."""

    def __init__(self, storage_path: Optional[Union[str, Path]] = None):
        """
        Args:
            storage_path: JSON file to load from and save to; None keeps the
                store in memory only
        """
        self.storage_path = Path(storage_path) if storage_path else None
        self._presets: List[Preset] = []
        self.active_preset_id: Optional[str] = None

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> 'PresetStore':
        section = config.get('presets', {}) or {}
        return cls(storage_path=section.get('storage_path'))

    def init(self) -> None:
        """Load saved presets and add any built-in preset missing by name."""
        if self.storage_path is not None:
            self._presets = self._load()

        existing = {p.name for p in self._presets if p.is_built_in}
        added = 0
        for data in BUILTIN_PRESETS:
            if data['name'] in existing:
                continue
            preset = Preset.from_dict({**data, 'id': generate_preset_id(), 'is_built_in': True})
            self._presets.append(preset)
            added += 1

        if added:
            self._save()
        logger.info(f"Preset store ready: {len(self._presets)} presets ({added} built-in added)")

    def create_preset(self, name: str, description: str,
                      adjustments: ColorGrading, hsl_adjustments: HSLAdjustments,
                      tags: Optional[List[str]] = None) -> str:
        """
        Store a new user preset.

        Args:
            name: Display name
            description: Free text description
            adjustments: Color grading to snapshot
            hsl_adjustments: HSL table to snapshot
            tags: Search tags

        Returns:
            New preset id
        """
        adjustments.validate()
        hsl_adjustments.validate()
        preset = Preset(
            id=generate_preset_id(),
            name=name,
            description=description,
            tags=_tag_list(tags),
            adjustments=copy.deepcopy(adjustments),
            hsl_adjustments=copy.deepcopy(hsl_adjustments),
        )
        self._presets.append(preset)
        self._save()
        logger.debug(f"Created preset {preset.id} ({name})")
        return preset.id

    def update_preset(self, preset_id: str, **updates) -> Preset:
        """
        Change a user preset.

        Raises:
            PresetNotFoundError: Unknown id
            BuiltInPresetError: The preset is built in
            PresetError: An update names a field that cannot change
        """
        preset = self._find(preset_id)
        if preset.is_built_in:
            raise BuiltInPresetError(f"Built-in preset '{preset.name}' cannot be modified")

        invalid = set(updates) - set(_UPDATABLE_FIELDS)
        if invalid:
            raise PresetError(f"Cannot update preset fields: {sorted(invalid)}")

        # Validate everything before touching the stored preset
        staged: Dict[str, Any] = {}
        for key, value in updates.items():
            if key in ('adjustments', 'hsl_adjustments'):
                value.validate()
                value = copy.deepcopy(value)
            elif key == 'tags':
                value = _tag_list(value)
            staged[key] = value

        for key, value in staged.items():
            setattr(preset, key, value)
        preset.last_modified = now_ms()

        self._save()
        return preset.copy()

    def delete_preset(self, preset_id: str) -> None:
        """
        Raises:
            PresetNotFoundError: Unknown id
            BuiltInPresetError: The preset is built in
        """
        preset = self._find(preset_id)
        if preset.is_built_in:
            raise BuiltInPresetError(f"Built-in preset '{preset.name}' cannot be deleted")

        self._presets.remove(preset)
        if self.active_preset_id == preset_id:
            self.active_preset_id = None
        self._save()
        logger.debug(f"Deleted preset {preset_id}")

    def duplicate_preset(self, preset_id: str) -> str:
        """Copy any preset, built-in included, into a new user preset."""
        original = self._find(preset_id)
        duplicate = original.copy()
        duplicate.id = generate_preset_id()
        duplicate.name = f"{original.name} Copy"
        duplicate.created_at = duplicate.last_modified = now_ms()
        duplicate.is_built_in = False

        self._presets.append(duplicate)
        self._save()
        return duplicate.id

    def get_preset(self, preset_id: str) -> Preset:
        return self._find(preset_id).copy()

    def list_presets(self) -> List[Preset]:
        return [p.copy() for p in self._presets]

    def builtin_presets(self) -> List[Preset]:
        return [p.copy() for p in self._presets if p.is_built_in]

    def user_presets(self) -> List[Preset]:
        return [p.copy() for p in self._presets if not p.is_built_in]

    def search_presets(self, query: str = "", tags: Optional[List[str]] = None) -> List[Preset]:
        """Presets whose name or description contains ``query`` and that share any tag."""
        return [p.copy() for p in self._presets if p.matches(query, _tag_list(tags))]

    def set_active_preset(self, preset_id: Optional[str]) -> None:
        if preset_id is not None:
            self._find(preset_id)
        self.active_preset_id = preset_id

    @property
    def active_preset(self) -> Optional[Preset]:
        if self.active_preset_id is None:
            return None
        for preset in self._presets:
            if preset.id == self.active_preset_id:
                return preset.copy()
        return None

    def __len__(self) -> int:
        return len(self._presets)

    def _find(self, preset_id: str) -> Preset:
        for preset in self._presets:
            if preset.id == preset_id:
                return preset
        raise PresetNotFoundError(preset_id)

    def _load(self) -> List[Preset]:
        if not self.storage_path.exists():
            return []
        try:
            with open(self.storage_path, 'r') as f:
                data = json.load(f)
            return [Preset.from_dict(item) for item in data.get('presets', [])]
        except (OSError, ValueError, TypeError) as e:
            raise PresetError(f"Failed to load presets from {self.storage_path}: {e}") from e

    def _save(self) -> None:
        if self.storage_path is None:
            return
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.storage_path, 'w') as f:
                json.dump({'presets': [p.to_dict() for p in self._presets]}, f, indent=2)
        except OSError as e:
            raise PresetError(f"Failed to save presets to {self.storage_path}: {e}") from e

