"""
Preset data model.
"""

import copy
import time
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from ..models import ColorGrading, HSLAdjustments


def now_ms() -> int:
    """Current time in milliseconds since the epoch."""
    return int(time.time() * 1000)


@dataclass
class Preset:
    """Named color grading and HSL snapshot."""
    id: str
    name: str
    description: str = ""
    tags: List[str] = field(default_factory=list)
    adjustments: ColorGrading = field(default_factory=ColorGrading)
    hsl_adjustments: HSLAdjustments = field(default_factory=HSLAdjustments)
    thumbnail: Optional[str] = None
    created_at: int = field(default_factory=now_ms)
    last_modified: int = field(default_factory=now_ms)
    is_built_in: bool = False

    def copy(self) -> 'Preset':
        return copy.deepcopy(self)

    def matches(self, query: str = "", tags: Optional[List[str]] = None) -> bool:
        """
        Case-insensitive substring match on name or description, and at
        least one shared tag when ``tags`` is non-empty.
        """
        lower = query.lower()
        matches_query = (not query or lower in self.name.lower()
                         or lower in self.description.lower())
        matches_tags = not tags or any(tag in self.tags for tag in tags)
        return matches_query and matches_tags

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Preset':
        data = dict(data)
        data['adjustments'] = ColorGrading.from_dict(data.get('adjustments'))
        data['hsl_adjustments'] = HSLAdjustments.from_dict(data.get('hsl_adjustments'))
        data['tags'] = list(data.get('tags') or [])
        return cls(**data)
