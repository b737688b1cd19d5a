"""
Color grading presets.
"""

from .models import Preset
from .builtin import BUILTIN_PRESETS
from .store import PresetStore, generate_preset_id

__all__ = ['Preset', 'BUILTIN_PRESETS', 'PresetStore', 'generate_preset_id']
