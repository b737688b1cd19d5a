"""
Built-in color grading presets seeded into every PresetStore.
"""

from typing import Any, Dict, List

BUILTIN_PRESETS: List[Dict[str, Any]] = [
    {
        'name': 'Cinematic',
        'description': 'Classic cinematic color grading with teal and orange tones',
        'tags': ['cinematic', 'teal', 'orange', 'film'],
        'adjustments': {
            'shadows': {'red': -10, 'green': 5, 'blue': 15},
            'midtones': {'red': 0, 'green': 0, 'blue': 0},
            'highlights': {'red': 15, 'green': 5, 'blue': -10},
        },
        'hsl_adjustments': {
            'red': {'saturation': 10},
            'orange': {'hue': -5, 'saturation': 15, 'lightness': 5},
            'green': {'saturation': -5},
            'aqua': {'hue': 5, 'saturation': 20, 'lightness': -5},
            'blue': {'saturation': 10, 'lightness': -5},
        },
    },
    {
        'name': 'Warm Sunset',
        'description': 'Warm, golden hour color grading',
        'tags': ['warm', 'sunset', 'golden', 'cozy'],
        'adjustments': {
            'shadows': {'red': 5, 'green': 0, 'blue': -15},
            'midtones': {'red': 10, 'green': 5, 'blue': -5},
            'highlights': {'red': 15, 'green': 10, 'blue': 0},
        },
        'hsl_adjustments': {
            'red': {'saturation': 15, 'lightness': 5},
            'orange': {'saturation': 20, 'lightness': 10},
            'yellow': {'hue': -5, 'saturation': 15, 'lightness': 5},
            'green': {'saturation': -10},
            'aqua': {'saturation': -15, 'lightness': -5},
            'blue': {'saturation': -10, 'lightness': -10},
        },
    },
    {
        'name': 'Cool Blue',
        'description': 'Cool, moody blue color grading',
        'tags': ['cool', 'blue', 'moody', 'winter'],
        'adjustments': {
            'shadows': {'red': -15, 'green': -5, 'blue': 10},
            'midtones': {'red': -5, 'green': 0, 'blue': 5},
            'highlights': {'red': 0, 'green': 5, 'blue': 15},
        },
        'hsl_adjustments': {
            'red': {'saturation': -10},
            'orange': {'saturation': -15, 'lightness': -5},
            'yellow': {'saturation': -10},
            'aqua': {'saturation': 15, 'lightness': 5},
            'blue': {'saturation': 20, 'lightness': 5},
            'purple': {'saturation': 10},
        },
    },
]
