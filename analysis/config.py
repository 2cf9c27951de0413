"""
Default configuration for the design critique core.

The weights, thresholds and cutoffs below are the values the service has
always shipped with. Components accept a partial override dictionary and fall
back to these defaults for anything missing.
"""

import copy
from typing import Any, Dict, Optional

CATEGORIES = ('composition', 'color', 'technique')

# Sub-metric layout of the three model heads
CATEGORY_METRICS = {
    'composition': ('balance', 'harmony', 'rhythm', 'emphasis', 'unity', 'proportion', 'movement'),
    'color': ('palette', 'contrast', 'saturation', 'temperature', 'harmony'),
    'technique': ('precision', 'consistency', 'complexity', 'detail', 'texture', 'style')
}

DEFAULT_CONFIG: Dict[str, Any] = {
    'category_weights': {
        'composition': 0.4,
        'color': 0.3,
        'technique': 0.3
    },

    'level_cutoffs': {
        'intermediate': 0.4,
        'advanced': 0.7
    },

    'recommendation_rules': [
        {
            'category': 'composition',
            'metric': 'balance',
            'threshold': 0.6,
            'priority': 'high',
            'suggestion': 'Visual weight is unevenly distributed; rearrange elements for better balance'
        },
        {
            'category': 'color',
            'metric': 'harmony',
            'threshold': 0.5,
            'priority': 'medium',
            'suggestion': 'The color palette lacks harmony; try working with complementary colors'
        },
        {
            'category': 'technique',
            'metric': 'precision',
            'threshold': 0.7,
            'priority': 'medium',
            'suggestion': 'Line control can be improved; practice precise line exercises'
        }
    ],

    'findings': {
        'strong_threshold': 0.7,
        'weak_threshold': 0.4,
        'suggestion_threshold': 0.5
    },

    # Categories below this score contribute their suggestions to the overall improvements
    'improvement_threshold': 0.6
}


def get_default_config() -> Dict[str, Any]:
    """Return a deep copy of the default configuration."""

    return copy.deepcopy(DEFAULT_CONFIG)


def merge_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """
    Merge a partial configuration into the defaults.

    Nested dictionaries are merged one level deep; lists such as
    ``recommendation_rules`` are replaced wholesale.

    Args:
        overrides: Partial configuration dictionary

    Returns:
        Complete configuration dictionary
    """

    config = get_default_config()

    for key, value in (overrides or {}).items():
        if isinstance(value, dict) and isinstance(config.get(key), dict):
            config[key].update(value)
        else:
            config[key] = copy.deepcopy(value)

    return config
