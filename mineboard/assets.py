"""Semantic asset and string keys a presentation layer resolves to real resources."""
from typing import Dict, Optional

from mineboard.types import GameState, Visibility

BLOCK_PLAIN = 'plain'
BLOCK_MINED = 'mined'
BLOCK_MARKED = 'marked'
BLOCK_DEAD = 'dead'

FACE_HAPPY = 'happy'
FACE_SAD = 'sad'
FACE_JOY = 'joy'

CONFIG_STRINGS: Dict[str, str] = {
    'rows': 'Rows',
    'columns': 'Columns',
    'mines': 'Mines',
    'show': 'Show',
    'hide': 'Hide',
    'apply': 'Apply',
}

_BLOCK_KEYS = {
    Visibility.HIDDEN: BLOCK_PLAIN,
    Visibility.MARKED: BLOCK_MARKED,
    Visibility.REVEALED_MINE: BLOCK_MINED,
    Visibility.EXPLODED_MINE: BLOCK_DEAD,
}


def block_asset(visibility: Visibility) -> Optional[str]:
    """Asset key for a cell, None for a revealed cell which is drawn as its count."""
    return _BLOCK_KEYS.get(visibility)


def face_asset(state: GameState) -> str:
    if state in (GameState.EXPLODED, GameState.REVIEW):
        return FACE_SAD
    if state == GameState.CLEARED:
        return FACE_JOY
    return FACE_HAPPY


def config_string(key: str, overrides: Optional[Dict[str, str]] = None) -> str:
    """Localized label for a settings string key, falling back to English."""
    if key not in CONFIG_STRINGS:
        raise KeyError(f"unknown string key: {key}")
    if overrides and key in overrides:
        return overrides[key]
    return CONFIG_STRINGS[key]
