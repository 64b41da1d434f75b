"""
List status normalization.

Every write path that accepts a status (list upserts, imports, stats
filters) goes through ``normalize_status`` so the mapping table lives in
one place.
"""
from dataclasses import dataclass
from typing import Union

STATUS_KEYS = ('watching', 'planned', 'completed', 'dropped')

# keys are compared after strip() + lower()
_ALIASES = {
    # watching
    'watching': 'watching',
    'watch': 'watching',
    'currently airing': 'watching',
    'airing': 'watching',
    'now airing': 'watching',
    'on air': 'watching',
    'airing now': 'watching',
    'смотрю': 'watching',
    # planned
    'planned': 'planned',
    'plan': 'planned',
    'plan to watch': 'planned',
    'в планах': 'planned',
    # completed
    'completed': 'completed',
    'finished': 'completed',
    'завершено': 'completed',
    'просмотрено': 'completed',
    # dropped
    'dropped': 'dropped',
    'брошено': 'dropped',
}


@dataclass(frozen=True)
class Recognized:
    key: str


@dataclass(frozen=True)
class Unrecognized:
    raw_value: object


StatusResult = Union[Recognized, Unrecognized]


def normalize_status(raw) -> StatusResult:
    """Map a free-text status label onto one of STATUS_KEYS."""
    if raw is None:
        return Unrecognized(raw)
    text = raw if isinstance(raw, str) else str(raw)
    key = _ALIASES.get(text.strip().lower())
    if key is None:
        return Unrecognized(raw)
    return Recognized(key)
