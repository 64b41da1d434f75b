import pytest

from animetrack.statuses import normalize_status, Recognized, Unrecognized, STATUS_KEYS


@pytest.mark.parametrize('raw, key', [
    ('watching', 'watching'),
    ('  Watching ', 'watching'),
    ('Currently Airing', 'watching'),
    ('Смотрю', 'watching'),
    ('смотрю', 'watching'),
    ('Plan to Watch', 'planned'),
    ('В планах', 'planned'),
    ('finished', 'completed'),
    ('Завершено', 'completed'),
    ('Просмотрено', 'completed'),
    ('DROPPED', 'dropped'),
    ('Брошено', 'dropped'),
])
def test_known_labels(raw, key):
    assert normalize_status(raw) == Recognized(key)


@pytest.mark.parametrize('raw', ['', '   ', 'on hold', 'rewatching', None, 42])
def test_unknown_labels_keep_raw_value(raw):
    result = normalize_status(raw)
    assert isinstance(result, Unrecognized)
    assert result.raw_value == raw


def test_every_key_maps_to_itself():
    for key in STATUS_KEYS:
        assert normalize_status(key) == Recognized(key)
