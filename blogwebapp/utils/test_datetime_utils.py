# blogwebapp/utils/test_datetime_utils.py
"""
Date/time helper tests.

Run: python -m pytest blogwebapp/utils/test_datetime_utils.py -v
"""

import pytest
from datetime import datetime, date, timezone, timedelta
from blogwebapp.utils.datetime_utils import DateTimeUtils


def test_now_is_utc_aware():
    assert DateTimeUtils.now().tzinfo == timezone.utc


def test_for_firestore():
    """Nested date/datetime values become UTC datetimes"""
    test_data = {
        'published_on': date(2024, 1, 15),
        'timestamp': datetime(2024, 1, 15, 10, 30),
        'nested': {
            'edited_on': date(2023, 12, 25)
        },
        'list_data': [
            {'created_at': datetime(2024, 1, 1)}
        ],
        'title': 'untouched',
    }

    converted = DateTimeUtils.for_firestore(test_data)

    assert isinstance(converted['published_on'], datetime)
    assert isinstance(converted['nested']['edited_on'], datetime)
    assert isinstance(converted['list_data'][0]['created_at'], datetime)
    assert converted['published_on'].tzinfo == timezone.utc
    assert converted['timestamp'].tzinfo == timezone.utc
    assert converted['title'] == 'untouched'


def test_is_expired():
    reference = datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)

    assert DateTimeUtils.is_expired(reference - timedelta(seconds=1), reference)
    assert DateTimeUtils.is_expired(reference, reference)
    assert not DateTimeUtils.is_expired(reference + timedelta(minutes=15), reference)
    # naive values are read as UTC
    assert not DateTimeUtils.is_expired(datetime(2024, 1, 15, 10, 45), reference)
    assert DateTimeUtils.is_expired(None, reference)


def test_in_minutes():
    before = DateTimeUtils.now()
    expires = DateTimeUtils.in_minutes(15)
    assert timedelta(minutes=14) < expires - before <= timedelta(minutes=15, seconds=5)

