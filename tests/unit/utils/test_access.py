"""Unit tests for the access rules in access.py."""

import pytest

from golink.constants import AccessLevel
from golink.models import LinkModel
from golink.utils.access import can_modify, check_access


OWNER = 'owner'
GUEST = 'guest'
STRANGER = 'stranger'


def make_link(access_level: AccessLevel) -> LinkModel:
    return LinkModel(
        short='docs',
        url='https://example.com/docs',
        created_by=OWNER,
        access_level=access_level,
        allowed_users=(GUEST,),
    )


@pytest.mark.parametrize(
    'access_level, user_id, expected',
    [
        (AccessLevel.PUBLIC, OWNER, True),
        (AccessLevel.PUBLIC, GUEST, True),
        (AccessLevel.PUBLIC, STRANGER, True),
        (AccessLevel.PUBLIC, 'anonymous', True),
        (AccessLevel.PUBLIC, '', True),
        (AccessLevel.PUBLIC, None, True),
        (AccessLevel.PRIVATE, OWNER, True),
        (AccessLevel.PRIVATE, GUEST, False),
        (AccessLevel.PRIVATE, STRANGER, False),
        (AccessLevel.PRIVATE, 'anonymous', False),
        (AccessLevel.PRIVATE, None, False),
        (AccessLevel.RESTRICTED, OWNER, True),
        (AccessLevel.RESTRICTED, GUEST, True),
        (AccessLevel.RESTRICTED, STRANGER, False),
        (AccessLevel.RESTRICTED, 'GUEST', False),
        (AccessLevel.RESTRICTED, 'anonymous', False),
        (AccessLevel.RESTRICTED, None, False),
    ],
)
def test_check_access(access_level: AccessLevel, user_id: str | None, expected: bool) -> None:
    assert check_access(make_link(access_level), user_id) is expected


def test_check_access_is_deterministic() -> None:
    link = make_link(AccessLevel.RESTRICTED)
    assert [check_access(link, GUEST) for _ in range(3)] == [True, True, True]


@pytest.mark.parametrize(
    'user_id, auth_enabled, expected',
    [
        (OWNER, True, True),
        (GUEST, True, False),
        ('anonymous', True, False),
        (OWNER, False, True),
        (STRANGER, False, True),
        ('anonymous', False, True),
    ],
)
def test_can_modify(user_id: str, auth_enabled: bool, expected: bool) -> None:
    assert can_modify(make_link(AccessLevel.PUBLIC), user_id, auth_enabled=auth_enabled) is expected
