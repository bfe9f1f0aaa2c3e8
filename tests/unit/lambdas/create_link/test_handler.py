import json
from dataclasses import replace
from unittest.mock import MagicMock

import pytest
from freezegun import freeze_time
from pytest import MonkeyPatch

from golink.constants import AccessLevel
from golink.dao.exceptions import DataStoreError
from golink.dao.memory import LinkMemoryDAO
from golink.lambdas.create_link import app
from golink.utils.config import Settings


class TestCreateLinkHandler:
    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch, context, settings: Settings, link_dao: LinkMemoryDAO, api_event) -> None:
        # Patch Lambda dependencies
        monkeypatch.setattr(app, 'load_settings', lambda *a, **kw: self.settings)
        monkeypatch.setattr(app, 'build_link_dao', lambda *a, **kw: self.link_dao)

        self.context = context
        self.settings = settings
        self.link_dao = link_dao
        self.api_event = api_event

    def create(self, body, **kwargs):
        response = app.lambda_handler(self.api_event(body=body, method='POST', **kwargs), self.context)
        return response, json.loads(response['body'])

    @freeze_time('2025-10-15 12:00:00')
    def test_lambda_handler(self) -> None:
        response, body = self.create(
            {
                'short': 'team',
                'url': 'https://example.com/team',
                'access_level': 'Restricted',
                'allowed_users': ['u2', 'u2', 'u3'],
                'expires_at': '2025-10-18T12:00:00Z',
            }
        )

        assert response['statusCode'] == 201
        assert body['short'] == 'team'
        assert body['url'] == 'https://example.com/team'
        assert body['created_by'] == 'u1'
        assert body['access_level'] == 'Restricted'
        assert body['allowed_users'] == ['u2', 'u3']
        assert body['click_count'] == 0
        assert body['created_at'] == '2025-10-15T12:00:00+00:00'
        assert body['expires_at'] == '2025-10-18T12:00:00+00:00'
        assert body['expiry_status'] == {'flagged': True, 'reason': 'expiring_soon'}
        assert body['short_url'] == 'https://go.example.com/team'

        # Assert Lambda persisted the link
        assert self.link_dao.get_by_short('team').access_level is AccessLevel.RESTRICTED

    def test_defaults_to_public_link(self) -> None:
        response, body = self.create({'short': 'docs', 'url': 'https://example.com/docs'})

        assert response['statusCode'] == 201
        assert body['access_level'] == 'Public'
        assert body['allowed_users'] == []
        assert 'expires_at' not in body
        assert body['expiry_status'] == {'flagged': False, 'reason': ''}

    def test_allowed_users_ignored_unless_restricted(self) -> None:
        _, body = self.create({'short': 'docs', 'url': 'https://example.com', 'access_level': 'Private', 'allowed_users': ['u2']})
        assert body['allowed_users'] == []

    def test_existing_short_code(self) -> None:
        self.create({'short': 'docs', 'url': 'https://example.com/first'})

        response, body = self.create({'short': 'docs', 'url': 'https://example.com/second'})

        assert response['statusCode'] == 409
        assert body['error_code'] == 'ALREADY_EXISTS'
        assert self.link_dao.get_by_short('docs').url == 'https://example.com/first'

    def test_unauthenticated_caller(self) -> None:
        response, body = self.create({'short': 'docs', 'url': 'https://example.com'}, user_id=None)

        assert response['statusCode'] == 401
        assert body == {'message': "Unauthorized (missing 'sub' in JWT claims)", 'error_code': 'UNAUTHORIZED'}

    def test_auth_disabled_trusts_user_header(self) -> None:
        self.settings = replace(self.settings, auth_enabled=False)

        response, body = self.create({'short': 'docs', 'url': 'https://example.com'}, user_id=None, headers={'X-User-ID': 'u9'})

        assert response['statusCode'] == 201
        assert body['created_by'] == 'u9'

    def test_auth_disabled_anonymous_caller(self) -> None:
        self.settings = replace(self.settings, auth_enabled=False)

        response, body = self.create({'short': 'docs', 'url': 'https://example.com'}, user_id=None)

        assert response['statusCode'] == 201
        assert body['created_by'] == 'anonymous'

    def test_default_url_fallback(self) -> None:
        self.settings = replace(self.settings, default_url='https://example.com/home')

        response, body = self.create({'short': 'home'})

        assert response['statusCode'] == 201
        assert body['url'] == 'https://example.com/home'

    @pytest.mark.parametrize(
        'request_body, message',
        [
            ('{"short": ', 'Bad Request (invalid JSON body)'),
            ({'url': 'https://example.com'}, "Bad Request (missing 'short' in JSON body)"),
            ({'short': 'docs'}, "Bad Request (missing 'url' in JSON body)"),
            ({'short': 'docs', 'url': ''}, "Bad Request (missing 'url' in JSON body)"),
            ({'short': 'no spaces', 'url': 'https://example.com'}, None),
            ({'short': 'docs', 'url': 'https://example.com', 'access_level': 'Secret'}, None),
            ({'short': 'docs', 'url': 'https://example.com', 'allowed_users': 'u2'}, None),
            ({'short': 'docs', 'url': 'https://example.com', 'expires_at': 'tomorrow'}, None),
            ({'short': 'docs', 'url': 'https://example.com', 'expires_at': '2000-01-01T00:00:00Z'}, None),
        ],
    )
    def test_bad_request(self, request_body, message) -> None:
        response, body = self.create(request_body)

        assert response['statusCode'] == 400
        assert body['error_code'] == 'BAD_REQUEST'
        if message is not None:
            assert body['message'] == message
        assert self.link_dao.get_all() == []

    def test_data_store_error(self, monkeypatch: MonkeyPatch) -> None:
        failing_dao = MagicMock()
        failing_dao.create.side_effect = DataStoreError("Can't connect to Redis at redis.test:6379/0.")
        monkeypatch.setattr(app, 'build_link_dao', lambda *a, **kw: failing_dao)

        response, body = self.create({'short': 'docs', 'url': 'https://example.com'})

        assert response['statusCode'] == 500
        assert body == {'message': 'Internal Server Error', 'error_code': 'INTERNAL_SERVER_ERROR'}

    def test_unexpected_error(self, monkeypatch: MonkeyPatch) -> None:
        monkeypatch.setattr(app, 'load_settings', MagicMock(side_effect=FileNotFoundError('Something goes wrong')))

        response, body = self.create({'short': 'docs', 'url': 'https://example.com'})

        assert response['statusCode'] == 500
        assert body['error_code'] == 'UNKNOWN_INTERNAL_SERVER_ERROR'
