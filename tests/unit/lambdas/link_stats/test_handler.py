import json
from datetime import datetime, timedelta, UTC

import pytest
from freezegun import freeze_time
from pytest import MonkeyPatch

from golink.constants import AccessLevel
from golink.models import LinkModel, LinkStatsModel
from golink.dao.memory import LinkMemoryDAO
from golink.lambdas.link_stats import app
from golink.utils.config import Settings


NOW = datetime(2025, 10, 15, 12, 0, tzinfo=UTC)


class TestAnalytics:
    def test_active_link(self) -> None:
        link = LinkModel(short='docs', url='https://example.com', click_count=30, created_at=NOW - timedelta(days=10))

        body = app.analytics(link, LinkStatsModel(short='docs'), NOW)

        assert body['link_id'] == 'docs'
        assert body['age_days'] == 10
        assert body['avg_clicks_per_day'] == 3
        assert body['is_expired'] is False
        assert 'expires_at' not in body
        assert body['stats']['total_clicks'] == 0

    def test_expired_link_average_uses_active_lifetime(self) -> None:
        link = LinkModel(
            short='docs',
            url='https://example.com',
            click_count=20,
            created_at=NOW - timedelta(days=10),
            expires_at=NOW - timedelta(days=6),
        )

        body = app.analytics(link, LinkStatsModel(short='docs'), NOW)

        assert body['is_expired'] is True
        assert body['age_days'] == 10
        assert body['avg_clicks_per_day'] == 5
        assert body['expiry_status'] == {'flagged': True, 'reason': 'expired'}
        assert body['expires_at'] == '2025-10-09T12:00:00+00:00'

    def test_link_created_just_now_has_no_average(self) -> None:
        link = LinkModel(short='docs', url='https://example.com', created_at=NOW)
        assert 'avg_clicks_per_day' not in app.analytics(link, LinkStatsModel(short='docs'), NOW)


class TestLinkStatsHandler:
    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch, context, settings: Settings, link_dao: LinkMemoryDAO, api_event) -> None:
        monkeypatch.setattr(app, 'load_settings', lambda *a, **kw: settings)
        monkeypatch.setattr(app, 'build_link_dao', lambda *a, **kw: link_dao)

        self.context = context
        self.link_dao = link_dao
        self.api_event = api_event

    def stats(self, short: str, user_id: str | None = 'u1'):
        response = app.lambda_handler(self.api_event(short=short, user_id=user_id), self.context)
        return response, json.loads(response['body'])

    def test_lambda_handler(self) -> None:
        with freeze_time('2025-10-05 12:00:00'):
            self.link_dao.create(LinkModel(short='docs', url='https://example.com/docs', created_by='u1'))
            self.link_dao.increment_click_count('docs')
            self.link_dao.record_click('docs', country='BG', browser='Firefox')

        with freeze_time('2025-10-15 12:00:00'):
            response, body = self.stats('docs')

        assert response['statusCode'] == 200
        assert body['short'] == 'docs'
        assert body['url'] == 'https://example.com/docs'
        assert body['click_count'] == 1
        assert body['access_level'] == 'Public'
        assert body['created_at'] == '2025-10-05T12:00:00+00:00'
        assert body['age_days'] == 10
        assert body['avg_clicks_per_day'] == 0.1
        assert body['stats']['countries'] == {'BG': 1}
        assert body['stats']['clicks_by_date'] == {'2025-10-05': 1}

    def test_access_denied(self) -> None:
        self.link_dao.create(LinkModel(short='secret', url='https://example.com', created_by='u1', access_level=AccessLevel.PRIVATE))

        response, body = self.stats('secret', user_id='u2')

        assert response['statusCode'] == 403
        assert body['error_code'] == 'FORBIDDEN'

    def test_not_found(self) -> None:
        response, _ = self.stats('missing')
        assert response['statusCode'] == 404
