import json
from dataclasses import replace
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from golink.constants import AccessLevel
from golink.models import LinkModel
from golink.dao.memory import LinkMemoryDAO
from golink.lambdas.redirect_link import app
from golink.utils.config import Settings


FIREFOX_ON_LINUX = 'Mozilla/5.0 (X11; Linux x86_64; rv:128.0) Gecko/20100101 Firefox/128.0'
EDGE_ON_WINDOWS = (
    'Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/126.0 Safari/537.36 Edg/126.0'
)
SAFARI_ON_IPHONE = 'Mozilla/5.0 (iPhone; CPU iPhone OS 17_5 like Mac OS X) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.5 Safari/604.1'


@pytest.mark.parametrize(
    'path, expected',
    [
        ('index.html', True),
        ('favicon.ico', True),
        ('static/app.js', True),
        ('assets/logo.png', True),
        ('docs', False),
        ('statics', False),
    ],
)
def test_is_reserved_path(path: str, expected: bool) -> None:
    assert app.is_reserved_path(path) is expected


@pytest.mark.parametrize(
    'headers, expected',
    [
        (
            {'User-Agent': FIREFOX_ON_LINUX, 'Referer': 'https://news.ycombinator.com/item?id=1', 'CloudFront-Viewer-Country': 'BG'},
            {'referrer': 'news.ycombinator.com', 'browser': 'Firefox', 'operating_system': 'Linux', 'country': 'BG', 'device_type': ''},
        ),
        (
            {'user-agent': EDGE_ON_WINDOWS, 'CloudFront-Is-Desktop-Viewer': 'true', 'CloudFront-Is-Mobile-Viewer': 'false'},
            {'referrer': '', 'browser': 'Edge', 'operating_system': 'Windows', 'country': '', 'device_type': 'desktop'},
        ),
        (
            {'User-Agent': SAFARI_ON_IPHONE, 'CloudFront-Is-Mobile-Viewer': 'true'},
            {'referrer': '', 'browser': 'Safari', 'operating_system': 'iOS', 'country': '', 'device_type': 'mobile'},
        ),
        (
            {},
            {'referrer': '', 'browser': '', 'operating_system': '', 'country': '', 'device_type': ''},
        ),
    ],
)
def test_click_dimensions(headers: dict, expected: dict) -> None:
    assert app.click_dimensions({'headers': headers}) == expected


class TestRedirectLinkHandler:
    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch, context, settings: Settings, link_dao: LinkMemoryDAO, api_event) -> None:
        monkeypatch.setattr(app, 'load_settings', lambda *a, **kw: settings)
        monkeypatch.setattr(app, 'build_link_dao', lambda *a, **kw: self.link_dao)

        link_dao.create(LinkModel(short='docs', url='https://example.com/docs', created_by='u1'))
        link_dao.create(LinkModel(short='private', url='https://example.com/private', created_by='u1', access_level=AccessLevel.PRIVATE))

        self.context = context
        self.link_dao = link_dao
        self.api_event = api_event

    def redirect(self, short: str | None, **kwargs):
        return app.lambda_handler(self.api_event(short=short, **kwargs), self.context)

    def test_lambda_handler(self) -> None:
        response = self.redirect('docs', headers={'User-Agent': FIREFOX_ON_LINUX, 'CloudFront-Viewer-Country': 'DE'})

        assert response == {'statusCode': 302, 'headers': {'Location': 'https://example.com/docs'}, 'body': ''}

        # Click tracking runs detached from the request
        assert app.task_runner.wait(timeout=5) is True
        assert self.link_dao.get_by_short('docs').click_count == 1
        stats = self.link_dao.get_link_stats('docs')
        assert stats.total_clicks == 1
        assert stats.browsers == {'Firefox': 1}
        assert stats.countries == {'DE': 1}

    def test_anonymous_redirect_of_public_link(self) -> None:
        assert self.redirect('docs', user_id=None)['statusCode'] == 302

    def test_private_link_redirects_owner(self) -> None:
        response = self.redirect('private', user_id='u1')
        assert response['headers']['Location'] == 'https://example.com/private'

    @pytest.mark.parametrize('user_id', ['u2', None])
    def test_access_denied(self, user_id: str | None) -> None:
        response = self.redirect('private', user_id=user_id)

        assert response['statusCode'] == 403
        assert json.loads(response['body'])['error_code'] == 'FORBIDDEN'
        assert app.task_runner.wait(timeout=5) is True
        assert self.link_dao.get_by_short('private').click_count == 0

    def test_not_found(self) -> None:
        response = self.redirect('missing')

        assert response['statusCode'] == 404
        assert json.loads(response['body'])['error_code'] == 'NOT_FOUND'

    def test_missing_short(self) -> None:
        assert self.redirect(None)['statusCode'] == 400

    @pytest.mark.parametrize('path', ['index.html', 'favicon.ico', 'static/main.css'])
    def test_reserved_paths(self, monkeypatch: MonkeyPatch, path: str) -> None:
        mock_dao = MagicMock()
        monkeypatch.setattr(app, 'build_link_dao', lambda *a, **kw: mock_dao)

        response = self.redirect(path)

        assert response['statusCode'] == 404
        mock_dao.get_by_short.assert_not_called()

    def test_expired_link(self) -> None:
        self.link_dao.create(
            LinkModel(short='old', url='https://example.com/old', created_by='u1', expires_at=datetime.now(UTC) - timedelta(minutes=1))
        )

        response = self.redirect('old')

        assert response['statusCode'] == 410
        assert json.loads(response['body']) == {'message': 'Gone (link has expired)', 'error_code': 'GONE'}
        assert app.task_runner.wait(timeout=5) is True
        assert self.link_dao.get_by_short('old').click_count == 0

    def test_access_is_checked_before_expiry(self) -> None:
        self.link_dao.create(
            LinkModel(
                short='old-private',
                url='https://example.com/old',
                created_by='u1',
                access_level=AccessLevel.PRIVATE,
                expires_at=datetime.now(UTC) - timedelta(minutes=1),
            )
        )

        assert self.redirect('old-private', user_id='u2')['statusCode'] == 403
        assert self.redirect('old-private', user_id='u1')['statusCode'] == 410

    def test_click_tracking_failure_does_not_affect_redirect(self, monkeypatch: MonkeyPatch) -> None:
        monkeypatch.setattr(self.link_dao, 'increment_click_count', MagicMock(side_effect=RuntimeError('boom')))

        response = self.redirect('docs')

        assert response['statusCode'] == 302
        assert app.task_runner.wait(timeout=5) is True

    def test_click_tracking_uses_configured_timeout(self, monkeypatch: MonkeyPatch, settings: Settings) -> None:
        monkeypatch.setattr(app, 'load_settings', lambda *a, **kw: replace(settings, detached_task_timeout=1.5))
        deadlines = []
        monkeypatch.setattr(app, 'track_click', lambda *args, deadline: deadlines.append(deadline))

        assert self.redirect('docs')['statusCode'] == 302
        assert app.task_runner.wait(timeout=5) is True
        assert [deadline.timeout for deadline in deadlines] == [1.5]
