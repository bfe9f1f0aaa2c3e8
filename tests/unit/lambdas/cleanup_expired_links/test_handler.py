import json
from datetime import datetime, timedelta, UTC
from unittest.mock import MagicMock

import pytest
from pytest import MonkeyPatch

from golink.exceptions import BadRequestError, DeadlineExceededError
from golink.models import LinkModel
from golink.dao.exceptions import DataStoreError
from golink.dao.memory import LinkMemoryDAO
from golink.lambdas.cleanup_expired_links import app
from golink.utils.config import Settings


@pytest.mark.parametrize(
    'event, expected',
    [
        ({}, (30, False)),
        (None, (30, False)),
        ({'older_than_days': 7, 'dry_run': True}, (7, True)),
        ({'older_than_days': '0', 'dry_run': 'true'}, (0, True)),
        ({'dry_run': 'no'}, (30, False)),
    ],
)
def test_sweep_options(event, expected) -> None:
    assert app.sweep_options(event) == expected


@pytest.mark.parametrize('older_than_days', [-1, 'soon', True, None])
def test_invalid_sweep_options(older_than_days) -> None:
    with pytest.raises(BadRequestError):
        app.sweep_options({'older_than_days': older_than_days})


def test_cleanup_candidates_excludes_links_expiring_at_the_cutoff() -> None:
    cutoff = datetime(2025, 10, 15, tzinfo=UTC)
    links = [
        LinkModel(short='before', url='https://example.com/1', expires_at=cutoff - timedelta(seconds=1)),
        LinkModel(short='at', url='https://example.com/2', expires_at=cutoff),
        LinkModel(short='forever', url='https://example.com/3'),
    ]

    assert [link.short for link in app.cleanup_candidates(links, cutoff)] == ['before']


class TestCleanupExpiredLinksHandler:
    @pytest.fixture(autouse=True)
    def setup(self, monkeypatch: MonkeyPatch, context, settings: Settings, link_dao: LinkMemoryDAO) -> None:
        monkeypatch.setattr(app, 'load_settings', lambda *a, **kw: settings)
        monkeypatch.setattr(app, 'build_link_dao', lambda *a, **kw: self.link_dao)

        now = datetime.now(UTC)
        # fmt: off
        link_dao.create(LinkModel(short='ancient', url='https://example.com/1', expires_at=now - timedelta(days=90)))
        link_dao.create(LinkModel(short='old', url='https://example.com/2', expires_at=now - timedelta(days=31)))
        link_dao.create(LinkModel(short='recent', url='https://example.com/3', expires_at=now - timedelta(days=2)))
        link_dao.create(LinkModel(short='active', url='https://example.com/4', expires_at=now + timedelta(days=2)))
        link_dao.create(LinkModel(short='forever', url='https://example.com/5'))
        # fmt: on

        self.context = context
        self.link_dao = link_dao

    def remaining(self) -> list[str]:
        return [link.short for link in self.link_dao.get_all()]

    def test_lambda_handler(self) -> None:
        result = json.loads(app.lambda_handler({}, self.context))

        assert result['status'] == 'success'
        assert result['processed'] == 3
        assert result['expired'] == 2
        assert result['deleted'] == 2
        assert result['failed'] == 0
        assert result['skipped'] == 0
        assert result['dry_run'] is False
        assert result['shorts'] == ['ancient', 'old']
        assert self.remaining() == ['active', 'forever', 'recent']

    def test_custom_cutoff(self) -> None:
        result = json.loads(app.lambda_handler({'older_than_days': 1}, self.context))

        assert result['deleted'] == 3
        assert self.remaining() == ['active', 'forever']

    def test_dry_run(self) -> None:
        result = json.loads(app.lambda_handler({'dry_run': True}, self.context))

        assert result['shorts'] == ['ancient', 'old']
        assert result['message'] == 'Would delete 2 expired link(s)'
        assert len(self.remaining()) == 5

    def test_delete_failure_does_not_abort_sweep(self, monkeypatch: MonkeyPatch) -> None:
        delete = self.link_dao.delete

        def flaky_delete(short, *, deadline=None):
            if short == 'ancient':
                raise DataStoreError('redis hiccup')
            delete(short, deadline=deadline)

        monkeypatch.setattr(self.link_dao, 'delete', flaky_delete)

        result = json.loads(app.lambda_handler({}, self.context))

        assert result['deleted'] == 1
        assert result['failed'] == 1
        assert result['shorts'] == ['old']
        assert 'ancient' in self.remaining()

    def test_data_store_unreachable(self, monkeypatch: MonkeyPatch) -> None:
        monkeypatch.setattr(app, 'build_link_dao', MagicMock(side_effect=DataStoreError("Can't connect to Redis.")))

        result = json.loads(app.lambda_handler({}, self.context))

        assert result['status'] == 'error'
        assert result['error'] == 'DataStoreError'

    def test_invalid_event(self) -> None:
        result = json.loads(app.lambda_handler({'older_than_days': 'soon'}, self.context))

        assert result['status'] == 'error'
        assert result['error'] == 'BadRequestError'

    def test_deadline_stops_sweep_with_partial_report(self, monkeypatch: MonkeyPatch) -> None:
        delete = self.link_dao.delete

        def slow_delete(short, *, deadline=None):
            if short == 'old':
                raise DeadlineExceededError('Deadline of 10.0s exceeded.')
            delete(short, deadline=deadline)

        monkeypatch.setattr(self.link_dao, 'delete', slow_delete)

        result = json.loads(app.lambda_handler({}, self.context))

        assert result['status'] == 'success'
        assert result['deleted'] == 1
        assert result['failed'] == 0
        assert result['skipped'] == 1
        assert result['shorts'] == ['ancient']
        assert 'old' in self.remaining()
