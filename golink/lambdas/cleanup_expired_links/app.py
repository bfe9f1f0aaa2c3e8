import json
import logging
from datetime import datetime, timedelta, UTC

from golink.constants import Defaults
from golink.exceptions import BadRequestError, DeadlineExceededError, GolinkError
from golink.models import LinkModel
from golink.types import LambdaEvent, LambdaContext, LambdaDiagnosticResponse
from golink.dao.exceptions import LinkNotFoundError
from golink.dao.factory import build_link_dao
from golink.utils.config import load_settings
from golink.utils.helpers import request_deadline
from golink.utils.tasks import DetachedTaskRunner
from golink.lambdas.cleanup_expired_links.constants import (
    SUCCESS,
    ERROR,
    CLEANUP_CANDIDATE,
    CLEANUP_DEADLINE_EXCEEDED,
    CLEANUP_DELETE_FAILED,
    CLEANUP_FAILED,
    CLEANUP_FINISHED,
)


logger = logging.getLogger(__name__)

task_runner = DetachedTaskRunner()


def sweep_options(event: LambdaEvent) -> tuple[int, bool]:
    """Read 'older_than_days' and 'dry_run' from the scheduled event.

    Raises:
        BadRequestError:
            If 'older_than_days' is not a non-negative integer.
    """
    event = event or {}
    older_than_days = event.get('older_than_days', Defaults.CLEANUP_OLDER_THAN_DAYS)
    if isinstance(older_than_days, bool):
        raise BadRequestError("'older_than_days' must be a non-negative integer")
    try:
        older_than_days = int(older_than_days)
    except (TypeError, ValueError) as e:
        raise BadRequestError("'older_than_days' must be a non-negative integer") from e
    if older_than_days < 0:
        raise BadRequestError("'older_than_days' must be a non-negative integer")

    dry_run = event.get('dry_run', False)
    if isinstance(dry_run, str):
        dry_run = dry_run.strip().lower() in ('1', 'true', 'yes')
    return older_than_days, bool(dry_run)


def cleanup_candidates(links: list[LinkModel], cutoff: datetime) -> list[LinkModel]:
    """Expired links whose expiry moment lies strictly before the cutoff."""
    return [link for link in links if link.expires_at is not None and link.expires_at < cutoff]


def response_success(
    *,
    processed: int,
    expired: int,
    deleted: list[str],
    failed: list[str],
    skipped: list[str],
    dry_run: bool,
) -> LambdaDiagnosticResponse:
    verb = 'Would delete' if dry_run else 'Deleted'
    return json.dumps(
        {
            'status': SUCCESS,
            'processed': processed,
            'expired': expired,
            'deleted': len(deleted),
            'failed': len(failed),
            'skipped': len(skipped),
            'dry_run': dry_run,
            'shorts': deleted,
            'message': f'{verb} {len(deleted)} expired link(s)',
        }
    )


def response_error(*, error: GolinkError | Exception) -> LambdaDiagnosticResponse:
    return json.dumps(
        {
            'status': ERROR,
            'message': 'Failed to clean up expired links',
            'reason': str(error),
            'error': error.__class__.__name__,
        }
    )


def lambda_handler(event: LambdaEvent, context: LambdaContext) -> LambdaDiagnosticResponse:
    """Delete links that expired more than 'older_than_days' days ago

    Triggered by an EventBridge schedule. A per-link delete failure is logged
    and counted, it never aborts the sweep. When the deadline fires, the sweep
    stops and the links it did not reach are reported as skipped.

    Event payload (all optional):
        older_than_days: grace period after expiry (default 30)
        dry_run: report candidates without deleting them (default false)

    Diagnostic responses:
        success:
            status: success
            processed: <number of expired links inspected>
            expired: <number of links past the cutoff>
            deleted: <number deleted (or that would be deleted on a dry run)>
            failed: <number of failed deletes>
            skipped: <number of links left for the next run (deadline exceeded)>
            dry_run: <bool>
            shorts: <deleted short codes>
        error:
            status: error
            message: Failed to clean up expired links
            reason: <reason>
            error: <error class name> (e.g. DataStoreError, AppConfigError)
    """
    try:
        older_than_days, dry_run = sweep_options(event)
        settings = load_settings('cleanup_expired_links')
        deadline = request_deadline(context, settings.request_timeout)
        link_dao = build_link_dao(settings, task_runner)
        expired_links = link_dao.get_expired_links(deadline=deadline)
    except GolinkError as error:
        logger.exception(
            'Failed to clean up expired links.',
            extra={'event': CLEANUP_FAILED, 'reason': str(error), 'error': error.__class__.__name__},
        )
        return response_error(error=error)

    cutoff = datetime.now(UTC) - timedelta(days=older_than_days)
    candidates = cleanup_candidates(expired_links, cutoff)

    deleted, failed, skipped = [], [], []
    for index, link in enumerate(candidates):
        logger.info(
            'Expired link selected for cleanup.',
            extra={'short': link.short, 'expires_at': link.expires_at, 'dry_run': dry_run, 'event': CLEANUP_CANDIDATE},
        )
        if dry_run:
            deleted.append(link.short)
            continue
        try:
            link_dao.delete(link.short, deadline=deadline)
        except LinkNotFoundError:
            # Deleted concurrently
            continue
        except DeadlineExceededError:
            skipped = [remaining.short for remaining in candidates[index:]]
            logger.warning(
                'Deadline exceeded during cleanup. Leaving the remaining links for the next run.',
                extra={'skipped': len(skipped), 'event': CLEANUP_DEADLINE_EXCEEDED},
            )
            break
        except GolinkError as error:
            logger.warning(
                'Failed to delete expired link.',
                extra={'short': link.short, 'reason': str(error), 'event': CLEANUP_DELETE_FAILED},
            )
            failed.append(link.short)
            continue
        deleted.append(link.short)

    logger.info(
        'Expired links cleanup finished.',
        extra={
            'processed': len(expired_links),
            'expired': len(candidates),
            'deleted': len(deleted),
            'failed': len(failed),
            'skipped': len(skipped),
            'dry_run': dry_run,
            'event': CLEANUP_FINISHED,
        },
    )
    return response_success(
        processed=len(expired_links),
        expired=len(candidates),
        deleted=deleted,
        failed=failed,
        skipped=skipped,
        dry_run=dry_run,
    )
