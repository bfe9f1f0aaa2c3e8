"""Link expiry evaluation

Functions:
    is_expired(link, now) -> bool:
        True once `now` is past the link's expiry moment.
    expiry_status(link, now) -> tuple[bool, str]:
        Badge flag and reason ('expired', 'expiring_today', 'expiring_soon' or '').
"""

from datetime import datetime, timedelta, UTC

from golink.constants import ExpiryReason, EXPIRING_SOON_DAYS
from golink.models import LinkModel


ONE_DAY = timedelta(days=1)


def is_expired(link: LinkModel, now: datetime | None = None) -> bool:
    if link.expires_at is None:
        return False
    now = now or datetime.now(UTC)
    return now > link.expires_at


def expiry_status(link: LinkModel, now: datetime | None = None) -> tuple[bool, str]:
    """Classify a link for expiry badges.

    The sticky `is_expired` flag wins over the timestamp, so a link stays
    "expired" until its expiry is explicitly cleared.

    Example:
        >>> link = LinkModel(short='abc', url='https://x.com', expires_at=now + timedelta(days=3))
        >>> expiry_status(link, now)
        (True, 'expiring_soon')
    """
    if link.expires_at is None:
        return False, ExpiryReason.NONE.value
    if link.is_expired:
        return True, ExpiryReason.EXPIRED.value

    now = now or datetime.now(UTC)
    days_until_expiry = (link.expires_at - now) / ONE_DAY

    if days_until_expiry < 0:
        return True, ExpiryReason.EXPIRED.value
    if days_until_expiry < 1:
        return True, ExpiryReason.EXPIRING_TODAY.value
    if days_until_expiry < EXPIRING_SOON_DAYS:
        return True, ExpiryReason.EXPIRING_SOON.value
    return False, ExpiryReason.NONE.value
