from dataclasses import dataclass, replace
from datetime import datetime, UTC
from typing import Any, Optional

from golink.constants import AccessLevel, ANONYMOUS_USER, SHORT_CODE_PATTERN
from golink.exceptions import InvalidLinkError
from golink.types import LinkDocument


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value in (None, ''):
        return None
    if isinstance(value, datetime):
        return _as_utc(value)
    return _as_utc(datetime.fromisoformat(value))


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return None if value is None else value.isoformat()


@dataclass(frozen=True)
class LinkModel:
    """Represent a short link and its access, click and expiry state.

    Attributes:
        short (str):
            Unique, immutable short code. Doubles as the link's id.
        url (str):
            Redirect target.
        created_by (str):
            Identity of the owner ('anonymous' when auth is disabled).
        access_level (AccessLevel):
            Public, Private or Restricted. Plain strings are coerced.
        allowed_users (tuple[str, ...]):
            Identities allowed to resolve a Restricted link, in insertion order.
            Always empty for Public and Private links.
        click_count (int):
            Number of successful redirects. Never negative.
        created_at (Optional[datetime]):
            Assigned by the repository on creation.
        updated_at (Optional[datetime]):
            Refreshed by the repository on every mutation.
        expires_at (Optional[datetime]):
            Moment after which the link no longer redirects. None means never.
        is_expired (bool):
            Sticky flag persisted the first time a read observes expiry.

    Raises:
        InvalidLinkError:
            If the short code, URL, access level or click count are invalid.

    Example:
        >>> link = LinkModel(short='docs', url='https://example.com/docs', created_by='u1')
        >>> link.access_level
        <AccessLevel.PUBLIC: 'Public'>
        >>> link.id
        'docs'
        >>> LinkModel(short='bad code', url='https://example.com')
        Traceback (most recent call last):
            ...
        golink.exceptions.InvalidLinkError: Short code 'bad code' may only contain letters, digits and '-'.
    """

    short: str
    url: str
    created_by: str = ANONYMOUS_USER
    access_level: AccessLevel = AccessLevel.PUBLIC
    allowed_users: tuple[str, ...] = ()
    click_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_expired: bool = False

    def __post_init__(self):
        if not self.short:
            raise InvalidLinkError('Short code is required.')
        if not SHORT_CODE_PATTERN.match(self.short):
            raise InvalidLinkError(f"Short code '{self.short}' may only contain letters, digits and '-'.")
        if not self.url:
            raise InvalidLinkError('URL is required.')
        if self.click_count < 0:
            raise InvalidLinkError(f'Click count must not be negative (given: {self.click_count}).')

        try:
            access_level = AccessLevel(self.access_level)
        except ValueError as e:
            raise InvalidLinkError(f"Invalid access level '{self.access_level}'.") from e

        # NOTE: allowed users only carry meaning for Restricted links, so they are
        #       dropped for every other level. Duplicates are removed, keeping the
        #       first occurrence.
        if access_level is AccessLevel.RESTRICTED:
            allowed_users = tuple(dict.fromkeys(user for user in self.allowed_users if user))
        else:
            allowed_users = ()

        object.__setattr__(self, 'access_level', access_level)
        object.__setattr__(self, 'allowed_users', allowed_users)
        object.__setattr__(self, 'created_at', _as_utc(self.created_at))
        object.__setattr__(self, 'updated_at', _as_utc(self.updated_at))
        object.__setattr__(self, 'expires_at', _as_utc(self.expires_at))

    @property
    def id(self) -> str:
        return self.short

    def evolve(self, **changes) -> 'LinkModel':
        """Return a copy with the given fields changed (invariants are re-checked)."""
        return replace(self, **changes)

    def to_document(self) -> LinkDocument:
        """Serialize into the persisted document shape."""
        document = {
            'id': self.id,
            'short': self.short,
            'url': self.url,
            'created_by': self.created_by,
            'access_level': str(self.access_level),
            'allowed_users': list(self.allowed_users),
            'click_count': self.click_count,
            'created_at': _format_datetime(self.created_at),
            'updated_at': _format_datetime(self.updated_at),
            'is_expired': self.is_expired,
        }
        if self.expires_at is not None:
            document['expires_at'] = _format_datetime(self.expires_at)
        return document

    @classmethod
    def from_document(cls, document: LinkDocument) -> 'LinkModel':
        """Deserialize a persisted document.

        Raises:
            InvalidLinkError:
                If the document violates the link invariants.
            KeyError, ValueError:
                If the document is missing 'short'/'url' or holds malformed timestamps.
        """
        return cls(
            short=document['short'],
            url=document['url'],
            created_by=document.get('created_by') or ANONYMOUS_USER,
            access_level=document.get('access_level') or AccessLevel.PUBLIC,
            allowed_users=tuple(document.get('allowed_users') or ()),
            click_count=int(document.get('click_count') or 0),
            created_at=_parse_datetime(document.get('created_at')),
            updated_at=_parse_datetime(document.get('updated_at')),
            expires_at=_parse_datetime(document.get('expires_at')),
            is_expired=bool(document.get('is_expired', False)),
        )
