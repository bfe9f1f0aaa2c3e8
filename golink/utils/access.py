"""Access control rules for links

Functions:
    check_access(link, user_id) -> bool:
        True if the identity may resolve/read the link.
    can_modify(link, user_id, auth_enabled) -> bool:
        True if the identity may update or delete the link.

Example:
    >>> from golink.models import LinkModel
    >>> link = LinkModel(short='abc', url='https://x.com', created_by='u1', access_level='Restricted', allowed_users=('u2',))
    >>> check_access(link, 'u2')
    True
    >>> check_access(link, 'u3')
    False
"""

from golink.constants import AccessLevel
from golink.models import LinkModel


def check_access(link: LinkModel, user_id: str | None) -> bool:
    """Decide whether `user_id` may access `link`.

    Rules (in order of precedence):
        - Public: anyone, including anonymous callers.
        - Private: the owner only.
        - Restricted: the owner or any identity in `allowed_users` (exact match).
        - Anything else: nobody.
    """
    match link.access_level:
        case AccessLevel.PUBLIC:
            return True
        case AccessLevel.PRIVATE:
            return user_id == link.created_by
        case AccessLevel.RESTRICTED:
            return user_id == link.created_by or user_id in link.allowed_users
        case _:  # pragma: no cover
            return False


def can_modify(link: LinkModel, user_id: str | None, *, auth_enabled: bool) -> bool:
    """Only the owner may update or delete a link, unless auth is globally disabled."""
    if not auth_enabled:
        return True
    return user_id == link.created_by
