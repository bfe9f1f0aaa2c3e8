# Logging event codes
MISSING_USER_ID = 'MISSING_USER_ID'
EXPIRED_LINK_DELETED = 'EXPIRED_LINK_DELETED'
EXPIRED_LINKS_DELETED = 'EXPIRED_LINKS_DELETED'
