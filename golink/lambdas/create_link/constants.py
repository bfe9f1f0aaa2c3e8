# Logging event codes
MISSING_USER_ID = 'MISSING_USER_ID'
DEFAULT_URL_APPLIED = 'DEFAULT_URL_APPLIED'
LINK_CREATED = 'LINK_CREATED'
