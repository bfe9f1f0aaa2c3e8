# Logging event codes
INVALID_LIMIT = 'INVALID_LIMIT'
TOP_LINKS_RETRIEVED = 'TOP_LINKS_RETRIEVED'
