# Logging event codes
INVALID_ACCESS_LEVEL = 'INVALID_ACCESS_LEVEL'
LINKS_LISTED = 'LINKS_LISTED'
