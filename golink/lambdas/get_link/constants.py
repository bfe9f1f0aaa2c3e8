# Logging event codes
MISSING_SHORT = 'MISSING_SHORT'
ACCESS_DENIED = 'ACCESS_DENIED'
LINK_RETRIEVED = 'LINK_RETRIEVED'
