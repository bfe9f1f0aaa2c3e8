# Logging event codes
MISSING_SHORT = 'MISSING_SHORT'
ACCESS_DENIED = 'ACCESS_DENIED'
STATS_RETRIEVED = 'STATS_RETRIEVED'
