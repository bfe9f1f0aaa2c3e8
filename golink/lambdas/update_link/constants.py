# Logging event codes
MISSING_SHORT = 'MISSING_SHORT'
MISSING_USER_ID = 'MISSING_USER_ID'
NOT_LINK_OWNER = 'NOT_LINK_OWNER'
EXPIRY_CLEARED = 'EXPIRY_CLEARED'
LINK_UPDATED = 'LINK_UPDATED'
