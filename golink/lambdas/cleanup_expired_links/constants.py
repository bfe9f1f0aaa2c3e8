SUCCESS = 'success'
ERROR = 'error'

# Logging event codes
CLEANUP_CANDIDATE = 'CLEANUP_CANDIDATE'
CLEANUP_DELETE_FAILED = 'CLEANUP_DELETE_FAILED'
CLEANUP_FINISHED = 'CLEANUP_FINISHED'
CLEANUP_FAILED = 'CLEANUP_FAILED'
CLEANUP_DEADLINE_EXCEEDED = 'CLEANUP_DEADLINE_EXCEEDED'
