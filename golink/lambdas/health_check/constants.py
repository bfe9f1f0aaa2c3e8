HEALTHY = 'healthy'
UNHEALTHY = 'unhealthy'

# Logging event codes
HEALTH_CHECK_PASSED = 'HEALTH_CHECK_PASSED'
HEALTH_CHECK_FAILED = 'HEALTH_CHECK_FAILED'
