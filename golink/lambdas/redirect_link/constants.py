# Logging event codes
MISSING_SHORT = 'MISSING_SHORT'
RESERVED_PATH = 'RESERVED_PATH'
ACCESS_DENIED = 'ACCESS_DENIED'
LINK_EXPIRED = 'LINK_EXPIRED'
REDIRECT_SUCCESS = 'REDIRECT_SUCCESS'
CLICK_TRACKED = 'CLICK_TRACKED'

# Request headers carrying click dimensions
REFERER_HEADER = 'Referer'
USER_AGENT_HEADER = 'User-Agent'
COUNTRY_HEADER = 'CloudFront-Viewer-Country'
DEVICE_HEADERS = (
    ('CloudFront-Is-Mobile-Viewer', 'mobile'),
    ('CloudFront-Is-Tablet-Viewer', 'tablet'),
    ('CloudFront-Is-SmartTV-Viewer', 'smart-tv'),
    ('CloudFront-Is-Desktop-Viewer', 'desktop'),
)

# User-Agent substrings, checked in order (Edge and Opera also advertise Chrome, Chrome advertises Safari)
BROWSER_TOKENS = (
    ('Edg/', 'Edge'),
    ('OPR/', 'Opera'),
    ('Firefox/', 'Firefox'),
    ('Chrome/', 'Chrome'),
    ('Safari/', 'Safari'),
    ('curl/', 'curl'),
)
OPERATING_SYSTEM_TOKENS = (
    ('Android', 'Android'),
    ('iPhone', 'iOS'),
    ('iPad', 'iOS'),
    ('Windows', 'Windows'),
    ('Mac OS X', 'macOS'),
    ('Linux', 'Linux'),
)
