# auth_strategies/constants.py

# Purpose string for the data protector; keeps these tokens apart from any
# other use of the same key material.
PASSWORDLESS_AUTH_PURPOSE = "passfree-passwordless-auth"

# Identity returned on every non-successful validation
NULL_USER = "null@example.com"

# Redis key prefix for redeemed login attempts (single-use mode only)
REDEEMED_LINK_PREFIX = "passfree:redeemed:"

# Query parameter carrying the auth token in the emailed link
AUTH_TOKEN_QUERY_PARAM = "token"

# Error codes appended to the redirect target; never the validation reason
ERROR_INVALID_EMAIL = "invalid_email"
ERROR_LOGIN_FAILED = "login_failed"
