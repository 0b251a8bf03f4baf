from datetime import timedelta

from config import ApplicationConfig

SESSION_DURATION = timedelta(hours=ApplicationConfig.SESSION_DURATION_HOURS)
REMEMBER_ME_DURATION = timedelta(days=ApplicationConfig.REMEMBER_ME_DURATION_DAYS)
SESSION_TOUCH_THRESHOLD = timedelta(seconds=ApplicationConfig.SESSION_TOUCH_THRESHOLD_SECONDS)

EMAIL_VERIFICATION_TTL = timedelta(hours=ApplicationConfig.EMAIL_VERIFICATION_TOKEN_EXPIRY_HOURS)
PASSWORD_RESET_TTL = timedelta(hours=ApplicationConfig.PASSWORD_RESET_TOKEN_EXPIRY_HOURS)
INVITATION_TTL = timedelta(hours=ApplicationConfig.INVITATION_EXPIRY_HOURS)

MAX_FAILED_LOGIN_ATTEMPTS = ApplicationConfig.MAX_FAILED_LOGIN_ATTEMPTS
LOCKOUT_DURATION = timedelta(minutes=ApplicationConfig.LOCKOUT_DURATION_MINUTES)

FRONTEND_URL = ApplicationConfig.FRONTEND_URL.rstrip("/")
SUPPORT_EMAIL = ApplicationConfig.SUPPORT_EMAIL
