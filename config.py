import os
import yaml

ROOT_PATH = os.path.dirname(__file__)
CONFIG_FILE_PATH = os.path.join(ROOT_PATH, "env.yaml")

if os.path.exists(CONFIG_FILE_PATH):
    with open(CONFIG_FILE_PATH, "r") as r_file:
        data = yaml.safe_load(r_file) or dict()
else:
    data = dict()


class ApplicationConfig:
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./crm_auth.db")
    AUTO_CREATE_SCHEMA = bool(data.get("AUTO_CREATE_SCHEMA", True))
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENVIRONMENT = data.get("ENVIRONMENT", "development")
    FRONTEND_URL = data.get("FRONTEND_URL", "http://localhost:5173")
    SUPPORT_EMAIL = data.get("SUPPORT_EMAIL", "support@example.com")

    # Sessions
    SESSION_COOKIE_NAME = data.get("SESSION_COOKIE_NAME", "sid")
    SESSION_COOKIE_SAMESITE = data.get("SESSION_COOKIE_SAMESITE", "lax")
    SESSION_DURATION_HOURS = data.get("SESSION_DURATION_HOURS", 24)
    REMEMBER_ME_DURATION_DAYS = data.get("REMEMBER_ME_DURATION_DAYS", 30)
    SESSION_TOUCH_THRESHOLD_SECONDS = data.get("SESSION_TOUCH_THRESHOLD_SECONDS", 300)

    # Single-use tokens
    EMAIL_VERIFICATION_TOKEN_EXPIRY_HOURS = data.get("EMAIL_VERIFICATION_TOKEN_EXPIRY_HOURS", 24)
    PASSWORD_RESET_TOKEN_EXPIRY_HOURS = data.get("PASSWORD_RESET_TOKEN_EXPIRY_HOURS", 1)
    INVITATION_EXPIRY_HOURS = data.get("INVITATION_EXPIRY_HOURS", 48)

    # Login lockout
    MAX_FAILED_LOGIN_ATTEMPTS = data.get("MAX_FAILED_LOGIN_ATTEMPTS", 5)
    LOCKOUT_DURATION_MINUTES = data.get("LOCKOUT_DURATION_MINUTES", 15)

    BCRYPT_ROUNDS = data.get("BCRYPT_ROUNDS", 12)

    # Padding for negative branches of token and account lookups
    TIMING_SAFE_DELAY_MS = data.get("TIMING_SAFE_DELAY_MS", 100)
    TIMING_SAFE_JITTER_MS = data.get("TIMING_SAFE_JITTER_MS", 50)
