import os
from dotenv import load_dotenv

# Load .env file
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


class Config:
    # --- MongoDB Settings ---
    MONGO_URI = os.getenv("MONGO_URI")
    DB_NAME = os.getenv("DB_NAME", "nutrimind")

    # --- Environment ---
    ENV = os.getenv("ENV", "development") # "development" or "production"
    FRONTEND_URL = os.getenv("FRONTEND_URL", "http://localhost:5173")

    # --- Security Settings ---
    # In production, ALWAYS set this in .env. Never use the fallback.
    SECRET_KEY = os.getenv("SECRET_KEY")
    if ENV == "production" and not SECRET_KEY:
        raise ValueError("SECRET_KEY environment variable is mandatory in production!")
    elif not SECRET_KEY:
        SECRET_KEY = "dev_secret_key_change_in_prod"
    ALGORITHM = "HS256"

    # --- Email Settings ---
    # "smtp" or "resend"
    EMAIL_PROVIDER = os.getenv("EMAIL_PROVIDER", "smtp").lower()
    MAIL_FROM = os.getenv("MAIL_FROM", "NutriMind <noreply@nutrimind.ai>")
    EMAIL_TIMEOUT_SECONDS = float(os.getenv("EMAIL_TIMEOUT_SECONDS", "10"))

    SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
    SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
    SMTP_USER = os.getenv("SMTP_USER")
    SMTP_PASS = os.getenv("SMTP_PASS")
    SMTP_USE_TLS = _env_bool("SMTP_USE_TLS", True)

    RESEND_API_KEY = os.getenv("RESEND_API_KEY")

    # --- Web Push (VAPID) ---
    VAPID_PUBLIC_KEY = os.getenv("VAPID_PUBLIC_KEY")
    VAPID_PRIVATE_KEY = os.getenv("VAPID_PRIVATE_KEY")
    VAPID_CLAIM_EMAIL = os.getenv("VAPID_CLAIM_EMAIL")

    # --- Reminder Scheduler ---
    SCHEDULER_ENABLED = _env_bool("SCHEDULER_ENABLED", True)
    SCHEDULER_INTERVAL_MINUTES = int(os.getenv("SCHEDULER_INTERVAL_MINUTES", "1"))
    SCHEDULER_MAX_WORKERS = int(os.getenv("SCHEDULER_MAX_WORKERS", "8"))
    USER_PIPELINE_TIMEOUT_SECONDS = float(os.getenv("USER_PIPELINE_TIMEOUT_SECONDS", "30"))
    DEDUP_WINDOW_MINUTES = int(os.getenv("DEDUP_WINDOW_MINUTES", "60"))

config = Config()
