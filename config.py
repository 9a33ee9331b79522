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
    DB_URI = data.get("DB_URI", "sqlite+aiosqlite:///./invoicing.db")
    AUTO_CREATE_TABLES = bool(data.get("AUTO_CREATE_TABLES", True))
    API_PREFIX = data.get("API_PREFIX", "/api")
    API_PORT = data.get("API_PORT", 8000)
    API_HOST = data.get("API_HOST", "0.0.0.0")
    API_RELOAD = bool(data.get("API_RELOAD", False))
    CORS_ORIGINS = data.get("CORS_ORIGINS", [])
    CORS_ALLOW_CREDENTIALS = data.get("CORS_ALLOW_CREDENTIALS", True)
    LOG_LEVEL = data.get("LOG_LEVEL", "INFO")
    ENABLE_LOGGING_MIDDLEWARE = bool(data.get("ENABLE_LOGGING_MIDDLEWARE", 1))

    # Invoice defaults
    DEFAULT_CURRENCY = data.get("DEFAULT_CURRENCY", "USD")
    DEFAULT_INVOICE_NUMBER_FORMAT = data.get("DEFAULT_INVOICE_NUMBER_FORMAT", "INV-{YYYY}-{MM}-{SEQ}")
    DEFAULT_RECEIPT_NUMBER_FORMAT = data.get("DEFAULT_RECEIPT_NUMBER_FORMAT", "REC-{YYYY}{MM}-{SEQ}")
    DEFAULT_PAYMENT_TERMS_DAYS = int(data.get("DEFAULT_PAYMENT_TERMS_DAYS", 30))
    DISCOUNT_MODE = data.get("DISCOUNT_MODE", "flat")  # "flat" or "percentage"

    # Payments that start pending until settled
    PENDING_PAYMENT_METHODS = data.get("PENDING_PAYMENT_METHODS", ["cheque"])
    PENDING_PAYMENT_THRESHOLD = data.get("PENDING_PAYMENT_THRESHOLD", None)  # Amount, None = disabled

    # Overdue Monitor Configuration
    OVERDUE_MONITOR_ENABLED = bool(data.get("OVERDUE_MONITOR_ENABLED", True))
    OVERDUE_MONITOR_INTERVAL_SECONDS = data.get("OVERDUE_MONITOR_INTERVAL_SECONDS", 3600)  # Hourly
    OVERDUE_MONITOR_BATCH_SIZE = data.get("OVERDUE_MONITOR_BATCH_SIZE", 500)
    OVERDUE_NOTIFICATION_WEBHOOK = data.get("OVERDUE_NOTIFICATION_WEBHOOK", None)
