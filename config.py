"""
Snowboard Site Configuration

Central configuration file for all constants and settings.
Deployment-specific values come from environment variables.
"""
import os

# Server Configuration
HOST = os.getenv("HOST", "0.0.0.0")
DEFAULT_PORT = int(os.getenv("PORT", "3000"))
PRODUCTION_PORT = 80
APP_VERSION = "0.1.0"

# Public URL used in verification and referral links (no trailing slash needed)
BASE_URL = os.getenv("BASE_URL", "")

# Survey form that referral links redirect to
FORM_URL = os.getenv("FORM_URL", "")

# Paths
DB_PATH = os.getenv("DB_PATH", "db.sqlite")
STATIC_DIR = os.getenv("STATIC_DIR", "static")
CATALOG_PATH = os.getenv("CATALOG_PATH", os.path.join(STATIC_DIR, "data", "links.csv"))
LAYOUT_CONFIG_PATH = os.getenv("LAYOUT_CONFIG_PATH", "layout.yaml")
INDEX_HTML_PATH = os.getenv("INDEX_HTML_PATH", "index.html")

# Mail Configuration (Gmail app password or any SMTP relay)
SMTP_HOST = os.getenv("SMTP_HOST", "smtp.gmail.com")
SMTP_PORT = int(os.getenv("SMTP_PORT", "465"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASS = os.getenv("SMTP_PASS", "")
MAIL_SENDER_NAME = "Snowboard Survey"
MAIL_TIMEOUT = 15  # seconds

# Verification tokens
TOKEN_TTL_MINUTES = 15
TOKEN_BYTES = 16
REFERRAL_CODE_BYTES = 3

# Expired token cleanup
TOKEN_CLEANUP_INTERVAL = 600  # seconds
