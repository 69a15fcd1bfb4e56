import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.environ.get("DATABASE_URL", "sqlite:///./data/proposals.db")

# Session tokens
JWT_SECRET_KEY = os.environ.get(
    "JWT_SECRET_KEY", "3f1c7a9e2b4d6f8a0c2e4a6b8d0f2a4c6e8b0d2f4a6c8e0b2d4f6a8c0e2b4d6f"
)
ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_MINUTES = int(
    os.environ.get("ACCESS_TOKEN_EXPIRE_MINUTES", str(60 * 24 * 365))
)  # 1 year, same as the session cookie
COOKIE_NAME = "session"

# Ownership / access
OWNER_OPEN_ID = os.environ.get("OWNER_OPEN_ID", "")
DEFAULT_OWNER_ID = int(os.environ.get("DEFAULT_OWNER_ID", "1"))
REQUIRE_AUTH = os.environ.get("REQUIRE_AUTH", "false").lower() in ("1", "true", "yes")

# Uploaded images
UPLOAD_DIR = os.environ.get("UPLOAD_DIR", os.path.abspath("./uploads"))
PUBLIC_URL = os.environ.get("PUBLIC_URL", "http://localhost:8000").rstrip("/")

# 0 disables automatic expiry
PROPOSAL_VALIDITY_DAYS = int(os.environ.get("PROPOSAL_VALIDITY_DAYS", "0"))

# Fixed contact block shown on every proposal
CONTACT_PHONE = os.environ.get("CONTACT_PHONE") or None
CONTACT_EMAIL = os.environ.get("CONTACT_EMAIL") or None
CONTACT_INSTAGRAM = os.environ.get("CONTACT_INSTAGRAM") or None

LOG_FILE = os.environ.get("LOG_FILE", "server.log")
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]
