import os

SERVICE_NAME = "Table Reservation Lock API"
SERVICE_VERSION = "1.0.0"

HOST = os.environ.get("TABLELOCK_HOST", "0.0.0.0")
PORT = int(os.environ.get("TABLELOCK_PORT", "3000"))
LOG_LEVEL = os.environ.get("TABLELOCK_LOG_LEVEL", "INFO").upper()

CORS_ORIGINS = [
    origin.strip()
    for origin in os.environ.get("TABLELOCK_CORS_ORIGINS", "*").split(",")
    if origin.strip()
]

# 0 disables the background sweep; expiry is still enforced on every access.
SWEEP_INTERVAL_SECONDS = float(os.environ.get("TABLELOCK_SWEEP_INTERVAL_SECONDS", "0"))
