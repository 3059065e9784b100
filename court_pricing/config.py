import logging
import os

logger = logging.getLogger(__name__)

# --- File Paths ---
DATA_DIR = "public/data"
REPORT_FILE = os.path.join(DATA_DIR, "quotes.json")
PRICING_DATA_FILE = os.environ.get("PRICING_DATA_FILE", os.path.join(DATA_DIR, "pricing.json"))

# --- URLs & API ---
# Optional Google Sheet CSV export with extra club holidays.
HOLIDAYS_CSV_URL = os.environ.get("HOLIDAYS_CSV_URL")
REQUEST_TIMEOUT = 10

# --- Display ---
CURRENCY = os.environ.get("CURRENCY", "EUR")

if not HOLIDAYS_CSV_URL:
    logger.debug("HOLIDAYS_CSV_URL not set. Only holidays from the data file are used.")
