from dotenv import load_dotenv
import os

# Load .env into environment variables
load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///clinic_billing.db")

DEV_MODE = os.getenv("DEV_MODE") == "1"


def get_valid_api_keys() -> set[str]:
    keys = os.getenv("CLINIC_API_KEYS", "")
    return {k.strip() for k in keys.split(",") if k.strip()}


def get_default_admin_fee() -> float:
    raw = os.getenv("DEFAULT_ADMIN_FEE", "0")
    try:
        return max(0.0, float(raw))
    except ValueError:
        return 0.0


def get_specific_markers() -> tuple[str, ...]:
    """Description words that earn a fee rule the specificity bonus."""
    raw = os.getenv("FEE_SPECIFIC_MARKERS", "spesifik,specific")
    return tuple(m.strip().lower() for m in raw.split(",") if m.strip())
