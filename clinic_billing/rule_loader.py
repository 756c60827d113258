import json
from pathlib import Path
from fastapi.responses import Response
from threading import Lock

from clinic_billing.config import DEV_MODE

# Path to JSON files
DATA_PATH = Path(__file__).resolve().parent / "data"
PRODUCTS_FILE = "treatment_products.json"

# Module-level caches
_cached_products_list = None
_cached_products_map = None
_cached_products_response = None

# Lock to make cache thread-safe
_cache_lock = Lock()


def load_json(file_name: str):
    """Load a JSON file from the data folder."""
    file_path = DATA_PATH / file_name
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def reset_cache():
    """Manually reset all caches."""
    global _cached_products_list, _cached_products_map, _cached_products_response
    with _cache_lock:
        _cached_products_list = None
        _cached_products_map = None
        _cached_products_response = None


def _load_products():
    global _cached_products_list, _cached_products_map
    _cached_products_list = load_json(PRODUCTS_FILE)
    _cached_products_map = {p["name"]: p for p in _cached_products_list}


# Preload at import
with _cache_lock:
    _load_products()


def get_all_products():
    with _cache_lock:
        if DEV_MODE or _cached_products_list is None:
            _load_products()
        return _cached_products_list


def get_product(name: str):
    with _cache_lock:
        if DEV_MODE or _cached_products_map is None:
            _load_products()
        return _cached_products_map.get(name)


def get_category_map() -> dict[str, str]:
    """Treatment name -> catalog category, used for category fee rules."""
    return {p["name"]: p["category"] for p in get_all_products() if p.get("category")}


def get_products_response():
    global _cached_products_response
    with _cache_lock:
        if DEV_MODE or _cached_products_response is None:
            if DEV_MODE or _cached_products_list is None:
                _load_products()
            payload = {"count": len(_cached_products_list), "products": _cached_products_list}
            _cached_products_response = Response(
                content=json.dumps(payload),
                media_type="application/json",
                headers={"Cache-Control": "public, max-age=3600"},
            )
        return _cached_products_response
