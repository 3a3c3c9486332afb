from decimal import Decimal

CATEGORIES = {
    "dark": "Dark",
    "milk": "Milk",
    "white": "White",
    "special": "Special",
}

FILTER_ALL = "all"

# persisted keys (kept compatible with the browser build of the page)
TOKEN_KEY = "chocoblitz_token"
USER_KEY = "chocoblitz_user"
REMEMBER_ME_KEY = "rememberMe"
LEGACY_USER_KEY = "currentUser"
CART_KEY = "cart"

TAX_RATE = Decimal("0.10")

LOCAL_API_BASE = "http://localhost:3000/api"

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
