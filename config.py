# config.py
import os
from dotenv import load_dotenv

load_dotenv()

# --- Firebase ---
FIREBASE_SERVICE_ACCOUNT_CONTENT = os.environ.get('FIREBASE_SERVICE_ACCOUNT_CONTENT')
FIREBASE_SERVICE_ACCOUNT_PATH = os.environ.get(
    'FIREBASE_SERVICE_ACCOUNT_PATH', "credentials/firebase-adminsdk.json"
)

# --- Flask ---
FLASK_SECRET_KEY = os.environ.get('FLASK_SECRET_KEY', 'a_fallback_secret_key_for_dev_only')

# --- Trips ---
SLUG_MAX_LENGTH = 60
VISIBILITY_CHOICES = ('public', 'private', 'restricted')
DEFAULT_VISIBILITY = 'private'
DEFAULT_GRACE_HOURS = float(os.environ.get('GRACE_HOURS', 2))
AUTO_STOP_SCAN_LIMIT = 500

# --- Search ---
SEARCH_MAX_PER_TYPE = 6
SEARCH_MIN_QUERY_LEN = 3
SEARCH_PREFIX_QUERY_LIMIT = 50

# --- Client ---
TRIPS_API_BASE = os.environ.get('TRIPS_API_BASE', 'http://localhost:5000')
API_TIMEOUT_SECONDS = float(os.environ.get('API_TIMEOUT_SECONDS', 10))
SLUG_CHECK_DEBOUNCE_SECONDS = float(os.environ.get('SLUG_CHECK_DEBOUNCE_SECONDS', 0.35))
