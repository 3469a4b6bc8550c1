"""Application constants - centralized configuration values."""

# =============================================================================
# Cache TTLs (in seconds)
# =============================================================================
CACHE_TTL_MOVIE_DETAILS = 24 * 60 * 60  # 24 hours
CACHE_TTL_POPULAR = 6 * 60 * 60  # 6 hours
CACHE_TTL_TOP_RATED = 12 * 60 * 60  # 12 hours
CACHE_TTL_GENRES = 7 * 24 * 60 * 60  # 7 days (rarely change)
CACHE_TTL_SEARCH = 30 * 60  # 30 minutes
CACHE_TTL_RECOMMENDATIONS = 2 * 60 * 60  # 2 hours
CACHE_TTL_SIMILAR = 24 * 60 * 60  # 24 hours

CACHE_KEY_MAX_LENGTH = 200

# =============================================================================
# API Timeouts (in seconds)
# =============================================================================
HTTPX_TIMEOUT = 10.0

# =============================================================================
# Recommendations
# =============================================================================
DEFAULT_EXTENDED_TOTAL = 40
MAX_EXTENDED_TOTAL = 200
TMDB_MAX_PAGE = 500  # TMDB refuses pages beyond 500

DEFAULT_MIN_VOTE_COUNT = 50
TOP_RATED_MIN_VOTE_COUNT = 1000
TOP_RATED_MIN_VOTE_AVERAGE = 7.0

OLD_MOVIE_RELEASE_GTE = "1980-01-01"
OLD_MOVIE_RELEASE_LTE = "2010-12-31"
MODERN_MOVIE_RELEASE_GTE = "2000-01-01"

# =============================================================================
# Preferences
# =============================================================================
PREFERENCES_SETTINGS_KEY = "userPreferences"
ANY_GENRE = "any"

MOODS = ("happy", "sad", "excited", "relaxed", "adventurous", "romantic")
AUDIENCES = ("alone", "partner", "family", "friends", "kids")
CATEGORIES = ("popular", "top_rated", "latest")

# =============================================================================
# TMDB genre ids
# =============================================================================
GENRE_IDS = {
    "action": 28,
    "adventure": 12,
    "animation": 16,
    "comedy": 35,
    "crime": 80,
    "documentary": 99,
    "drama": 18,
    "family": 10751,
    "fantasy": 14,
    "history": 36,
    "horror": 27,
    "music": 10402,
    "mystery": 9648,
    "romance": 10749,
    "science fiction": 878,
    "tv movie": 10770,
    "thriller": 53,
    "war": 10752,
    "western": 37,
}

# Fallback genres used when no explicit genre was chosen
MOOD_GENRES = {
    "happy": (35, 16, 10751),  # Comedy, Animation, Family
    "sad": (18, 10749),  # Drama, Romance
    "excited": (28, 12, 53),  # Action, Adventure, Thriller
    "adventurous": (12, 14, 878),  # Adventure, Fantasy, Sci-Fi
    "romantic": (10749, 35),  # Romance, Comedy
}

AUDIENCE_GENRES = {
    "kids": (16, 10751),  # Animation, Family
    "family": (10751, 16, 12),  # Family, Animation, Adventure
}

# =============================================================================
# Certifications (US rating board)
# =============================================================================
CERTIFICATION_COUNTRY = "US"
CERTIFICATION_ORDER = ("G", "PG", "PG-13", "R", "NC-17")
AGE_APPROPRIATE_CERTIFICATIONS = frozenset({"G", "PG", "PG-13"})
AUDIENCE_CERTIFICATIONS = {
    "kids": frozenset({"G", "PG"}),
    "family": frozenset({"G", "PG", "PG-13"}),
}

# =============================================================================
# Session & Security
# =============================================================================
SESSION_TIMEOUT_DAYS = 7
SESSION_COOKIE_NAME = "cinemood_session"
PASSWORD_MIN_LENGTH = 6
# bcrypt only accepts up to 72 bytes of input
PASSWORD_MAX_BYTES = 72
# Idle recommendation sessions beyond this are evicted, oldest first
MAX_TRACKED_SESSIONS = 10_000

# =============================================================================
# External API URLs
# =============================================================================
TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"
