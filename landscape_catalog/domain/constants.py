"""
Constants for searching, scoring and snapshot freshness.
"""

# Search limits
DEFAULT_SEARCH_LIMIT = 50
MAX_SEARCH_RESULTS = 100
MIN_QUERY_LENGTH = 2

# Results at or above this score are considered high relevance.
CONFIDENCE_THRESHOLD = 0.5

# Project maturity tiers
MATURITY_SANDBOX = "sandbox"
MATURITY_INCUBATING = "incubating"
MATURITY_GRADUATED = "graduated"
KNOWN_MATURITY_TIERS = (MATURITY_SANDBOX, MATURITY_INCUBATING, MATURITY_GRADUATED)

# Additive scoring weights
SCORE_NAME_MATCH = 40
SCORE_DESCRIPTION_MATCH = 25
SCORE_CATEGORY_MATCH = 20
SCORE_PER_TAG_MATCH = 10
SCORE_CATEGORY_FILTER = 30
SCORE_POPULARITY_BOOST = 15
SCORE_GRADUATION_BOOST = 10
MAX_SCORE = 100.0

# Popularity thresholds (stars)
POPULAR_STARS = 1000
QUALITY_TIER_STARS = (10000, 1000, 100)

# Time windows
FRESHNESS_WINDOW_SECONDS = 3600
ACTIVE_MAINTENANCE_DAYS = 90

# Tags derived while parsing
OPEN_SOURCE_TAG = "open-source"
CNCF_TAG = "cncf"
