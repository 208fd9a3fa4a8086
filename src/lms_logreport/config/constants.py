"""
Constants for log report filtering and aggregation.
"""

# =============================================================================
# Site and Time
# =============================================================================

# Course id of the front page; filtering by it means "the whole site"
SITEID = 1

# Seconds in one day; a date filter always covers this window from its start
DAYSECS = 86400

# Context level of course modules
CONTEXT_MODULE = 70

# =============================================================================
# Event Classification
# =============================================================================

# Education levels recorded on each event
LEVEL_OTHER = 0
LEVEL_TEACHING = 1
LEVEL_PARTICIPATING = 2

ALL_EDULEVELS = (LEVEL_OTHER, LEVEL_PARTICIPATING, LEVEL_TEACHING)

# CRUD letters recorded by the standard store
ALL_CRUD = ("c", "r", "u", "d")

# Legacy action values reported as site errors
SITE_ERROR_ACTIONS = ("error", "infected", "failed")

# =============================================================================
# Origins
# =============================================================================

# Origins the report lists individually
CORE_ORIGINS = ("cli", "restore", "ws", "web")

# Selecting this origin means "anything not in CORE_ORIGINS"
OTHER_ORIGINS = "---"

# =============================================================================
# Tables
# =============================================================================

TABLE_STANDARD_LOG = "logstore_standard_log"
TABLE_LEGACY_LOG = "log"
TABLE_GROUPS_MEMBERS = "groups_members"

# =============================================================================
# Hits Report
# =============================================================================

# Lookback window in days for each supported chart granularity
HITS_LOOKBACK_DAYS = {
    "hourly": 1,
    "daily": 30,
    "monthly": 365,
}

HITS_GRANULARITIES = list(HITS_LOOKBACK_DAYS.keys())

# =============================================================================
# Table Display
# =============================================================================

DEFAULT_PAGE_SIZE = 100
DEFAULT_ORDER_BY = "timecreated DESC"
