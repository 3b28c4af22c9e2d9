# backend/portfolio_ledger/services/constants.py
"""
Centralized constants for the ledger, analysis and HTTP layers.

Tunables that operators may want to change per deployment live in
``config.Settings``; values here are fixed business rules.

Usage:
    from portfolio_ledger.services.constants import MAX_PAGE_SIZE, RATE_LIMIT_WRITE
"""


# =============================================================================
# PAGINATION
# =============================================================================

# List endpoints use 1-indexed page/page_size query parameters
DEFAULT_PAGE_SIZE: int = 10
MAX_PAGE_SIZE: int = 100


# =============================================================================
# REFERENCE DATA
# =============================================================================

# Asset types created by seed_reference_data(): (name, unit, description)
DEFAULT_ASSET_TYPES: tuple[tuple[str, str, str], ...] = (
    ("Cash", "USD", "Cash and cash equivalents"),
    ("Stock", "shares", "Listed equities"),
    ("Bond", "units", "Government and corporate bonds"),
    ("Crypto", "coins", "Cryptocurrencies"),
    ("Foreign Currency", "units", "Foreign currency holdings"),
    ("Futures", "contracts", "Futures contracts"),
)

# Business code of the seeded settlement (cash) account
SETTLEMENT_ACCOUNT_CODE: str = "CASH001"
SETTLEMENT_ACCOUNT_NAME: str = "Cash Account"


# =============================================================================
# ANALYSIS LIMITS
# =============================================================================

# Accepted range for the trailing daily cash balance window
MIN_CASH_BALANCE_DAYS: int = 1
MAX_CASH_BALANCE_DAYS: int = 3650


# =============================================================================
# RATE LIMITING
# =============================================================================

# Default rate limit applied to every route
RATE_LIMIT_DEFAULT: str = "100/minute"

# Ledger mutations and CRUD writes
RATE_LIMIT_WRITE: str = "30/minute"

# Replay-based reports touch every transaction in the window
RATE_LIMIT_ANALYTICS: str = "60/minute"

# Monitoring tools poll frequently
RATE_LIMIT_HEALTH: str = "300/minute"


# =============================================================================
# DASHBOARD
# =============================================================================

# Upper bound for the number of points in the total assets history
MAX_HISTORY_POINTS: int = 365
