"""
Mondo API endpoint definitions.

Paths are relative to the API root so they join cleanly with any configured
base URL.

Documentation: https://getmondo.co.uk/docs/
"""

API_ROOT = "https://api.getmondo.co.uk/"

# Accounts & Money
ACCOUNTS = "accounts"
BALANCE = "balance"
TRANSACTIONS = "transactions"

# Authentication
WHOAMI = "ping/whoami"
