# Overview: Permission category constants for grouping related permissions.


class PermissionCategory:
    """Permission categories for organization and UI display."""
    INVENTORY = "INVENTORY"
    TRANSACTIONS = "TRANSACTIONS"
    STAFF = "STAFF"
    CUSTOMERS = "CUSTOMERS"
    REPORTS = "REPORTS"
    USERS = "USERS"
