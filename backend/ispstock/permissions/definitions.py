"""
Permission codes and the default grants per role.

Roles are fixed (admin, supervisor, technician) and each maps to a set of
codes below. Admin holds every code.
"""

from .categories import PermissionCategory


# Each permission is defined as: (code, name, description, category)
INVENTORY_PERMISSIONS = [
    ("VIEW_STOCK", "View Stock", "View stock items, quantities and low stock alerts", PermissionCategory.INVENTORY),
    ("MANAGE_STOCK", "Manage Stock", "Create and edit stock items", PermissionCategory.INVENTORY),
    ("DELETE_STOCK", "Delete Stock", "Delete stock items", PermissionCategory.INVENTORY),
    ("ADJUST_STOCK", "Adjust Stock", "Add or subtract stock quantity directly", PermissionCategory.INVENTORY),
    ("SEND_STOCK_ALERTS", "Send Stock Alerts", "Email low stock alerts to administrators", PermissionCategory.INVENTORY),
]

TRANSACTION_PERMISSIONS = [
    ("VIEW_TRANSACTIONS", "View Transactions", "View stock transactions and statistics", PermissionCategory.TRANSACTIONS),
    ("CREATE_TRANSACTIONS", "Create Transactions", "Request stock for installation, maintenance, return or borrow", PermissionCategory.TRANSACTIONS),
    ("APPROVE_TRANSACTIONS", "Approve Transactions", "Approve, reject and complete pending transactions", PermissionCategory.TRANSACTIONS),
]

STAFF_PERMISSIONS = [
    ("VIEW_STAFF", "View Staff", "View staff members and team statistics", PermissionCategory.STAFF),
    ("MANAGE_STAFF", "Manage Staff", "Create and edit staff members and performance", PermissionCategory.STAFF),
    ("DELETE_STAFF", "Delete Staff", "Deactivate staff members", PermissionCategory.STAFF),
]

CUSTOMER_PERMISSIONS = [
    ("VIEW_CUSTOMERS", "View Customers", "View customers, devices and service history", PermissionCategory.CUSTOMERS),
    ("MANAGE_CUSTOMERS", "Manage Customers", "Create and edit customers, devices and service history", PermissionCategory.CUSTOMERS),
    ("DELETE_CUSTOMERS", "Delete Customers", "Delete customers", PermissionCategory.CUSTOMERS),
]

REPORT_PERMISSIONS = [
    ("VIEW_DASHBOARD", "View Dashboard", "View dashboard statistics, trends and performance", PermissionCategory.REPORTS),
]

USER_PERMISSIONS = [
    ("VIEW_USERS", "View Users", "View application user accounts", PermissionCategory.USERS),
    ("CREATE_USER", "Create User", "Register new application user accounts", PermissionCategory.USERS),
]

PERMISSION_DEFINITIONS = (
    INVENTORY_PERMISSIONS
    + TRANSACTION_PERMISSIONS
    + STAFF_PERMISSIONS
    + CUSTOMER_PERMISSIONS
    + REPORT_PERMISSIONS
    + USER_PERMISSIONS
)


DEFAULT_ROLE_PERMISSIONS = {
    "admin": [perm[0] for perm in PERMISSION_DEFINITIONS],

    "supervisor": [
        # Supervisor: approvals and master data, no deletes
        "VIEW_STOCK",
        "MANAGE_STOCK",
        "ADJUST_STOCK",
        "SEND_STOCK_ALERTS",
        "VIEW_TRANSACTIONS",
        "CREATE_TRANSACTIONS",
        "APPROVE_TRANSACTIONS",
        "VIEW_STAFF",
        "MANAGE_STAFF",
        "VIEW_CUSTOMERS",
        "MANAGE_CUSTOMERS",
        "VIEW_DASHBOARD",
        "VIEW_USERS",
    ],

    "technician": [
        # Technician: field work only
        "VIEW_STOCK",
        "ADJUST_STOCK",
        "VIEW_TRANSACTIONS",
        "CREATE_TRANSACTIONS",
        "VIEW_STAFF",
        "VIEW_CUSTOMERS",
        "VIEW_DASHBOARD",
    ],
}
