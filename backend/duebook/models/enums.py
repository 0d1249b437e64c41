import enum


class ShopUserRole(str, enum.Enum):
    OWNER = "OWNER"
    STAFF = "STAFF"
    VIEWER = "VIEWER"


class ShopUserStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    INVITED = "INVITED"
    INACTIVE = "INACTIVE"


class LedgerEntryType(str, enum.Enum):
    BAKI = "BAKI"  # debit: customer owes more
    PAID = "PAID"  # credit: customer paid back
    REVERSAL = "REVERSAL"


class AuditEntity(str, enum.Enum):
    SHOP = "SHOP"
    CUSTOMER = "CUSTOMER"
    LEDGER = "LEDGER"


class AuditAction(str, enum.Enum):
    SHOP_CREATED = "SHOP_CREATED"
    SHOP_UPDATED = "SHOP_UPDATED"
    SHOP_USER_ADDED = "SHOP_USER_ADDED"
    SHOP_USER_UPDATED = "SHOP_USER_UPDATED"
    SHOP_USER_REMOVED = "SHOP_USER_REMOVED"

    CUSTOMER_CREATED = "CUSTOMER_CREATED"
    CUSTOMER_UPDATED = "CUSTOMER_UPDATED"

    LEDGER_ENTRY_CREATED = "LEDGER_ENTRY_CREATED"
    LEDGER_REVERSAL = "LEDGER_REVERSAL"
    LEDGER_BALANCE_ADJUSTED = "LEDGER_BALANCE_ADJUSTED"
