from duebook.models.user import User
from duebook.models.shop import Shop
from duebook.models.shop_user import ShopUser
from duebook.models.customer import Customer
from duebook.models.ledger import CustomerLedger
from duebook.models.audit_log import AuditLog

__all__ = ["User", "Shop", "ShopUser", "Customer", "CustomerLedger", "AuditLog"]
