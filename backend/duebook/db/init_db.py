"""Create all tables. Run on app startup."""
import logging

from duebook.db.base import Base
from duebook.db.session import engine
from duebook.models import user, shop, shop_user, customer, ledger, audit_log  # noqa: F401 - register models

logger = logging.getLogger(__name__)


def init_db(bind=None):
    bind = bind or engine
    Base.metadata.create_all(bind=bind)
    logger.info(f"Database tables ensured: {', '.join(sorted(Base.metadata.tables))}")
