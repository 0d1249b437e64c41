"""
Dashboard metrics.

compute_metrics is a pure function over customers, shops and ledger entries;
get_dashboard_metrics loads those for the caller's shops. All ledger totals use
the same effective set as the ledger summary.
"""
import logging
from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from duebook.core.permissions import accessible_shop_ids
from duebook.models.customer import Customer
from duebook.models.enums import LedgerEntryType
from duebook.models.ledger import CustomerLedger
from duebook.models.shop import Shop
from duebook.services.summary_service import ZERO, effective_entries, sum_amounts

logger = logging.getLogger(__name__)

TREND_DAYS = 30
TOP_CUSTOMERS = 10


def empty_metrics() -> dict:
    return {
        "total_customers": 0,
        "active_customers": 0,
        "total_shops": 0,
        "total_debit": 0.0,
        "total_credit": 0.0,
        "net_balance": 0.0,
        "total_transactions": 0,
        "average_transaction_value": 0.0,
        "top_customers": [],
        "entry_type_distribution": {"baki_count": 0, "paid_count": 0, "baki_amount": 0.0, "paid_amount": 0.0},
        "transaction_trend": [],
        "shop_distribution": [],
    }


def _balance(customer: Customer) -> Decimal:
    return Decimal(customer.current_balance) if customer.current_balance is not None else ZERO


def _count(entries, entry_type: LedgerEntryType) -> int:
    return sum(1 for e in entries if e.entry_type == entry_type)


def compute_metrics(
    customers: List[Customer],
    shops: List[Shop],
    entries: List[CustomerLedger],
    today: Optional[date] = None,
) -> dict:
    today = today or date.today()
    window_start = today - timedelta(days=TREND_DAYS)
    shop_names: Dict[int, str] = {s.id: s.name for s in shops}

    effective = effective_entries(entries)
    total_debit = sum_amounts(effective, LedgerEntryType.BAKI)
    total_credit = sum_amounts(effective, LedgerEntryType.PAID)
    total_transactions = len(effective)
    average_transaction = (total_debit + total_credit) / total_transactions if total_transactions else ZERO

    # Stable sort keeps insertion order among equal balances
    with_balance = [c for c in customers if _balance(c) > 0]
    top = sorted(with_balance, key=_balance, reverse=True)[:TOP_CUSTOMERS]

    recent = [e for e in effective if e.entry_date is not None and e.entry_date >= window_start]

    by_day = defaultdict(list)
    for e in recent:
        by_day[e.entry_date].append(e)
    trend = []
    for offset in range(TREND_DAYS + 1):
        day = window_start + timedelta(days=offset)
        day_entries = by_day.get(day)
        if not day_entries:
            continue
        trend.append({
            "date": day.isoformat(),
            "debit_amount": float(sum_amounts(day_entries, LedgerEntryType.BAKI)),
            "debit_count": _count(day_entries, LedgerEntryType.BAKI),
            "credit_amount": float(sum_amounts(day_entries, LedgerEntryType.PAID)),
            "credit_count": _count(day_entries, LedgerEntryType.PAID),
        })

    by_shop = defaultdict(list)
    for c in customers:
        by_shop[c.shop_id].append(c)
    shop_distribution = [
        {
            "shop_id": shop_id,
            "shop_name": shop_names.get(shop_id, "N/A"),
            "customer_count": len(members),
            "total_balance": float(sum((_balance(c) for c in members), ZERO)),
        }
        for shop_id, members in by_shop.items()
    ]

    balances = [_balance(c) for c in customers]
    average_balance = sum(balances, ZERO) / len(balances) if balances else ZERO
    outstanding = [b for b in balances if b > 0]
    collection_rate = total_credit / total_debit * 100 if total_debit > 0 else ZERO

    return {
        "total_customers": len(customers),
        "active_customers": sum(1 for c in customers if c.is_active),
        "total_shops": sum(1 for s in shops if s.is_active),
        "total_debit": float(total_debit),
        "total_credit": float(total_credit),
        "net_balance": float(total_debit - total_credit),
        "total_transactions": total_transactions,
        "average_transaction_value": float(average_transaction),
        "top_customers": [
            {
                "customer_id": c.id,
                "name": c.name,
                "entity_name": c.entity_name,
                "shop_id": c.shop_id,
                "shop_name": shop_names.get(c.shop_id, "N/A"),
                "current_balance": float(_balance(c)),
            }
            for c in top
        ],
        "entry_type_distribution": {
            "baki_count": _count(recent, LedgerEntryType.BAKI),
            "paid_count": _count(recent, LedgerEntryType.PAID),
            "baki_amount": float(sum_amounts(recent, LedgerEntryType.BAKI)),
            "paid_amount": float(sum_amounts(recent, LedgerEntryType.PAID)),
        },
        "transaction_trend": trend,
        "shop_distribution": shop_distribution,
        "average_customer_balance": float(average_balance),
        "overdue_baki_count": len(outstanding),
        "total_overdue_baki": float(sum(outstanding, ZERO)),
        "payment_health_metrics": {
            "collection_rate": float(collection_rate),
            "total_active_customers_with_balance": sum(
                1 for c in customers if c.is_active and _balance(c) > 0
            ),
            "largest_outstanding_balance": float(max(outstanding, default=ZERO)),
            "customers_above_average_balance": sum(1 for b in balances if b > average_balance),
        },
    }


def get_dashboard_metrics(
    db: Session,
    user_id: int,
    shop_id: Optional[int] = None,
    today: Optional[date] = None,
) -> dict:
    """Metrics across the caller's shops, or one shop. Inaccessible shops yield empty metrics."""
    logger.info(f"Computing dashboard metrics for user {user_id}, shop {shop_id}")
    shop_ids = accessible_shop_ids(db, user_id)
    if shop_id:
        if shop_id not in shop_ids:
            logger.warning(f"User {user_id} does not have access to shop {shop_id}")
            return empty_metrics()
        shop_ids = [shop_id]
    if not shop_ids:
        logger.warning(f"User {user_id} has no shops")
        return empty_metrics()

    shops = db.query(Shop).filter(Shop.id.in_(shop_ids)).all()
    customers = (
        db.query(Customer)
        .filter(Customer.shop_id.in_(shop_ids))
        .order_by(Customer.id.asc())
        .all()
    )
    entries = db.query(CustomerLedger).filter(CustomerLedger.shop_id.in_(shop_ids)).all()
    return compute_metrics(customers, shops, entries, today)
