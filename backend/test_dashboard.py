from datetime import date, timedelta
from decimal import Decimal

from conftest import add_customer
from duebook.models.customer import Customer
from duebook.models.enums import LedgerEntryType
from duebook.models.ledger import CustomerLedger
from duebook.models.shop import Shop
from duebook.services import ledger_service
from duebook.services.dashboard_service import compute_metrics, empty_metrics, get_dashboard_metrics

TODAY = date(2024, 6, 30)


def entry(id, entry_type, amount, on, ref=None, customer_id=1):
    return CustomerLedger(
        id=id, customer_id=customer_id, shop_id=1, created_by_user_id=1,
        entry_type=entry_type, amount=Decimal(str(amount)), balance_after=Decimal("0"),
        reference_entry_id=ref, entry_date=on,
    )


def person(id, balance, shop_id=1, active=True):
    return Customer(
        id=id, shop_id=shop_id, name=f"C{id}", phone=f"98000000{id:02d}",
        opening_balance=Decimal("0"), current_balance=Decimal(str(balance)), is_active=active,
    )


def test_metrics_use_effective_entries():
    shops = [Shop(id=1, name="Main", is_active=True)]
    customers = [person(1, 150), person(2, 0), person(3, 50, active=False)]
    entries = [
        entry(1, LedgerEntryType.BAKI, 200, TODAY),
        entry(2, LedgerEntryType.PAID, 50, TODAY - timedelta(days=1)),
        entry(3, LedgerEntryType.BAKI, 70, TODAY - timedelta(days=2)),
        entry(4, LedgerEntryType.REVERSAL, 70, TODAY, ref=3),
        entry(5, LedgerEntryType.BAKI, 10, TODAY - timedelta(days=45)),
    ]

    m = compute_metrics(customers, shops, entries, today=TODAY)

    assert m["total_customers"] == 3
    assert m["active_customers"] == 2
    assert m["total_shops"] == 1
    assert m["total_debit"] == 210.0
    assert m["total_credit"] == 50.0
    assert m["net_balance"] == 160.0
    assert m["total_transactions"] == 3
    assert round(m["average_transaction_value"], 6) == round(260 / 3, 6)

    dist = m["entry_type_distribution"]
    assert (dist["baki_count"], dist["paid_count"]) == (1, 1)
    assert (dist["baki_amount"], dist["paid_amount"]) == (200.0, 50.0)

    # empty days and the reversed entry's day are omitted
    assert [t["date"] for t in m["transaction_trend"]] == ["2024-06-29", "2024-06-30"]
    assert m["transaction_trend"][1]["debit_count"] == 1

    assert [c["customer_id"] for c in m["top_customers"]] == [1, 3]
    assert m["overdue_baki_count"] == 2
    assert m["total_overdue_baki"] == 200.0
    assert m["shop_distribution"] == [
        {"shop_id": 1, "shop_name": "Main", "customer_count": 3, "total_balance": 200.0}
    ]

    health = m["payment_health_metrics"]
    assert round(health["collection_rate"], 4) == round(50 / 210 * 100, 4)
    assert health["total_active_customers_with_balance"] == 1
    assert health["largest_outstanding_balance"] == 150.0
    assert health["customers_above_average_balance"] == 1


def test_top_customers_capped_at_ten():
    customers = [person(i, i * 10) for i in range(1, 15)]
    m = compute_metrics(customers, [], [], today=TODAY)
    assert len(m["top_customers"]) == 10
    assert m["top_customers"][0]["current_balance"] == 140.0
    assert m["top_customers"][0]["shop_name"] == "N/A"


def test_no_debit_means_zero_collection_rate():
    m = compute_metrics([], [], [], today=TODAY)
    assert m["payment_health_metrics"]["collection_rate"] == 0.0
    assert m["average_transaction_value"] == 0.0


def test_inaccessible_shop_yields_empty_metrics(db, seed):
    assert get_dashboard_metrics(db, seed.owner, seed.other_shop_id) == empty_metrics()
    assert get_dashboard_metrics(db, seed.newcomer) == empty_metrics()


def test_metrics_from_database(db, seed):
    customer = add_customer(db, seed.shop_id, balance="100")
    ledger_service.create_entry(db, customer.id, LedgerEntryType.BAKI, 40, seed.owner)

    m = get_dashboard_metrics(db, seed.viewer, seed.shop_id)
    assert m["total_customers"] == 1
    assert m["total_debit"] == 40.0
    assert m["top_customers"][0]["current_balance"] == 140.0
