"""Summary aggregation over in-memory entries."""
from datetime import date
from decimal import Decimal

from duebook.models.enums import LedgerEntryType
from duebook.models.ledger import CustomerLedger
from duebook.services.summary_service import (
    LedgerSummary,
    effective_entries,
    parse_entry_type,
    summarize,
)

BAKI = LedgerEntryType.BAKI
PAID = LedgerEntryType.PAID
REVERSAL = LedgerEntryType.REVERSAL


def entry(id, entry_type, amount, customer_id=1, on=date(2024, 5, 10), ref=None):
    return CustomerLedger(
        id=id,
        customer_id=customer_id,
        shop_id=1,
        created_by_user_id=1,
        entry_type=entry_type,
        amount=Decimal(str(amount)),
        balance_after=Decimal("0"),
        reference_entry_id=ref,
        entry_date=on,
    )


def test_empty_input():
    assert summarize([]) == LedgerSummary()


def test_reversal_pair_cancels():
    entries = [entry(1, BAKI, 100), entry(2, REVERSAL, 100, ref=1)]
    assert effective_entries(entries) == []
    assert summarize(entries) == LedgerSummary(Decimal("0"), Decimal("0"), Decimal("0"), 0)


def test_totals_over_effective_entries():
    entries = [
        entry(1, BAKI, 200),
        entry(2, PAID, 300),
        entry(3, REVERSAL, 300, ref=2),
        entry(4, PAID, "49.50"),
    ]
    summary = summarize(entries)
    assert summary.total_debit == Decimal("200")
    assert summary.total_credit == Decimal("49.50")
    assert summary.net_balance == Decimal("150.50")
    assert summary.total_entries == 2


def test_filters_apply_before_reversal_matching():
    entries = [
        entry(1, BAKI, 100, on=date(2024, 5, 1)),
        entry(2, REVERSAL, 100, on=date(2024, 6, 1), ref=1),
    ]
    # the reversal falls outside the window, so entry 1 still counts
    may = summarize(entries, start_date=date(2024, 5, 1), end_date=date(2024, 5, 31))
    assert may.total_debit == Decimal("100")
    assert may.total_entries == 1


def test_customer_type_and_date_filters():
    entries = [
        entry(1, BAKI, 10, customer_id=1, on=date(2024, 1, 1)),
        entry(2, BAKI, 20, customer_id=2, on=date(2024, 1, 2)),
        entry(3, PAID, 5, customer_id=1, on=date(2024, 1, 3)),
        entry(4, BAKI, 40, customer_id=1, on=date(2024, 1, 4)),
    ]
    assert summarize(entries, customer_id=1).net_balance == Decimal("45")
    assert summarize(entries, entry_type=PAID).total_credit == Decimal("5")
    assert summarize(entries, start_date=date(2024, 1, 2)).total_entries == 3
    assert summarize(entries, end_date=date(2024, 1, 2)).total_debit == Decimal("30")
    bounded = summarize(entries, start_date=date(2024, 1, 2), end_date=date(2024, 1, 3))
    assert bounded.total_entries == 2


def test_parse_entry_type():
    assert parse_entry_type("BAKI") == BAKI
    assert parse_entry_type(" paid ") == PAID
    assert parse_entry_type("") is None
    assert parse_entry_type(None) is None
    assert parse_entry_type("REFUND") is None
