"""
Ledger aggregation.

A reversed entry and the REVERSAL that cancels it must not be counted in
totals, but both stay visible in the raw entry list. The effective set is
computed in two passes: collect the ids referenced by REVERSAL entries into a
set, then keep entries that are neither reversed nor reversals themselves.
"""
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional, Set

from duebook.models.enums import LedgerEntryType
from duebook.models.ledger import CustomerLedger

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class LedgerSummary:
    total_debit: Decimal = ZERO
    total_credit: Decimal = ZERO
    net_balance: Decimal = ZERO
    total_entries: int = 0


def parse_entry_type(value: Optional[str]) -> Optional[LedgerEntryType]:
    """Entry-type filter from a query string. Unknown values are ignored."""
    if value is None or not value.strip():
        return None
    try:
        return LedgerEntryType(value.strip().upper())
    except ValueError:
        logger.warning(f"Invalid entry type filter: {value}")
        return None


def reversed_entry_ids(entries: Iterable[CustomerLedger]) -> Set[int]:
    return {
        e.reference_entry_id
        for e in entries
        if e.entry_type == LedgerEntryType.REVERSAL and e.reference_entry_id is not None
    }


def effective_entries(entries: Iterable[CustomerLedger]) -> List[CustomerLedger]:
    """Entries that count toward totals: not reversed, and not a reversal."""
    entries = list(entries)
    reversed_ids = reversed_entry_ids(entries)
    return [
        e for e in entries
        if e.id not in reversed_ids and e.entry_type != LedgerEntryType.REVERSAL
    ]


def sum_amounts(entries: Iterable[CustomerLedger], entry_type: LedgerEntryType) -> Decimal:
    return sum((Decimal(e.amount or 0) for e in entries if e.entry_type == entry_type), ZERO)


def filter_entries(
    entries: Iterable[CustomerLedger],
    customer_id: Optional[int] = None,
    entry_type: Optional[LedgerEntryType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[CustomerLedger]:
    """Customer, entry type and inclusive date-range filters. None means no filter."""
    result = []
    for e in entries:
        if customer_id and e.customer_id != customer_id:
            continue
        if entry_type is not None and e.entry_type != entry_type:
            continue
        if start_date is not None and (e.entry_date is None or e.entry_date < start_date):
            continue
        if end_date is not None and (e.entry_date is None or e.entry_date > end_date):
            continue
        result.append(e)
    return result


def summarize(
    entries: Iterable[CustomerLedger],
    customer_id: Optional[int] = None,
    entry_type: Optional[LedgerEntryType] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> LedgerSummary:
    """
    Totals over the effective entries of the filtered set.

    Filters are applied first, so a reversal outside the filtered set does not
    cancel its target inside it.
    """
    filtered = filter_entries(entries, customer_id, entry_type, start_date, end_date)
    effective = effective_entries(filtered)

    total_debit = sum_amounts(effective, LedgerEntryType.BAKI)
    total_credit = sum_amounts(effective, LedgerEntryType.PAID)
    return LedgerSummary(
        total_debit=total_debit,
        total_credit=total_credit,
        net_balance=total_debit - total_credit,
        total_entries=len(effective),
    )
