from typing import List, Optional

from duebook.schemas.common import CamelModel


class TopCustomer(CamelModel):
    customer_id: int
    name: str
    entity_name: Optional[str] = None
    shop_id: int
    shop_name: str
    current_balance: float


class EntryTypeDistribution(CamelModel):
    baki_count: int
    paid_count: int
    baki_amount: float
    paid_amount: float


class DailyTransactionTrend(CamelModel):
    date: str
    debit_amount: float
    debit_count: int
    credit_amount: float
    credit_count: int


class ShopDistribution(CamelModel):
    shop_id: int
    shop_name: str
    customer_count: int
    total_balance: float


class PaymentHealthMetrics(CamelModel):
    collection_rate: float  # credit as a percentage of debit
    total_active_customers_with_balance: int
    largest_outstanding_balance: float
    customers_above_average_balance: int


class DashboardMetrics(CamelModel):
    total_customers: int
    active_customers: int
    total_shops: int

    total_debit: float
    total_credit: float
    net_balance: float
    total_transactions: int
    average_transaction_value: float

    top_customers: List[TopCustomer]
    entry_type_distribution: EntryTypeDistribution
    transaction_trend: List[DailyTransactionTrend]
    shop_distribution: List[ShopDistribution]

    average_customer_balance: float = 0.0
    overdue_baki_count: int = 0
    total_overdue_baki: float = 0.0
    payment_health_metrics: Optional[PaymentHealthMetrics] = None
