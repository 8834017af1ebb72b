"""
Aggregate query construction.

Reports are described by an ``AggregateSpec`` (which dimension to group by,
which measures to compute, how to order and cut the result) and compiled
into SQLAlchemy Core ``SELECT`` statements over order lines. Nothing here is
dialect specific: period bucketing is done in Python after the query, so
SQLite and PostgreSQL return the same rows.

Every line-item query joins ``order_items -> orders -> products`` within the
tenant, left-joins ``categories``/``brands``, and drops cancelled and
refunded orders.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import Select, and_, distinct, func, select
from sqlalchemy.sql.elements import ColumnElement

from pos_analytics.database.models import (
    Brand,
    Category,
    Customer,
    EXCLUDED_ORDER_STATUSES,
    Order,
    OrderItem,
    Product,
)


@dataclass(frozen=True)
class ReportFilters:
    """Row filters shared by every report query"""
    tenant_id: str
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    category_id: Optional[str] = None

    def for_period(self, start: datetime, end: datetime) -> "ReportFilters":
        return ReportFilters(
            tenant_id=self.tenant_id,
            start=start,
            end=end,
            category_id=self.category_id,
        )


class Dimension(str, Enum):
    """Grouping key of a line-item aggregate"""
    OVERALL = "overall"
    PRODUCT = "product"
    CATEGORY = "category"
    ORDER = "order"


class Measure(str, Enum):
    """Aggregated columns a spec can request"""
    QUANTITY = "quantity_sold"
    REVENUE = "revenue_cents"
    COST = "cost_cents"
    ORDER_COUNT = "order_count"
    PRODUCT_COUNT = "product_count"


# Cost basis: the product's current cost price, missing cost counts as zero
LINE_COST = OrderItem.quantity * func.coalesce(Product.cost_price_cents, 0)

_MEASURE_EXPRESSIONS: Dict[Measure, ColumnElement] = {
    Measure.QUANTITY: func.coalesce(func.sum(OrderItem.quantity), 0),
    Measure.REVENUE: func.coalesce(func.sum(OrderItem.subtotal_cents), 0),
    Measure.COST: func.coalesce(func.sum(LINE_COST), 0),
    Measure.ORDER_COUNT: func.count(distinct(Order.id)),
    Measure.PRODUCT_COUNT: func.count(distinct(Product.id)),
}

# (output name, column) pairs; the columns double as the GROUP BY list
_DIMENSION_KEYS: Dict[Dimension, Tuple[Tuple[str, ColumnElement], ...]] = {
    Dimension.OVERALL: (),
    Dimension.PRODUCT: (
        ("product_id", Product.id),
        ("product_name", Product.name),
        ("sku", Product.sku),
        ("category_name", Category.name),
        ("brand_name", Brand.name),
    ),
    Dimension.CATEGORY: (
        ("category_id", Category.id),
        ("category_name", Category.name),
    ),
    Dimension.ORDER: (
        ("order_id", Order.id),
        ("created_at", Order.created_at),
        ("customer_id", Order.customer_id),
    ),
}


@dataclass(frozen=True)
class AggregateSpec:
    """
    Dimension-agnostic description of a grouped line-item aggregate.

    Example:
        spec = AggregateSpec(
            name="top_products",
            dimension=Dimension.PRODUCT,
            measures=(Measure.REVENUE, Measure.QUANTITY),
            order_by=Measure.REVENUE,
            limit=10,
        )
    """
    name: str
    dimension: Dimension
    measures: Sequence[Measure] = field(default_factory=tuple)
    order_by: Optional[Measure] = None
    descending: bool = True
    limit: Optional[int] = None


def order_filters(filters: ReportFilters) -> List[ColumnElement]:
    """WHERE clauses on ``orders`` common to every report."""
    conditions = [
        Order.tenant_id == filters.tenant_id,
        Order.status.not_in(EXCLUDED_ORDER_STATUSES),
    ]
    if filters.start is not None:
        conditions.append(Order.created_at >= filters.start)
    if filters.end is not None:
        conditions.append(Order.created_at <= filters.end)
    return conditions


def compile_aggregate(spec: AggregateSpec, filters: ReportFilters) -> Select:
    """Compile ``spec`` into a SELECT over the tenant's order lines."""
    keys = _DIMENSION_KEYS[spec.dimension]
    measures = {measure: _MEASURE_EXPRESSIONS[measure].label(measure.value) for measure in spec.measures}

    columns = [column.label(name) for name, column in keys] + list(measures.values())

    query = (
        select(*columns)
        .select_from(OrderItem)
        .join(Order, and_(Order.id == OrderItem.order_id, Order.tenant_id == OrderItem.tenant_id))
        .join(Product, and_(Product.id == OrderItem.product_id, Product.tenant_id == OrderItem.tenant_id))
        .outerjoin(Category, and_(Category.id == Product.category_id, Category.tenant_id == Product.tenant_id))
        .outerjoin(Brand, and_(Brand.id == Product.brand_id, Brand.tenant_id == Product.tenant_id))
        .where(OrderItem.tenant_id == filters.tenant_id, *order_filters(filters))
    )

    if filters.category_id is not None:
        query = query.where(Product.category_id == filters.category_id)

    if keys:
        query = query.group_by(*[column for _, column in keys])

    if spec.order_by is not None:
        if spec.order_by not in measures:
            raise ValueError(f"Cannot order {spec.name} by unselected measure {spec.order_by.value}")
        label = measures[spec.order_by]
        query = query.order_by(label.desc() if spec.descending else label.asc())

    if spec.limit is not None:
        query = query.limit(spec.limit)

    return query


def compile_customer_spend(filters: ReportFilters, limit: int) -> Select:
    """
    Customers ranked by the order totals they paid.

    The inner join on ``customers`` drops walk-in orders without a customer.
    """
    total_spent = func.coalesce(func.sum(Order.total_cents), 0).label("total_spent_cents")

    return (
        select(
            Customer.id.label("customer_id"),
            Customer.name.label("customer_name"),
            total_spent,
            func.count(Order.id).label("order_count"),
        )
        .select_from(Order)
        .join(Customer, and_(Customer.id == Order.customer_id, Customer.tenant_id == Order.tenant_id))
        .where(*order_filters(filters))
        .group_by(Customer.id, Customer.name)
        .order_by(total_spent.desc())
        .limit(limit)
    )
