"""
Report response models.

All money fields are integer cents; all percentages are rounded to two
decimals.
"""

from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel, Field

DataT = TypeVar("DataT")

UNCATEGORIZED = "Uncategorized"


class ApiResponse(BaseModel, Generic[DataT]):
    """Envelope of a successful report"""
    success: bool = True
    data: DataT


class ErrorResponse(BaseModel):
    """Envelope of a rejected or failed report request"""
    success: bool = False
    error: str
    detail: Optional[str] = None


# =============================================================================
# DIMENSIONAL SALES
# =============================================================================

class ProductSales(BaseModel):
    """Sales of one product"""
    product_id: str
    product_name: str
    sku: str
    category_name: Optional[str] = None
    brand_name: Optional[str] = None
    quantity_sold: int
    total_revenue_cents: int
    total_cost_cents: int
    profit_cents: int
    profit_margin_percent: float
    order_count: int


class CategorySales(BaseModel):
    """Sales of one category, uncategorized products pooled together"""
    category_id: Optional[str] = None
    category_name: str
    product_count: int
    quantity_sold: int
    total_revenue_cents: int
    total_cost_cents: int
    profit_cents: int
    profit_margin_percent: float
    order_count: int


class TimeSales(BaseModel):
    """Sales within one time bucket"""
    period: str
    order_count: int
    total_revenue_cents: int
    total_cost_cents: int
    profit_cents: int
    profit_margin_percent: float
    average_order_value_cents: int
    customer_count: int


# =============================================================================
# PROFIT MARGIN
# =============================================================================

class OverallProfit(BaseModel):
    total_revenue_cents: int = 0
    total_cost_cents: int = 0
    gross_profit_cents: int = 0
    profit_margin_percent: float = 0.0


class CategoryProfit(BaseModel):
    category_name: str
    revenue_cents: int
    cost_cents: int
    profit_cents: int
    margin_percent: float


class ProductProfit(BaseModel):
    product_name: str
    sku: str
    profit_cents: int
    margin_percent: float


class ProfitMarginReport(BaseModel):
    """Overall, per-category and per-product profitability for a range"""
    overall: OverallProfit = Field(default_factory=OverallProfit)
    by_category: List[CategoryProfit] = Field(default_factory=list)
    top_profitable_products: List[ProductProfit] = Field(default_factory=list)
    low_margin_products: List[ProductProfit] = Field(default_factory=list)


# =============================================================================
# TOP PERFORMERS
# =============================================================================

class RankedProduct(BaseModel):
    rank: int
    product_id: str
    product_name: str
    sku: str
    revenue_cents: int
    quantity_sold: int
    order_count: int


class RankedCategory(BaseModel):
    rank: int
    category_name: str
    revenue_cents: int
    product_count: int
    order_count: int


class RankedCustomer(BaseModel):
    rank: int
    customer_id: str
    customer_name: str
    total_spent_cents: int
    order_count: int
    avg_order_value_cents: int


class TopPerformersReport(BaseModel):
    products: List[RankedProduct] = Field(default_factory=list)
    categories: List[RankedCategory] = Field(default_factory=list)
    customers: List[RankedCustomer] = Field(default_factory=list)


# =============================================================================
# COMPARATIVE
# =============================================================================

class PeriodTotals(BaseModel):
    revenue_cents: int = 0
    orders: int = 0
    profit_cents: int = 0


class GrowthRates(BaseModel):
    revenue_percent: float = 0.0
    orders_percent: float = 0.0
    profit_percent: float = 0.0


class ComparativeReport(BaseModel):
    """Two periods side by side with period-over-period growth"""
    period1: PeriodTotals
    period2: PeriodTotals
    growth: GrowthRates
