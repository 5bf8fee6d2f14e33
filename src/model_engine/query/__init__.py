from .items import UNSET, Condition, parse_query, parse_query_item, check_filter_values
from .compiler import OrderBy, apply_order_by, compile_condition, compile_query, compile_query_item

__all__ = [
    "UNSET",
    "Condition",
    "parse_query",
    "parse_query_item",
    "check_filter_values",
    "OrderBy",
    "apply_order_by",
    "compile_condition",
    "compile_query",
    "compile_query_item",
]
