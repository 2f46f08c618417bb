from typing import Dict, Mapping, NamedTuple

import pandas as pd

from models import LocationTree


class StockSummary(NamedTuple):
    item_count: int = 0
    total_quantity: float = 0.0


_EMPTY = StockSummary()


def summarize_quants(quants: pd.DataFrame) -> Dict[int, StockSummary]:
    """
    Per-location stock summary from a quant table (location_id, quantity).
    Each quant row counts as one item.
    """
    if quants.empty:
        return {}
    grouped = quants.groupby("location_id")["quantity"].agg(["count", "sum"])
    return {
        int(loc_id): StockSummary(item_count=int(row["count"]), total_quantity=float(row["sum"]))
        for loc_id, row in grouped.iterrows()
    }


def aggregate_stock(tree: LocationTree, stock_by_location: Mapping[int, StockSummary]) -> None:
    """
    Fold direct per-location stock into the tree: every node ends up with its
    own stock plus the sum over its children. Unknown ids contribute nothing.
    """
    # children are emitted after their parent in pre-order, so the reversed
    # walk visits every child before its parent
    for node in reversed(list(tree.walk())):
        direct = stock_by_location.get(node.id, _EMPTY)
        item_count = direct.item_count
        total_quantity = direct.total_quantity
        for child in tree.children_of(node.id):
            item_count += child.item_count
            total_quantity += child.total_quantity
        node.item_count = item_count
        node.total_quantity = total_quantity
        node.has_stock = item_count > 0
