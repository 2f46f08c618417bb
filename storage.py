import random
from typing import List, Sequence, Tuple

from location_codes import LEVEL_CODES, ROW_CODES
from models import LocationRecord
from picking import MoveLine, Quant


def gen_location_records(warehouse_id: int = 1, code: str = "WH", num_rows: int = 4, bays_per_row: int = 5,
                         levels: Sequence[str] = LEVEL_CODES[:4], sides_per_level: int = 2,
                         with_zones: bool = True) -> List[LocationRecord]:
    """
    Synthetic stock.location records for a rack warehouse:
    WH / Stock / row / bay / level [/ side]. With one side per level the
    level itself is the bin.
    """
    records = []
    next_id = iter(range(1, 1_000_000))

    def add(name, complete_name, parent_id, usage="view", **extra):
        rec = LocationRecord(
            id=next(next_id), name=name, complete_name=complete_name, usage=usage,
            parent_id=parent_id, warehouse_id=warehouse_id, **extra,
        )
        records.append(rec)
        return rec.id

    wh_id = add(code, code, None)
    stock_id = add("Stock", f"{code}/Stock", wh_id)
    for row in ROW_CODES[:num_rows]:
        row_path = f"{code}/Stock/{row}"
        row_id = add(row, row_path, stock_id)
        for bay in range(1, bays_per_row + 1):
            bay_name = f"{bay:02d}"
            bay_id = add(bay_name, f"{row_path}/{bay_name}", row_id)
            for level in levels:
                level_path = f"{row_path}/{bay_name}/{level}"
                if sides_per_level == 1:
                    add(level, level_path, bay_id, usage="internal")
                    continue
                level_id = add(level, level_path, bay_id)
                for side in range(1, sides_per_level + 1):
                    side_name = f"{side:02d}"
                    add(side_name, f"{level_path}/{side_name}", level_id, usage="internal")

    if with_zones:
        add("Dock 1", f"{code}/Stock/Dock 1", stock_id, usage="internal", is_a_dock=True)
        add("Dock 2", f"{code}/Stock/Dock 2", stock_id, usage="internal", is_a_dock=True)
        qc_id = add("Quality Control", f"{code}/Stock/Quality Control", stock_id, usage="internal")
        add("Hold", f"{code}/Stock/Quality Control/Hold", qc_id, usage="internal")
        add("Scrap", f"{code}/Stock/Scrap", stock_id, usage="internal", scrap_location=True)
    return records


def gen_pick_requests(records: Sequence[LocationRecord], num_lines: int,
                      rng: random.Random) -> Tuple[List[MoveLine], List[Quant]]:
    """Random move lines, each backed by a quant in a random internal bin."""
    bins = [r for r in records if r.usage == "internal" and r.complete_name.count("/") >= 4]
    lines, quants = [], []
    for i, loc in enumerate(rng.sample(bins, min(num_lines, len(bins))), start=1):
        qty = rng.randint(1, 10)
        lines.append(MoveLine(
            id=i, product_id=100 + i, product_name=f"Product {i:03d}", quantity=qty,
            location_id=loc.id, location_name=loc.complete_name,
        ))
        quants.append(Quant(product_id=100 + i, location_id=loc.id, location_name=loc.complete_name,
                            quantity=qty + rng.randint(0, 20)))
    return lines, quants
