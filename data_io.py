import pandas as pd
from typing import List

from models import LocationRecord
from picking import MoveLine, Quant

# Expected schemas (extra columns are ignored)
# locations.csv: id:int, name:str, complete_name:str, usage:str,
#                [parent_id:int, warehouse_id:int, posx, posy, posz,
#                 scrap_location:bool, is_a_dock:bool, zone_type:str]
# quants.csv: product_id:int, location_id:int, quantity:float, [location_name:str]
# move_lines.csv: id:int, product_id:int, product_name:str, quantity:float,
#                 location_id:int, location_name:str


def _require(df: pd.DataFrame, needed, what: str):
    missing = set(needed) - set(df.columns)
    if missing:
        raise ValueError(f"{what} missing columns: {sorted(missing)}")


def _clean(value):
    return None if pd.isna(value) else value


def records_from_frame(df: pd.DataFrame) -> List[LocationRecord]:
    _require(df, {"id", "name", "complete_name", "usage"}, "locations")
    records = []
    for row in df.to_dict("records"):
        raw = {k: _clean(v) for k, v in row.items()}
        for key in ("parent_id", "warehouse_id"):
            if raw.get(key) is not None:
                raw[key] = int(raw[key])
        records.append(LocationRecord.from_odoo(raw))
    return records


def check_stock_frame(df: pd.DataFrame) -> pd.DataFrame:
    # stock roll-up only needs where and how much
    _require(df, {"location_id", "quantity"}, "quants")
    return df


def quants_from_frame(df: pd.DataFrame) -> List[Quant]:
    _require(df, {"product_id", "location_id", "quantity"}, "quants")
    if "location_name" not in df.columns:
        df = df.assign(location_name="")
    return [
        Quant(
            product_id=int(row["product_id"]),
            location_id=int(row["location_id"]),
            location_name=_clean(row["location_name"]) or "",
            quantity=float(row["quantity"]),
        )
        for row in df.to_dict("records")
    ]


def move_lines_from_frame(df: pd.DataFrame) -> List[MoveLine]:
    _require(df, {"id", "product_id", "product_name", "quantity", "location_id", "location_name"}, "move_lines")
    return [
        MoveLine(
            id=int(row["id"]),
            product_id=int(row["product_id"]),
            product_name=str(row["product_name"]),
            quantity=float(row["quantity"]),
            location_id=int(row["location_id"]),
            location_name=_clean(row["location_name"]) or "",
        )
        for row in df.to_dict("records")
    ]


def read_locations(path: str) -> List[LocationRecord]:
    return records_from_frame(pd.read_csv(path))


def read_quants(path: str) -> pd.DataFrame:
    df = pd.read_csv(path)
    _require(df, {"product_id", "location_id", "quantity"}, "quants")
    return df


def read_move_lines(path: str) -> List[MoveLine]:
    return move_lines_from_frame(pd.read_csv(path))
