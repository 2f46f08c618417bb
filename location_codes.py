import re
from typing import List, Optional, Tuple

from models import LAYOUT, ParsedLocationCode, WarehouseCfg

# Shelf levels bottom to top
LEVEL_CODES = ("AA", "AB", "AC", "AD", "AE", "AF", "AG")

# Rows in floor order; consecutive pairs stand back to back (AG+AH, AI+AJ, ...)
ROW_CODES = ("AG", "AH", "AI", "AJ", "AK", "AL", "AM", "AN",
             "AO", "AP", "AQ", "AR", "AS", "AT", "AU", "AV")

_CODE_RE = re.compile(r"^([A-Z]{2})(\d{2})([A-Z]{2})(\d{2})$")
_EMBEDDED_CODE_RE = re.compile(r"[A-Z]{2}\d{2}[A-Z]{2}\d{2}")


def parse_location_code(code: str, wh: WarehouseCfg = LAYOUT) -> Optional[ParsedLocationCode]:
    """
    Parse a bin code like "AR14AF01" (row, bay, level, side).
    Returns None when the grammar or any field domain does not match.
    """
    match = _CODE_RE.match(code or "")
    if not match:
        return None
    row, bay_str, level, side_str = match.groups()
    bay = int(bay_str)
    side = int(side_str)
    if level not in LEVEL_CODES:
        return None
    if bay < 1 or bay > wh.bays_per_row:
        return None
    if side not in (1, 2):
        return None
    return ParsedLocationCode(row=row, bay=bay, level=level, side=side)


def format_location_code(parsed: ParsedLocationCode) -> str:
    return f"{parsed.row}{parsed.bay:02d}{parsed.level}{parsed.side:02d}"


def is_valid_code(code: str, wh: WarehouseCfg = LAYOUT) -> bool:
    return parse_location_code(code, wh) is not None


def row_index(row: str) -> int:
    # Unknown rows collapse onto index 0 and share its position.
    try:
        return ROW_CODES.index(row)
    except ValueError:
        return 0


def level_index(level: str) -> int:
    try:
        return LEVEL_CODES.index(level)
    except ValueError:
        return 0


def row_pair(row: str) -> Tuple[int, bool]:
    """(pair index, is second row of the back-to-back pair)"""
    idx = row_index(row)
    return idx // 2, idx % 2 == 1


def build_location_code(path: List[str], root_depth: int = LAYOUT.root_depth) -> Optional[str]:
    """
    Build a code from the path segments below the container.
    Row/Bay/Level/Side paths map directly; Row/Bay/Level paths are a level
    that is itself the bin, so side is taken as 01.
    """
    parts = path[root_depth:]
    if len(parts) == 4:
        row, bay, level, side = parts
        return f"{row}{bay.zfill(2)}{level}{side.zfill(2)}"
    if len(parts) == 3:
        row, bay, level = parts
        return f"{row}{bay.zfill(2)}{level}01"
    return None


def find_code_in_text(text: str, wh: WarehouseCfg = LAYOUT) -> Optional[ParsedLocationCode]:
    """First valid bin code embedded anywhere in a location name."""
    for token in _EMBEDDED_CODE_RE.findall(text or ""):
        parsed = parse_location_code(token, wh)
        if parsed is not None:
            return parsed
    return None
