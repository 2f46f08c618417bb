from location_codes import (
    LEVEL_CODES,
    ROW_CODES,
    build_location_code,
    find_code_in_text,
    format_location_code,
    is_valid_code,
    level_index,
    parse_location_code,
    row_index,
    row_pair,
)
from models import ParsedLocationCode


def test_parse_valid_code():
    parsed = parse_location_code("AR14AF01")
    assert parsed == ParsedLocationCode(row="AR", bay=14, level="AF", side=1)


def test_parse_rejects_out_of_domain_fields():
    assert parse_location_code("AR14AH01") is None   # level outside AA-AG
    assert parse_location_code("AR21AA01") is None   # bay > 20
    assert parse_location_code("AR00AA01") is None   # bay < 1
    assert parse_location_code("AR14AA03") is None   # side not 1/2
    assert parse_location_code("AR14AA00") is None


def test_parse_rejects_bad_grammar():
    for code in ["", "ar14aa01", "AR14AA1", "AR14AA011", "A114AA01", "AR-14-AA-01", None]:
        assert parse_location_code(code) is None


def test_unknown_row_still_parses():
    # rows outside the known list are valid codes; they just position at index 0
    parsed = parse_location_code("ZZ05AB02")
    assert parsed == ParsedLocationCode("ZZ", 5, "AB", 2)
    assert row_index("ZZ") == 0


def test_format_pads_bay_and_side():
    assert format_location_code(ParsedLocationCode("AG", 3, "AB", 2)) == "AG03AB02"


def test_round_trip():
    for row in ("AG", "AV", "QQ"):
        for bay in (1, 9, 10, 20):
            for level in LEVEL_CODES:
                for side in (1, 2):
                    p = ParsedLocationCode(row, bay, level, side)
                    assert parse_location_code(format_location_code(p)) == p


def test_indexes_and_pairs():
    assert row_index("AG") == 0
    assert row_index("AV") == len(ROW_CODES) - 1
    assert level_index("AA") == 0
    assert level_index("AG") == 6
    assert level_index("ZZ") == 0
    assert row_pair("AG") == (0, False)
    assert row_pair("AH") == (0, True)
    assert row_pair("AK") == (2, False)
    assert is_valid_code("AG01AA01")
    assert not is_valid_code("AG01AZ01")


def test_build_location_code_from_path():
    assert build_location_code(["WH", "Stock", "AG", "3", "AB", "2"]) == "AG03AB02"
    # level is the bin: side defaults to 01
    assert build_location_code(["WH", "Stock", "AG", "03", "AB"]) == "AG03AB01"
    assert build_location_code(["WH", "Stock", "AG", "03"]) is None
    assert build_location_code(["WH", "Stock", "A", "B", "C", "D", "E"]) is None


def test_find_code_in_text():
    assert find_code_in_text("Shelf AR14AF01 (front)") == ParsedLocationCode("AR", 14, "AF", 1)
    assert find_code_in_text("XX99ZZ99 then AG01AA02") == ParsedLocationCode("AG", 1, "AA", 2)
    assert find_code_in_text("WH/Stock") is None
