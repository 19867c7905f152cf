import pytest

from minisqlnet.rc import RC, strrc


def test_primary_codes_fixed_by_source():
    assert RC(0) is RC.SUCCESS
    assert RC(100) is RC.NOTICE
    assert strrc(0) == "SUCCESS"
    assert strrc(100) == "NOTICE"


def test_strrc_success():
    assert strrc(RC.SUCCESS) == "SUCCESS"


def test_strrc_accepts_plain_int():
    assert strrc(int(RC.SQL_SYNTAX)) == "SQL_SYNTAX"


@pytest.mark.parametrize("code", [-1, 31, 99, 999999])
def test_strrc_unknown(code):
    assert strrc(code) == "UNKNOWN"


def test_strrc_names_every_member():
    for member in RC:
        assert strrc(member) == member.name


def test_values_are_unique():
    names = [strrc(int(m)) for m in RC]
    assert "UNKNOWN" not in names
    assert len(names) == len(set(names))


def test_extended_codes_keep_base_in_low_byte():
    assert strrc(int(RC.BUFFERPOOL_EXIST) & 0xFF) == "BUFFERPOOL"
    assert strrc(int(RC.IOERR_OPEN_TOO_MANY_FILES) & 0xFF) == "IOERR"
    assert strrc(int(RC.AUTH_USER) & 0xFF) == "AUTH"
    assert strrc(int(RC.NOTICE_AUTOINDEX) & 0xFF) == "NOTICE"
    assert RC.BUFFERPOOL_EXIST.base is RC.BUFFERPOOL
    assert RC.IOERR_OPEN_TOO_MANY_FILES.base is RC.IOERR
    assert RC.AUTH_USER.base is RC.AUTH
    assert RC.NOTICE_AUTOINDEX.base is RC.NOTICE


def test_extended_codes_share_prefix_with_base():
    for member in RC:
        if member.detail:
            assert strrc(member).startswith(strrc(member.base) + "_")


def test_detail_numbering_follows_declaration_order():
    assert strrc(int(RC.BUFFERPOOL) | (1 << 8)) == "BUFFERPOOL_EXIST"
    assert strrc(int(RC.BUFFERPOOL) | (2 << 8)) == "BUFFERPOOL_FILEERR"
    assert strrc(int(RC.SCHEMA) | (16 << 8)) == "SCHEMA_INDEX_NAME_ILLEGAL"
    assert strrc(int(RC.IOERR) | (29 << 8)) == "IOERR_OPEN_TOO_MANY_FILES"
    assert RC.BUFFERPOOL_EXIST.detail == 1
    assert RC.IOERR_OPEN_TOO_MANY_FILES.detail == 29


def test_primary_codes_have_no_detail():
    assert RC.SUCCESS.detail == 0
    assert RC.NOTADB.detail == 0
    assert strrc(RC.NOTICE.base) == "NOTICE"
    assert strrc(RC.NOTADB.base) == "NOTADB"


def test_round_trip_through_int():
    for member in RC:
        assert RC(int(member)) is member
        assert RC[strrc(int(member))] is member