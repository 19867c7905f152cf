from minisqlnet.session import Session


def test_defaults():
    s = Session()
    assert s.current_db == ""
    assert s.trx_multi_operation_mode is False


def test_default_session_is_shared():
    first = Session.default_session()
    original = first.current_db
    first.current_db = "shared"
    try:
        second = Session.default_session()
        assert second.current_db == "shared"
        assert second is first
    finally:
        first.current_db = original
    assert Session.default_session().current_db == original


def test_copy_keeps_database_only():
    s = Session(current_db="sys")
    s.trx_multi_operation_mode = True
    c = s.copy()
    assert c is not s
    assert c.current_db == "sys"
    assert c.trx_multi_operation_mode is False


def test_copy_is_independent():
    s = Session(current_db="sys")
    c = s.copy()
    c.current_db = "other"
    assert s.current_db == "sys"


def test_copy_of_default_session():
    base = Session.default_session()
    c = base.copy()
    assert c.current_db == base.current_db
    assert c is not base