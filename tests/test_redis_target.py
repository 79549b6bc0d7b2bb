import pytest

from mover_errors import UsageError
from redis_target import connect, parse_dbspec, parse_target


def test_plain_address_defaults_to_db_zero():
    target = parse_target("localhost:6379")
    assert target.host == "localhost"
    assert target.port == 6379
    assert target.dbs == (0,)
    assert target.password is None


def test_single_db():
    assert parse_target("redis.internal:6380@3").dbs == (3,)


def test_db_list_keeps_order_and_drops_duplicates():
    assert parse_target("localhost:6379@2,0,2,1").dbs == (2, 0, 1)


def test_non_numeric_entries_in_list_are_skipped():
    assert parse_dbspec("0,abc,,-1,4") == (0, 4)
    assert parse_dbspec("0,²,٣,4") == (0, 4)
    assert parse_target("localhost:6379@0,²").dbs == (0,)


def test_non_numeric_single_db_selects_zero():
    assert parse_dbspec("abc") == (0,)


def test_list_without_valid_entries_selects_zero():
    assert parse_dbspec("x,y") == (0,)


def test_password_prefix():
    target = parse_target("s3cret@localhost:6379@1")
    assert target.password == "s3cret"
    assert target.username is None
    assert target.address == "localhost:6379"
    assert target.dbs == (1,)


def test_user_and_password_without_db():
    target = parse_target("admin:pa@ss@db.example:6379")
    assert target.username == "admin"
    assert target.password == "pa@ss"
    assert target.host == "db.example"
    assert target.dbs == (0,)


@pytest.mark.parametrize("value", ["", "   ", "localhost", ":6379", "localhost:port", "localhost:70000"])
def test_invalid_targets(value):
    with pytest.raises(UsageError):
        parse_target(value)


def test_connect_builds_decoding_client():
    target = parse_target("u:p@localhost:6390@5")
    client = connect(target, 5)
    kwargs = client.connection_pool.connection_kwargs
    assert kwargs["host"] == "localhost"
    assert kwargs["port"] == 6390
    assert kwargs["db"] == 5
    assert kwargs["username"] == "u"
    assert kwargs["password"] == "p"
    assert kwargs["decode_responses"] is True
