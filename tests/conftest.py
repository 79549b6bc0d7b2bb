import fnmatch

import pytest
import redis


class InMemoryRedis:
    """Just enough of redis.Redis (decode_responses=True) for the mover."""

    def __init__(self, strings=None, others=None):
        self.strings = dict(strings or {})
        # keys holding non-string types
        self.others = dict(others or {})
        self.calls = []
        self.fail_on = {}
        self.closed = False

    def _call(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail_on:
            raise self.fail_on[name]

    def keys(self, pattern="*"):
        self._call("keys", pattern)
        names = list(self.strings) + list(self.others)
        return [k for k in names if fnmatch.fnmatchcase(k, pattern)]

    def get(self, key):
        self._call("get", key)
        if key in self.others:
            raise redis.exceptions.ResponseError(
                "WRONGTYPE Operation against a key holding the wrong kind of value"
            )
        return self.strings.get(key)

    def set(self, key, value):
        self._call("set", key, value)
        self.others.pop(key, None)
        self.strings[key] = value
        return True

    def close(self):
        self.closed = True


class Cluster:
    """Hands out one InMemoryRedis per db index, records every connect."""

    def __init__(self, **dbs):
        self.dbs = {}
        for name, strings in dbs.items():
            self.dbs[int(name.lstrip("db"))] = InMemoryRedis(strings)
        self.connects = []

    def __getitem__(self, db):
        return self.dbs.setdefault(db, InMemoryRedis())

    def connect(self, target, db):
        self.connects.append((target.address, db))
        return self[db]


@pytest.fixture
def cluster():
    return Cluster(
        db0={"user:1": "alice", "user:2": "bob", "order:1": "x"},
        db1={"session:9": "tokén"},
    )


@pytest.fixture(autouse=True)
def no_env_target(monkeypatch):
    monkeypatch.delenv("REDIS_MOVER_REDIS", raising=False)
