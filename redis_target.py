"""Parse --redis connection targets and open clients for them.

Accepted forms:
    host:port
    host:port@N
    host:port@N1,N2,...
    password@host:port[@...]
    user:password@host:port[@...]
"""

import redis

from mover_errors import UsageError


class RedisTarget:
    def __init__(self, host, port, dbs=(0,), username=None, password=None):
        self.host = host
        self.port = port
        self.dbs = tuple(dbs)
        self.username = username
        self.password = password

    @property
    def address(self):
        return f"{self.host}:{self.port}"

    def __repr__(self):
        return f"RedisTarget({self.address}, dbs={list(self.dbs)})"


def parse_target(target):
    if not target or not target.strip():
        raise UsageError("Need redis url")
    target = target.strip()

    location, dbspec = target, None
    if "@" in target:
        head, tail = target.rsplit("@", 1)
        # host:port always has a colon, a db list never does
        if ":" not in tail:
            location, dbspec = head, tail

    username = password = None
    if "@" in location:
        credential, location = location.rsplit("@", 1)
        if ":" in credential:
            username, password = credential.split(":", 1)
            username = username or None
        else:
            password = credential
        password = password or None

    host, port = _split_address(location)
    return RedisTarget(host, port, parse_dbspec(dbspec), username, password)


def parse_dbspec(dbspec):
    """Database indices from the part after '@'.

    A lone value that is not a number selects db 0. In a comma-separated
    list, entries that are not non-negative integers are skipped.
    """
    if dbspec is None or not dbspec.strip():
        return (0,)

    if "," not in dbspec:
        index = _to_index(dbspec)
        return (index if index is not None else 0,)

    dbs = []
    for part in dbspec.split(","):
        index = _to_index(part)
        if index is None or index in dbs:
            continue
        dbs.append(index)
    return tuple(dbs) if dbs else (0,)


def connect(target, db):
    """Client scoped to a single logical database."""
    return redis.Redis(
        host=target.host,
        port=target.port,
        db=db,
        username=target.username,
        password=target.password,
        decode_responses=True,
    )


def _to_index(text):
    text = text.strip()
    if not (text.isascii() and text.isdecimal()):
        return None
    return int(text)


def _split_address(location):
    host, sep, port = location.rpartition(":")
    if not sep or not host:
        raise UsageError(f"Invalid redis address: {location} (expected host:port)")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    try:
        port = int(port)
    except ValueError:
        raise UsageError(f"Invalid redis port: {port}")
    if not 0 < port < 65536:
        raise UsageError(f"Invalid redis port: {port}")
    return host, port
