import json

import redis

from dump_document import DumpDocument
from mover_errors import ConflictError, DumpFileError, StoreError, UsageError
from redis_target import connect


def _ignore(message):
    pass


def read_dump(input_file):
    """Loads a single-database dump written by the exporter."""
    try:
        with open(input_file, 'r', encoding='utf-8') as f:
            raw = json.load(f)
    except FileNotFoundError:
        raise DumpFileError(f"{input_file} does not exist")
    except json.JSONDecodeError as e:
        raise DumpFileError(f"{input_file} is not valid JSON: {e}")
    except (OSError, UnicodeDecodeError) as e:
        raise DumpFileError(str(e))
    return DumpDocument.from_dict(raw)


def _current_value(client, key):
    try:
        return client.get(key)
    except redis.exceptions.ResponseError as e:
        # WRONGTYPE: the key exists and holds a list, hash, ...
        if str(e).startswith("WRONGTYPE"):
            raise ConflictError(f"Key {key} already exists.", key)
        raise StoreError(str(e))
    except redis.exceptions.RedisError as e:
        raise StoreError(str(e))
    except UnicodeDecodeError:
        # binary value, so the key is taken
        raise ConflictError(f"Key {key} already exists.", key)


def import_document(client, document, report=_ignore):
    """Writes every key of `document`, stopping at the first existing key.

    Keys written before a conflict are left in place.
    """
    imported = 0
    for key, value in document.data.items():
        current = _current_value(client, key)
        if current:
            raise ConflictError(f"Key {key} already exists.", key)

        report(f"Importing key: {key} (len: {len(value.encode('utf-8'))})")
        try:
            client.set(key, value)
        except redis.exceptions.RedisError as e:
            raise StoreError(str(e))
        imported += 1
    return imported


def import_from_json(target, input_file, connect=connect, report=_ignore):
    """Imports `input_file` into the single database named by the target."""
    if len(target.dbs) != 1:
        raise UsageError(
            f"Import writes to a single database, got {len(target.dbs)}: "
            f"{','.join(str(db) for db in target.dbs)}"
        )
    document = read_dump(input_file)

    client = connect(target, target.dbs[0])
    try:
        return import_document(client, document, report)
    finally:
        client.close()
