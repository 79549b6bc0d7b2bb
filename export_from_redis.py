import json
import os

import redis

from dump_document import DumpDocument, build_payload, now
from mover_errors import ConflictError, DumpFileError, StoreError
from redis_target import connect


def _ignore(message):
    pass


def export_database(client, pattern="", report=_ignore, db=None):
    """Fetches every string key matching `pattern*` into a DumpDocument."""
    try:
        keys = client.keys(pattern + "*")
    except redis.exceptions.RedisError as e:
        raise StoreError(str(e))
    except UnicodeDecodeError as e:
        raise StoreError(f"Key name is not valid UTF-8: {e}")

    doc = DumpDocument(dump_start=now(), db=db)
    total_bytes = 0
    for key in keys:
        try:
            value = client.get(key)
        except redis.exceptions.RedisError as e:
            raise StoreError(str(e))
        except UnicodeDecodeError:
            raise StoreError(f"Value of key {key} is not valid UTF-8")
        if value is None:
            raise StoreError(f"Key {key} disappeared during export")
        if key in doc.data:
            raise ConflictError(f"Conflicting key: {key}", key)

        size = len(value.encode("utf-8"))
        total_bytes += size
        report(f"Exporting key: {key} (len: {size})")
        doc.data[key] = value

    doc.dump_end = now()
    report(f"Fetched {len(doc)} keys ({total_bytes} bytes)")
    return doc


def export_databases(target, pattern="", connect=connect, report=_ignore):
    """Exports each database of the target, in the order they were given."""
    documents = {}
    for db in target.dbs:
        client = connect(target, db)
        try:
            documents[db] = export_database(client, pattern, report, db=db)
        finally:
            client.close()
    return documents


def check_destination(output_file):
    if os.path.exists(output_file):
        raise DumpFileError(f"{output_file} already exists. Aborting...")


def write_dump(output_file, payload):
    """Writes the payload as indented JSON, never replacing an existing file."""
    text = json.dumps(payload, ensure_ascii=False, indent=2)
    try:
        f = open(output_file, 'x', encoding='utf-8')
    except FileExistsError:
        raise DumpFileError(f"{output_file} already exists. Aborting...")
    except OSError as e:
        raise DumpFileError(str(e))

    try:
        with f:
            f.write(text)
    except OSError as e:
        # no partial dump is left behind
        os.remove(output_file)
        raise DumpFileError(str(e))


def export_to_json(target, output_file, pattern="", connect=connect, report=_ignore):
    """Exports the target's databases to `output_file`.

    Returns the exported documents keyed by database index. Nothing is
    written unless every key of every database was fetched.
    """
    check_destination(output_file)
    documents = export_databases(target, pattern, connect=connect, report=report)
    write_dump(output_file, build_payload(documents))
    return documents
