"""
Dump document: the JSON layout shared by export and import.

Single database:
    {"dump_start": ..., "dump_end": ..., "db": 0, "data": {"key": "value"}}

Several databases:
    {"0": {"dump_start": ..., "dump_end": ..., "data": {...}}, "1": {...}}
"""

from datetime import datetime

from mover_errors import DumpFileError


def now():
    """Local wall-clock time with its UTC offset (RFC 3339 when formatted)."""
    return datetime.now().astimezone()


class DumpDocument:
    def __init__(self, dump_start=None, dump_end=None, data=None, db=None):
        self.dump_start = dump_start
        self.dump_end = dump_end
        self.data = data if data is not None else {}
        self.db = db

    def __len__(self):
        return len(self.data)

    def to_dict(self, include_db=True):
        doc = {
            "dump_start": _format_time(self.dump_start),
            "dump_end": _format_time(self.dump_end),
        }
        if include_db and self.db is not None:
            doc["db"] = self.db
        doc["data"] = self.data
        return doc

    @classmethod
    def from_dict(cls, raw):
        if not isinstance(raw, dict):
            raise DumpFileError("Dump file must contain a JSON object")
        if "data" not in raw:
            if raw and all(isinstance(v, dict) and "data" in v for v in raw.values()):
                raise DumpFileError(
                    f"Dump file holds {len(raw)} databases ({', '.join(raw)}); "
                    "import takes a single-database dump"
                )
            raise DumpFileError("Dump file has no 'data' section")

        data = raw["data"]
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise DumpFileError("'data' must be a JSON object")
        for key, value in data.items():
            if not isinstance(value, str):
                raise DumpFileError(f"Value of key {key} is not a string")

        db = raw.get("db")
        if db is not None and (isinstance(db, bool) or not isinstance(db, int)):
            raise DumpFileError(f"Invalid db index: {db!r}")

        return cls(
            dump_start=_parse_time(raw.get("dump_start")),
            dump_end=_parse_time(raw.get("dump_end")),
            data=data,
            db=db,
        )


def build_payload(documents):
    """Pick the on-disk layout from the number of exported databases.

    `documents` is an ordered mapping of database index to DumpDocument.
    """
    if len(documents) == 1:
        (doc,) = documents.values()
        return doc.to_dict()
    return {str(db): doc.to_dict(include_db=False) for db, doc in documents.items()}


def _format_time(value):
    if value is None:
        return None
    return value.isoformat()


def _parse_time(value):
    if value is None:
        return None
    if not isinstance(value, str):
        raise DumpFileError(f"Invalid timestamp: {value!r}")
    # fromisoformat takes at most microseconds and no trailing Z
    text = value.replace("Z", "+00:00")
    if "." in text:
        head, _, rest = text.partition(".")
        digits = ""
        while rest and rest[0].isdigit():
            digits, rest = digits + rest[0], rest[1:]
        text = f"{head}.{digits[:6].ljust(6, '0')}{rest}"
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise DumpFileError(f"Invalid timestamp: {value!r}")
