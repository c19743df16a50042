"""Seeding helpers shared by the test modules."""

import os
from pathlib import Path

NOW = 2_000_000


def seed_index(client, scores, index_key="mtime", prefix="file"):
    """Add `prefix:<score>` members scored by `score`; returns the keys."""
    keys = [f"{prefix}:{s}" for s in scores]
    client.zadd(index_key, {k: s for k, s in zip(keys, scores)})
    return keys


def seed_record(client, key, mtime, path):
    """Write a candidate hash the way the indexer does: both fields quoted."""
    client.hset(key, mapping={"mtime": f'"{mtime}"', "path": f'"{path}"'})


def make_old_file(directory: Path, name: str, mtime: int) -> Path:
    path = directory / name
    path.write_text("x")
    os.utime(path, (mtime, mtime))
    return path


def make_undecodable_file(directory: Path, mtime: int, raw_name: bytes = b"old\xff") -> bytes:
    """A file whose name is not valid UTF-8; returns its full path as bytes."""
    path = os.path.join(os.fsencode(directory), raw_name)
    with open(path, "wb") as f:
        f.write(b"x")
    os.utime(path, (mtime, mtime))
    return path


def seed_raw_record(client, key, mtime, raw_path: bytes):
    """Like seed_record, for keys and paths that only exist as bytes."""
    client.hset(key, mapping={b"mtime": b'"%d"' % mtime, b"path": b'"' + raw_path + b'"'})
