"""Shared pytest fixtures"""

import logging
import os

import pytest

from lexsearch.config import get_settings
from lexsearch.tfidf.index_builder import build_index


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch, tmp_path):
    """
    Keep every test away from the developer's environment.

    - No session log files written into the repo (LOG_FILE empty)
    - Settings cache cleared so monkeypatched env vars take effect
    - cwd moved to tmp_path so no .env / .env.local is picked up
    - Root logger handlers restored after CLI tests call setup_logging
    """
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_FILE", "")
    for name in ("LEXSEARCH_INDEX_PATH", "LEXSEARCH_ADDRESS", "LEXSEARCH_TOP_N", "LEXSEARCH_STATIC_DIR"):
        monkeypatch.delenv(name, raising=False)
    get_settings.cache_clear()

    root_logger = logging.getLogger()
    handlers, level = root_logger.handlers[:], root_logger.level
    yield
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)
    get_settings.cache_clear()


@pytest.fixture
def cat_corpus():
    """Two-document corpus from the worked ranking example (A: 3 tokens, B: 4 tokens)"""
    return [("A", "the cat sat"), ("B", "the cat ran ran")]


@pytest.fixture
def cat_model(cat_corpus):
    return build_index(cat_corpus)


@pytest.fixture
def gl_corpus():
    """Small OpenGL-flavoured corpus with numbers and punctuation"""
    return [
        ("docs/glBindBuffer.xml", "glBindBuffer - bind a named buffer object. glBindBuffer(GL_ARRAY_BUFFER, 0);"),
        ("docs/glBufferData.xml", "glBufferData - creates and initializes a buffer object's data store"),
        ("docs/glClear.xml", "glClear - clear buffers to preset values. Available in OpenGL 4.5"),
        ("docs/empty.xml", ""),
    ]


@pytest.fixture
def write_undecodable_name():
    """Create a file whose name is not valid UTF-8 (b'caf\\xe9.txt')"""
    def write(folder, content=b"cafe menu"):
        path = folder / os.fsdecode(b"caf\xe9.txt")
        try:
            path.write_bytes(content)
        except (OSError, UnicodeEncodeError):
            pytest.skip("filesystem rejects non-UTF-8 file names")
        return path
    return write
