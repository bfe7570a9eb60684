"""
Local file storage for the persisted TF-IDF index

Layout: a single pretty-printed JSON document (see tfidf.codec).

Writes go to a temporary file in the same directory and are moved into
place with os.replace, so readers never observe a half-written index.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Union

from .tfidf import codec
from .tfidf.model import FrequencyModel

logger = logging.getLogger(__name__)


class IndexStore:
    """JSON file handler for a FrequencyModel"""

    def __init__(self, path: Union[str, Path] = "index.json"):
        self.path = Path(path)

    def __repr__(self) -> str:
        return f"IndexStore({str(self.path)!r})"

    def exists(self) -> bool:
        return self.path.is_file()

    def save(self, model: FrequencyModel) -> Path:
        """
        Serialize and atomically write the model

        Raises:
            OSError: directory not writable, disk full, etc.
        """
        logger.info(f"Saving {self.path}")
        payload = codec.dumps(model).encode('utf-8')

        directory = self.path.parent
        directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=directory)
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Wrote {len(payload)} bytes, {model.document_count} documents to {self.path}")
        return self.path

    def load(self, verify: bool = True) -> FrequencyModel:
        """
        Read and decode the model

        Args:
            verify: Check tf/df invariants while decoding

        Raises:
            OSError: file missing or unreadable
            CorruptIndex: content is not a valid index
        """
        logger.info(f"Reading {self.path} index file...")
        with open(self.path, "rb") as f:  # Bytes: codec owns decoding
            raw = f.read()

        model = codec.loads(raw, verify=verify)
        logger.info(f"{self.path} contains {model.document_count} files")
        return model
