"""
Directory walker - flattens a folder tree into a lazy document stream.

Yields (doc_id, text) pairs for the index builder. The doc_id is the file
path as a string. Files whose extraction fails are logged and yielded with
text=None, so the index builder skips them and reports them as skipped.
Files with unsupported extensions are not documents and are ignored.
"""

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple, TypeVar, Union

from .document_processor import DocumentProcessor
from .errors import ExtractionFailure

logger = logging.getLogger(__name__)

T = TypeVar("T")


def iter_files(root: Union[str, Path]) -> Iterator[Path]:
    """
    Walk root and yield every regular file, in sorted order per directory.

    Unreadable directories are logged and skipped.
    """
    root = Path(root)
    if root.is_file():
        yield root
        return

    def on_error(error: OSError) -> None:
        logger.error(f"Could not read directory {error.filename}: {error.strerror}")

    for dirpath, dirnames, filenames in os.walk(root, onerror=on_error):
        dirnames.sort()
        for filename in sorted(filenames):
            yield Path(dirpath) / filename


def iter_supported_files(root: Union[str, Path], processor: DocumentProcessor) -> Iterator[Path]:
    for path in iter_files(root):
        if processor.supports(path.suffix):
            yield path
        else:
            logger.debug(f"Ignoring unsupported file: {path}")


def extract_documents(
    paths: Iterable[Path],
    processor: DocumentProcessor,
) -> Iterator[Tuple[str, Optional[str]]]:
    """
    Extract text for each path.

    A path that is not valid UTF-8 cannot be stored as a doc_id, so that
    file is skipped like a failed extraction.

    Yields:
        (path, extracted text) or (path, None) when extraction failed
    """
    for path in paths:
        doc_id = str(path)
        try:
            doc_id.encode('utf-8')
        except UnicodeEncodeError:
            logger.warning(f"Skipping {doc_id!r}: file name is not valid UTF-8")
            yield doc_id, None
            continue

        logger.info(f"Processing file: {path}")
        try:
            text = processor.extract_text_from_file(path)
        except ExtractionFailure as e:
            logger.warning(f"Skipping {e.doc_id}: {e.reason}")
            yield doc_id, None
            continue

        yield doc_id, text


def iter_documents(
    root: Union[str, Path],
    processor: Optional[DocumentProcessor] = None,
) -> Iterator[Tuple[str, Optional[str]]]:
    """
    Yield (doc_id, text) for every supported file under root.

    Args:
        root: Folder (or single file) to index
        processor: Text extractor (default DocumentProcessor())
    """
    processor = processor or DocumentProcessor()
    return extract_documents(iter_supported_files(root, processor), processor)


def split_shards(items: Sequence[T], count: int) -> List[List[T]]:
    """Split items into `count` contiguous, near-equal shards (order preserved)"""
    if count < 1:
        raise ValueError(f"shard count must be >= 1, got {count}")
    size, remainder = divmod(len(items), count)
    shards = []
    start = 0
    for i in range(count):
        end = start + size + (1 if i < remainder else 0)
        shards.append(list(items[start:end]))
        start = end
    return shards
