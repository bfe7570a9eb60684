"""
lexsearch command line

Subcommands:
    index <folder> [-o index.json] [--workers N]   Index a folder and save the index
    check <index-file>                              Report how many documents are indexed
    search <index-file> <query...> [--top N]        Print ranked results for a query
    serve <index-file> [address]                    Start the HTTP search server

Every failure is logged and turned into exit code 1.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import get_settings, parse_address
from .document_processor import DocumentProcessor
from .errors import MalformedQuery, SearchError
from .file_walker import extract_documents, iter_documents, iter_supported_files, split_shards
from .logging_config import setup_logging
from .storage import IndexStore
from .tfidf.index_builder import accumulate, build_index_sharded
from .tfidf.scorer import rank

logger = logging.getLogger(__name__)


def cmd_index(args: argparse.Namespace) -> int:
    if not Path(args.folder).exists():
        logger.error(f"Could not open directory {args.folder} for indexing: not found")
        return 1

    processor = DocumentProcessor()

    if args.workers > 1:
        paths = list(iter_supported_files(args.folder, processor))
        shards = [extract_documents(shard, processor) for shard in split_shards(paths, args.workers)]
        model, stats = build_index_sharded(shards, max_workers=args.workers)
    else:
        accumulator = accumulate(iter_documents(args.folder, processor))
        model = accumulator.finish()
        stats = accumulator.stats

    logger.info(
        f"Indexed {stats.indexed} files ({stats.skipped} skipped), "
        f"{stats.unique_terms} unique terms"
    )
    IndexStore(args.output).save(model)
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    model = IndexStore(args.index_file).load()
    print(f"{args.index_file} contains {model.document_count} files")
    return 0


def join_query(words: List[str]) -> str:
    """
    Join argv words into query text

    Raises:
        MalformedQuery: argv held bytes that are not valid UTF-8
    """
    query = " ".join(words)
    try:
        query.encode('utf-8')
    except UnicodeEncodeError as e:
        raise MalformedQuery(f"Query must be a valid UTF-8 string: {e}") from e
    return query


def cmd_search(args: argparse.Namespace) -> int:
    query = join_query(args.query)
    model = IndexStore(args.index_file).load()

    for doc_id, value in rank(model, query)[:args.top]:
        print(f"    {doc_id} => {value}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn
    from .main import create_app

    settings = get_settings()
    host, port = parse_address(args.address or settings.address)

    model = IndexStore(args.index_file).load()
    app = create_app(model=model, settings=settings)

    logger.info(f"Listening at: http://{host}:{port}/")
    uvicorn.run(app, host=host, port=port, log_config=None)
    return 0


def build_parser() -> argparse.ArgumentParser:
    settings = get_settings()

    parser = argparse.ArgumentParser(
        prog="lexsearch",
        description="Index local documents and search them with TF-IDF",
    )
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")
    parser.add_argument('--debug', action='store_true', help='Verbose console logging')
    subparsers = parser.add_subparsers(dest='command', metavar='SUBCOMMAND')
    subparsers.required = True

    index_parser = subparsers.add_parser('index', help='Index a folder and save the index file')
    index_parser.add_argument('folder', help='Folder (or file) to index')
    index_parser.add_argument('-o', '--output', default=str(settings.index_path),
                              help=f'Index file to write (default: {settings.index_path})')
    index_parser.add_argument('--workers', type=int, default=1,
                              help='Parallel indexing shards (default: 1)')
    index_parser.set_defaults(handler=cmd_index)

    check_parser = subparsers.add_parser('check', help='Report how many documents an index contains')
    check_parser.add_argument('index_file', help='Path to index file')
    check_parser.set_defaults(handler=cmd_check)

    search_parser = subparsers.add_parser('search', help='Search an index from the command line')
    search_parser.add_argument('index_file', help='Path to index file')
    search_parser.add_argument('query', nargs='+', help='Query text')
    search_parser.add_argument('--top', type=int, default=settings.top_n,
                               help=f'Number of results to print (default: {settings.top_n})')
    search_parser.set_defaults(handler=cmd_search)

    serve_parser = subparsers.add_parser('serve', help='Start the HTTP search server')
    serve_parser.add_argument('index_file', help='Path to index file')
    serve_parser.add_argument('address', nargs='?', default=None,
                              help=f'host:port to listen on (default: {settings.address})')
    serve_parser.set_defaults(handler=cmd_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    settings = get_settings()
    setup_logging(
        log_file=settings.log_file,
        console_level=logging.DEBUG if args.debug else settings.console_level,
    )

    if getattr(args, 'workers', 1) < 1:
        logger.error(f"--workers must be >= 1, got {args.workers}")
        return 1

    try:
        return args.handler(args)
    except SearchError as e:
        logger.error(f"{e}")
        return 1
    except (OSError, ValueError) as e:
        logger.error(f"{type(e).__name__}: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
