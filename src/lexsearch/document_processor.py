"""
Text extraction for indexing

Turns source files into the plain text the TF-IDF engine consumes:
1. XML / XHTML: character data of every element (attribute values dropped)
2. HTML: converted to plain Markdown-ish text with html2text
3. Text formats (txt, md, rst, csv, ...): decoded as UTF-8

Every failure is reported as ExtractionFailure so that the caller can skip
the document and keep indexing the rest.
"""

import logging
from pathlib import Path
from typing import Any, List, Union
from xml.parsers.expat import ExpatError

import html2text
import xmltodict

from .errors import ExtractionFailure

logger = logging.getLogger(__name__)

XML_TYPES = {'xml', 'xhtml', 'application/xml', 'text/xml', 'application/xhtml+xml'}
HTML_TYPES = {'html', 'htm', 'text/html'}
TEXT_TYPES = {
    'txt', 'text/plain',
    'md', 'markdown', 'text/markdown',
    'rst', 'text/x-rst',
    'csv', 'text/csv',
    'log', 'text/x-log',
    'yaml', 'yml', 'application/x-yaml', 'text/yaml',
    'toml', 'application/toml',
    'ini',
}


def normalize_file_type(file_type: str) -> str:
    """".XML" -> "xml"; MIME types are returned lowercased"""
    file_ext = file_type.lower()
    if file_ext.startswith('.'):
        file_ext = file_ext[1:]
    return file_ext


class DocumentProcessor:
    """Extract plain text from source documents"""

    def __init__(self, text_fallback_encoding: str = 'latin-1'):
        self.text_fallback_encoding = text_fallback_encoding

    def supports(self, file_type: str) -> bool:
        file_ext = normalize_file_type(file_type)
        return file_ext in XML_TYPES or file_ext in HTML_TYPES or file_ext in TEXT_TYPES

    def extract_text_from_xml(self, xml_source: bytes, doc_id: str = "<memory>") -> str:
        """
        Extract character data from an XML document

        Uses xmltodict to parse into nested dicts, then collects every text
        node (element text and #text in mixed content). Attributes (@-prefixed
        keys) are not part of the document text. Text runs split by child
        elements are joined with a space, and each text segment is followed by
        a single space, so adjacent elements never glue words together.

        Args:
            xml_source: XML bytes
            doc_id: Identifier used in error reports

        Returns:
            Concatenated text content

        Raises:
            ExtractionFailure: invalid UTF-8 or malformed XML
        """
        try:
            xml_string = xml_source.decode('utf-8')
        except UnicodeDecodeError as e:
            raise ExtractionFailure(doc_id, f"XML is not valid UTF-8: {e}") from e

        try:
            data = xmltodict.parse(
                xml_string,
                attr_prefix='@',
                cdata_key='#text',
                cdata_separator=' ',
                force_list=False
            )
        except ExpatError as e:
            raise ExtractionFailure(doc_id, f"malformed XML at line {e.lineno}, column {e.offset}: {e}") from e

        segments: List[str] = []
        _collect_text(data, segments)
        text = ''.join(f"{segment} " for segment in segments)
        logger.debug(f"Extracted {len(text)} chars from XML {doc_id}")
        return text

    def extract_text_from_html(self, html_source: bytes, doc_id: str = "<memory>") -> str:
        """
        Convert HTML into readable text with html2text

        Links and images are dropped: only visible text is indexed.
        """
        html_string = html_source.decode('utf-8', errors='replace')

        converter = html2text.HTML2Text()
        converter.ignore_links = True
        converter.ignore_images = True
        converter.body_width = 0  # No line wrapping
        converter.ignore_emphasis = True

        text = converter.handle(html_string)
        logger.debug(f"Extracted {len(text)} chars from HTML {doc_id}")
        return text

    def extract_text_from_txt(self, txt_source: bytes, doc_id: str = "<memory>") -> str:
        try:
            return txt_source.decode('utf-8')
        except UnicodeDecodeError:
            # Single-byte fallback never fails
            logger.warning(f"UTF-8 decode failed for {doc_id}, using {self.text_fallback_encoding}")
            return txt_source.decode(self.text_fallback_encoding, errors='replace')

    def extract_text(self, file_content: bytes, file_type: str, doc_id: str = "<memory>") -> str:
        """
        Extract text from file content based on type

        Args:
            file_content: File content as bytes
            file_type: File extension (.xml, .txt) or MIME type
            doc_id: Identifier used in error reports

        Returns:
            Extracted plain text

        Raises:
            ExtractionFailure: unsupported type or unparseable content
        """
        file_ext = normalize_file_type(file_type)

        if file_ext in XML_TYPES:
            return self.extract_text_from_xml(file_content, doc_id)

        elif file_ext in HTML_TYPES:
            return self.extract_text_from_html(file_content, doc_id)

        elif file_ext in TEXT_TYPES:
            return self.extract_text_from_txt(file_content, doc_id)

        else:
            raise ExtractionFailure(doc_id, f"unsupported file type: {file_type}")

    def extract_text_from_file(self, path: Union[str, Path]) -> str:
        """Read a file and extract its text, type taken from the suffix"""
        path = Path(path)
        try:
            content = path.read_bytes()
        except OSError as e:
            raise ExtractionFailure(str(path), f"could not read file: {e}") from e
        return self.extract_text(content, path.suffix, doc_id=str(path))


def _collect_text(node: Any, segments: List[str]) -> None:
    if node is None:
        return
    if isinstance(node, str):
        segments.append(node)
    elif isinstance(node, dict):
        for key, value in node.items():
            if key.startswith('@'):
                continue
            _collect_text(value, segments)
    elif isinstance(node, list):
        for item in node:
            _collect_text(item, segments)
