"""
Streaming XML extractor

Turns elements of a possibly huge XML extract into ingest rows without
holding the document in memory.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Any, BinaryIO, Dict, Iterator, Optional
from tqdm import tqdm
from schemas.record import RecordSchema
from core.exceptions import DecodeError
import logging

logger = logging.getLogger(__name__)


def local_name(tag: str) -> str:
    """Strip the namespace from an ElementTree tag"""
    return tag.rsplit("}", 1)[-1]


class XMLExtractor:
    """
    Extract rows for one record schema from an XML byte stream.

    Parsing is incremental: every finished element is detached from its
    parent, so the working set is bounded by the element being decoded.
    The row sequence is lazy, finite and not restartable.
    """

    def __init__(
        self,
        schema: RecordSchema,
        element_name: Optional[str] = None,
        show_progress: bool = False
    ):
        self.schema = schema
        self.element_name = element_name or schema.element
        self.show_progress = show_progress

    def iter_rows(self, stream: BinaryIO, source_name: str = "<stream>") -> Iterator[Dict[str, Any]]:
        """
        Yield one row per element whose local name matches.

        Raises:
            DecodeError: On a malformed token stream. Rows yielded before the
                failure are not retracted.
        """
        rows_decoded = 0
        open_elements = []
        parser = ET.iterparse(stream, events=("start", "end"))

        try:
            for event, elem in parser:
                if event == "start":
                    open_elements.append(elem)
                    continue

                open_elements.pop()
                if local_name(elem.tag) == self.element_name:
                    row = self.schema.to_row(elem.attrib)
                    rows_decoded += 1
                    yield row

                elem.clear()
                if open_elements:
                    open_elements[-1].remove(elem)

        except ET.ParseError as e:
            raise DecodeError(
                f"Malformed XML in {source_name}",
                context={
                    "file_path": source_name,
                    "element_name": self.element_name,
                    "position": getattr(e, "position", None),
                    "rows_decoded": rows_decoded
                },
                original_exception=e
            )

        logger.debug(f"Decoded {rows_decoded} <{self.element_name}> elements from {source_name}")

    def extract_file(self, path: Path, size: Optional[int] = None) -> Iterator[Dict[str, Any]]:
        """
        Open an extract and yield its rows, reporting read progress in bytes.

        The file is closed when the sequence is exhausted, fails or is closed.
        """
        path = Path(path)
        total = size if size is not None else path.stat().st_size

        logger.info(f"Opening {path.name} ({total} bytes) for <{self.element_name}>")

        with open(path, "rb") as raw:
            with tqdm.wrapattr(
                raw,
                "read",
                total=total,
                desc=path.name,
                disable=not self.show_progress
            ) as stream:
                yield from self.iter_rows(stream, source_name=str(path))
