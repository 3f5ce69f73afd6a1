from __future__ import annotations
import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import List, Union

import fitz

from errors import ExtractionFailure
from extract.native_text import native_page_to_runs
from layout.classes import PageRuns, TextRun

log = logging.getLogger(__name__)


def _read_bytes(source: Union[str, Path, bytes]) -> bytes:
    if isinstance(source, (bytes, bytearray)):
        return bytes(source)
    try:
        return Path(source).read_bytes()
    except OSError as e:
        raise ExtractionFailure(None, f"cannot read {source}: {e}") from e


def _decode_page(data: bytes, page_idx: int) -> PageRuns:
    # each call opens its own document so pages can be decoded on worker threads
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            return native_page_to_runs(doc.load_page(page_idx), page_number=page_idx + 1)
    except Exception as e:
        raise ExtractionFailure(page_idx + 1, f"{type(e).__name__}: {e}") from e


def extract_pdf_to_pages(source: Union[str, Path, bytes], workers: int = 1) -> List[PageRuns]:
    """
    Decode every page of a PDF into positioned text runs.
    Pages come back in document order whatever the worker count.
    Raises ExtractionFailure when the decoder fails or the document has no text at all.
    """
    data = _read_bytes(source)
    try:
        with fitz.open(stream=data, filetype="pdf") as doc:
            page_count = doc.page_count
    except Exception as e:
        raise ExtractionFailure(None, f"{type(e).__name__}: {e}") from e

    if page_count == 0:
        raise ExtractionFailure(None, "document has no pages")

    if workers and workers > 1 and page_count > 1:
        with ThreadPoolExecutor(max_workers=workers) as pool:
            pages = list(pool.map(lambda i: _decode_page(data, i), range(page_count)))
    else:
        pages = [_decode_page(data, i) for i in range(page_count)]

    total = sum(len(p.runs) for p in pages)
    log.info("decoded %d page(s), %d text runs", page_count, total)
    if total == 0:
        raise ExtractionFailure(None, "no text content (scanned or empty document)")
    return pages


def merge_pages(pages: List[PageRuns]) -> List[TextRun]:
    """
    Concatenate pages into one top-down coordinate space.
    Page k is shifted by the heights of pages 1..k-1; bottom-origin pages are flipped.
    """
    merged: List[TextRun] = []
    offset = 0.0
    for page in sorted(pages, key=lambda p: p.page_number):
        for r in page.runs:
            y = r.y
            if page.origin == "bottom":
                y = page.height - r.y - r.height
            merged.append(TextRun(
                text=r.text,
                x=r.x,
                y=y + offset,
                width=r.width,
                height=r.height,
                font_size=r.font_size,
                font_name=r.font_name,
                page=page.page_number,
            ))
        offset += page.height
    return merged
