# extract/native_text.py
from __future__ import annotations
from typing import List

from layout.classes import TextRun, PageRuns


def native_page_to_runs(page, page_number: int) -> PageRuns:
    """
    Use native PDF text and emit one TextRun per span, the way a viewer's
    text layer sees it: a span keeps '78 615 440' together when the PDF
    typeset it in one show operation.
    PyMuPDF already reports top-left origin coordinates in points.
    """
    rect = page.rect
    info = page.get_text("dict") or {}

    runs: List[TextRun] = []
    for block in info.get("blocks", []) or []:
        if block.get("type", 0) != 0:      # image blocks
            continue
        for line in block.get("lines", []) or []:
            for span in line.get("spans", []) or []:
                txt = (span.get("text") or "").strip()
                if not txt:
                    continue
                x0, y0, x1, y1 = span.get("bbox", (0, 0, 0, 0))
                runs.append(TextRun(
                    text=txt,
                    x=float(x0),
                    y=float(y0),
                    width=max(0.0, float(x1) - float(x0)),
                    height=max(0.0, float(y1) - float(y0)),
                    font_size=float(span.get("size") or 0.0),
                    font_name=str(span.get("font") or "unknown"),
                    page=page_number,
                ))

    return PageRuns(
        page_number=page_number,
        width=float(rect.width),
        height=float(rect.height),
        runs=runs,
        origin="top",
    )
