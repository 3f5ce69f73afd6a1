from __future__ import annotations

from typing import Optional


class ExtractionFailure(RuntimeError):
    """Fatal decoder failure: the PDF could not be read or yielded no text."""

    def __init__(self, page: Optional[int], cause: str):
        self.page = page
        self.cause = cause
        where = f"page {page}" if page is not None else "document"
        super().__init__(f"Extraction failed on {where}: {cause}")


class DualStrategyFailure(RuntimeError):
    """Both extraction strategies raised."""

    def __init__(self, text_error: BaseException, geometric_error: BaseException):
        self.text_error = text_error
        self.geometric_error = geometric_error
        super().__init__(
            f"Both strategies failed. text: {type(text_error).__name__}: {text_error}; "
            f"geometric: {type(geometric_error).__name__}: {geometric_error}"
        )
