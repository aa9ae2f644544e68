"""
PDF 文本提取（PyMuPDF）。

解析在工作线程中执行，避免阻塞事件循环。
任何解析失败都抛出 ExtractionError，不会返回静默的空结果。
"""

import asyncio
import logging
from dataclasses import dataclass

import fitz  # PyMuPDF

from exceptions import ExtractionError

logger = logging.getLogger("pdf_service.extraction")

PAGE_SEPARATOR = "\n\n"


@dataclass(frozen=True)
class ExtractionResult:
    text: str
    page_count: int

    @property
    def text_length(self) -> int:
        return len(self.text)


def extract_pdf_text(pdf_bytes: bytes) -> ExtractionResult:
    """同步提取全部页面文本和页数。"""
    if not pdf_bytes:
        raise ExtractionError("Empty PDF content")

    try:
        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
    except Exception as e:
        raise ExtractionError(f"Cannot open PDF: {e}") from e

    try:
        if doc.needs_pass:
            raise ExtractionError("PDF is encrypted")
        page_count = doc.page_count
        if page_count == 0:
            raise ExtractionError("PDF has no pages")
        pages = [page.get_text() for page in doc]
    except ExtractionError:
        raise
    except Exception as e:
        raise ExtractionError(f"Cannot read PDF text: {e}") from e
    finally:
        doc.close()

    return ExtractionResult(
        text=PAGE_SEPARATOR.join(p.strip("\n") for p in pages),
        page_count=page_count,
    )


class PdfTextExtractor:
    """提取适配器：bytes → ExtractionResult。"""

    async def extract(self, pdf_bytes: bytes) -> ExtractionResult:
        result = await asyncio.to_thread(extract_pdf_text, pdf_bytes)
        logger.info(
            f"Extracted {result.text_length} chars from {result.page_count} pages"
        )
        return result
