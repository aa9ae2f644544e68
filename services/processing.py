"""
/process-pdf 的组合逻辑：提取 → （可选）翻译 → 预览截断。
"""

import logging

from schemas.pdf import PdfMetadata, ProcessPdfResponse

logger = logging.getLogger("pdf_service.processing")

PREVIEW_CHARS = 1000
PREVIEW_ELLIPSIS = "..."
# 文本不超过该长度时跳过翻译
TRANSLATE_MIN_CHARS = 50
TRANSLATE_CHARS = 500

# 合并接口固定自动检测 → 英文，与 /translate 的可配置语言不同
PROCESS_FROM_LANG = "auto"
PROCESS_TO_LANG = "en"


def make_preview(text: str, limit: int = PREVIEW_CHARS) -> str:
    if len(text) > limit:
        return text[:limit] + PREVIEW_ELLIPSIS
    return text


def should_translate(text: str) -> bool:
    return len(text) > TRANSLATE_MIN_CHARS


async def process_pdf(pdf_bytes: bytes, extractor, translator) -> ProcessPdfResponse:
    result = await extractor.extract(pdf_bytes)

    translated_text = ""
    if should_translate(result.text):
        translation = await translator.translate(
            result.text[:TRANSLATE_CHARS], PROCESS_FROM_LANG, PROCESS_TO_LANG
        )
        translated_text = translation.translated_text
    else:
        logger.info(
            f"Skipping translation: only {result.text_length} chars extracted"
        )

    return ProcessPdfResponse(
        metadata=PdfMetadata(pages=result.page_count, text_length=result.text_length),
        extracted_text=make_preview(result.text),
        translated_text=translated_text,
        download_link=None,
    )
