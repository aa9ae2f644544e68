from .extraction import ExtractionResult, PdfTextExtractor, extract_pdf_text
from .processing import make_preview, process_pdf, should_translate
from .translation import MyMemoryTranslator, TranslationResult
from .uploads import (
    DiskStorage,
    MemoryStorage,
    UploadedFile,
    UploadHandler,
    build_upload_handler,
)

__all__ = [
    "ExtractionResult",
    "PdfTextExtractor",
    "extract_pdf_text",
    "make_preview",
    "process_pdf",
    "should_translate",
    "MyMemoryTranslator",
    "TranslationResult",
    "DiskStorage",
    "MemoryStorage",
    "UploadedFile",
    "UploadHandler",
    "build_upload_handler",
]
