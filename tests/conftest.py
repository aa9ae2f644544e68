import pytest
from fastapi.testclient import TestClient

from config import Settings
from exceptions import ExtractionError, TranslationError
from main import create_app
from services.extraction import ExtractionResult
from services.translation import TranslationResult

PDF_MIME = "application/pdf"


class FakeExtractor:
    def __init__(self, text="Hello PDF", page_count=1, error=None):
        self.text = text
        self.page_count = page_count
        self.error = error
        self.calls = []

    async def extract(self, pdf_bytes):
        self.calls.append(pdf_bytes)
        if self.error:
            raise self.error
        return ExtractionResult(text=self.text, page_count=self.page_count)


class FakeTranslator:
    def __init__(self, prefix="EN:", error=None, max_chars=500):
        self.prefix = prefix
        self.error = error
        self.max_chars = max_chars
        self.calls = []

    async def translate(self, text, from_lang="auto", to_lang="en"):
        self.calls.append((text, from_lang, to_lang))
        if self.error:
            raise self.error
        return TranslationResult(
            translated_text=self.prefix + text[: self.max_chars],
            characters=len(text),
            truncated=len(text) > self.max_chars,
        )


@pytest.fixture
def settings(tmp_path):
    return Settings(app_env="development", upload_dir=tmp_path / "uploads")


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def translator():
    return FakeTranslator()


@pytest.fixture
def make_client(settings, extractor, translator):
    def _make(**overrides):
        app = create_app(
            overrides.pop("settings", settings),
            extractor=overrides.pop("extractor", extractor),
            translator=overrides.pop("translator", translator),
        )
        return TestClient(app, raise_server_exceptions=False)
    return _make


@pytest.fixture
def client(make_client):
    return make_client()


def pdf_upload(content=b"%PDF-1.4 fake", filename="doc.pdf", mime=PDF_MIME):
    return {"pdf": (filename, content, mime)}


__all__ = ["FakeExtractor", "FakeTranslator", "pdf_upload", "ExtractionError", "TranslationError"]
