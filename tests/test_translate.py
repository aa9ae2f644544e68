import pytest

from conftest import FakeTranslator
from exceptions import TranslationError


def test_translate_uses_configured_defaults(client, translator):
    resp = client.post("/translate", json={"text": "Bonjour"})

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "translatedText": "EN:Bonjour",
        "characters": 7,
        "truncated": False,
    }
    assert translator.calls == [("Bonjour", "auto", "en")]


def test_translate_honours_caller_languages(client, translator):
    resp = client.post("/translate", json={"text": "Hello", "fromLang": "en", "toLang": "es"})

    assert resp.status_code == 200
    assert translator.calls == [("Hello", "en", "es")]


def test_translate_reports_original_length_for_long_text(client):
    resp = client.post("/translate", json={"text": "a" * 800})

    body = resp.json()
    assert body["characters"] == 800
    assert body["truncated"] is True
    assert len(body["translatedText"]) == len("EN:") + 500


@pytest.mark.parametrize("payload", [
    {"text": ""},
    {"text": 42},
    {"text": None},
    {"text": ["a"]},
    {},
])
def test_invalid_text_is_400_and_translator_not_called(client, translator, payload):
    resp = client.post("/translate", json=payload)

    assert resp.status_code == 400
    assert resp.json()["success"] is False
    assert resp.json()["error"] == "Valid text is required for translation"
    assert translator.calls == []


def test_provider_timeout_is_translation_failed(make_client):
    translator = FakeTranslator(error=TranslationError("Translation service timed out after 10.0s"))
    client = make_client(translator=translator)

    resp = client.post("/translate", json={"text": "Hello"})

    assert resp.status_code == 500
    assert resp.json()["error"] == "Translation failed"
    assert "timed out" in resp.json()["details"]


def test_oversized_json_body_is_413(make_client, settings):
    client = make_client(settings=settings.model_copy(update={"max_request_size": 100}))

    resp = client.post("/translate", json={"text": "a" * 200})

    assert resp.status_code == 413
    assert resp.json()["success"] is False


def test_missing_body_is_400_with_text_message(client, translator):
    resp = client.post("/translate")

    assert resp.status_code == 400
    assert resp.json()["error"] == "Valid text is required for translation"
    assert translator.calls == []


def test_invalid_language_type_keeps_generic_message(client, translator):
    resp = client.post("/translate", json={"text": "Hello", "toLang": 7})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request body"
    assert translator.calls == []


def test_json_body_without_content_length_is_413(client, translator):
    resp = client.post(
        "/translate",
        content=iter([b'{"text": ', b'"Hello"}']),
        headers={"content-type": "application/json"},
    )

    assert resp.status_code == 413
    assert resp.json()["error"] == "Request body too large"
    assert translator.calls == []
