"""
MyMemory 翻译 API 适配器。

- 单次请求最多 500 字符（免费 API 限制），超出部分截断，并在结果中标记 truncated
- 带超时的单次 HTTP 调用，不重试
- 超时、网络错误、HTTP 错误或响应缺少 translatedText 均抛出 TranslationError
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from exceptions import TranslationError

logger = logging.getLogger("pdf_service.translation")


@dataclass(frozen=True)
class TranslationResult:
    translated_text: str
    characters: int
    truncated: bool = False


class MyMemoryTranslator:
    """翻译适配器。transport 参数仅用于测试注入。"""

    def __init__(
        self,
        api_url: str,
        timeout: float = 10.0,
        max_chars: int = 500,
        email: str = "",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url
        self.timeout = timeout
        self.max_chars = max_chars
        self.email = email
        self._transport = transport

    def _params(self, text: str, from_lang: str, to_lang: str) -> dict:
        params = {"q": text, "langpair": f"{from_lang}|{to_lang}"}
        if self.email:
            # 提供邮箱可提高 MyMemory 的每日配额
            params["de"] = self.email
        return params

    async def translate(self, text: str, from_lang: str = "auto", to_lang: str = "en") -> TranslationResult:
        source_text = text[: self.max_chars]
        truncated = len(text) > self.max_chars
        if truncated:
            logger.info(
                f"Translation input truncated: {len(text)} -> {self.max_chars} chars"
            )

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                resp = await client.get(
                    self.api_url, params=self._params(source_text, from_lang, to_lang)
                )
            resp.raise_for_status()
            data = resp.json()
        except httpx.TimeoutException as e:
            raise TranslationError(f"Translation service timed out after {self.timeout}s") from e
        except httpx.HTTPStatusError as e:
            raise TranslationError(
                f"Translation service returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise TranslationError(f"Translation service unreachable: {e}") from e
        except ValueError as e:
            raise TranslationError("Invalid JSON from translation service") from e

        translated = _translated_text(data)
        if translated is None:
            details = data.get("responseDetails") if isinstance(data, dict) else None
            raise TranslationError(details or "Invalid response from translation service")

        logger.info(
            f"Translated {len(source_text)} chars ({from_lang}|{to_lang})"
        )
        return TranslationResult(
            translated_text=translated,
            characters=len(text),
            truncated=truncated,
        )


def _translated_text(data) -> Optional[str]:
    """从 MyMemory 响应中取出译文；状态码非 200 或字段缺失时返回 None。"""
    if not isinstance(data, dict):
        return None
    status = data.get("responseStatus", 200)
    if str(status) != "200":
        return None
    response_data = data.get("responseData")
    if not isinstance(response_data, dict):
        return None
    translated = response_data.get("translatedText")
    if not isinstance(translated, str):
        return None
    return translated
