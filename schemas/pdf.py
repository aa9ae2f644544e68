"""
PDF 处理 API 的 Pydantic 模型。

对外字段统一使用 camelCase（textLength、translatedText …），
Python 侧使用 snake_case。
"""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, StrictStr, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TranslateRequest(CamelModel):
    """POST /translate 的请求体"""
    text: StrictStr
    from_lang: Optional[StrictStr] = None
    to_lang: Optional[StrictStr] = None

    @field_validator("text")
    @classmethod
    def validate_text(cls, v: str) -> str:
        if not v:
            raise ValueError("text must be a non-empty string")
        return v


class TranslateResponse(CamelModel):
    """POST /translate 的响应"""
    success: bool = True
    translated_text: str
    characters: int
    truncated: bool = False


class ExtractTextResponse(CamelModel):
    """POST /extract-text 的响应"""
    success: bool = True
    text: str
    pages: int
    text_length: int


class PdfMetadata(CamelModel):
    pages: int
    text_length: int


class ProcessPdfResponse(CamelModel):
    """POST /process-pdf 的响应"""
    success: bool = True
    metadata: PdfMetadata
    extracted_text: str
    translated_text: str
    download_link: Optional[str] = None


class ErrorResponse(BaseModel):
    """所有失败响应的统一信封；details 仅开发环境返回。"""
    success: bool = False
    error: str
    details: Optional[object] = None


class HealthResponse(BaseModel):
    status: str
    message: str
    endpoints: List[str]
    limits: Dict[str, object]
