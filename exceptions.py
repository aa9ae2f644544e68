"""
PDF Processing Service — 自定义异常

每个异常携带 HTTP 状态码和可公开的错误信息；
内部细节（str(exc)）仅在开发环境下通过 details 字段返回。
"""

from typing import Optional


class ServiceError(Exception):
    """服务错误基类。"""
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, detail: str = "", *, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(detail or message or self.public_message)
        self.message = message or self.public_message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(ServiceError):
    """请求参数缺失或无效。"""
    status_code = 400
    public_message = "Invalid request"


class UploadRejectedError(ServiceError):
    """上传文件被拒绝（MIME 类型或大小）。"""
    status_code = 400
    public_message = "Upload rejected"


class ExtractionError(ServiceError):
    """PDF 解析失败（损坏、加密或非 PDF 内容）。"""
    status_code = 500
    public_message = "Failed to process PDF"


class TranslationError(ServiceError):
    """翻译服务失败、超时或响应格式错误。不重试。"""
    status_code = 500
    public_message = "Translation failed"


class InternalError(ServiceError):
    """未预期的错误。"""
    pass
