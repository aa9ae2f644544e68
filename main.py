"""
PDF Processing Service v1.0
===========================
上传 PDF → 提取文本 → （可选）通过 MyMemory 翻译。

内存存储与磁盘存储两种上传策略由 UPLOAD_STORAGE 选择，路由逻辑只有一份。
所有响应都是 {success, ...} JSON 信封；details 字段仅在开发环境返回。

启动:
    uvicorn main:app --host 0.0.0.0 --port 3000
"""

import logging
import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, File, Request, UploadFile
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import Settings, load_settings
from exceptions import InternalError, ServiceError
from schemas.pdf import (
    ErrorResponse,
    ExtractTextResponse,
    HealthResponse,
    ProcessPdfResponse,
    TranslateRequest,
    TranslateResponse,
)
from services.extraction import PdfTextExtractor
from services.processing import process_pdf
from services.translation import MyMemoryTranslator
from services.uploads import build_upload_handler

# ── 日志 ───────────────────────────────────────────────
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("pdf_service.main")

ENDPOINTS = [
    "GET /",
    "POST /extract-text",
    "POST /translate",
    "POST /process-pdf",
]

_LIMITED_BODY_TYPES = ("application/json", "application/x-www-form-urlencoded")
_MULTIPART_TYPE = "multipart/form-data"
# multipart 边界、分段头等额外开销
MULTIPART_OVERHEAD = 16 * 1024

TRANSLATE_TEXT_REQUIRED = "Valid text is required for translation"


def error_response(
    settings: Settings, status_code: int, message: str, details=None
) -> JSONResponse:
    """统一错误信封。生产环境永远不返回 details。"""
    body = ErrorResponse(
        error=message,
        details=details if settings.is_development else None,
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(exclude_none=True))


def _register_routes(app: FastAPI, limiter: Limiter, settings: Settings) -> None:
    """在 app 上注册路由；配置了 RATE_LIMIT 时逐个路由加 slowapi 限流。"""

    def limited(func):
        if settings.rate_limit:
            return limiter.limit(settings.rate_limit)(func)
        return func

    # ── 健康检查 ──────────────────────────────────────

    @app.get("/", response_model=HealthResponse)
    @app.get("/health", response_model=HealthResponse, include_in_schema=False)
    @limited
    async def health(request: Request):
        """服务状态与上传/翻译限制。"""
        return HealthResponse(
            status="running",
            message="PDF Processing Service is operational",
            endpoints=ENDPOINTS,
            limits={
                "maxFileSizeBytes": settings.max_file_size,
                "maxRequestSizeBytes": settings.max_request_size,
                "maxTranslationChars": settings.translate_max_chars,
                "storage": settings.upload_storage,
            },
        )

    # ── POST /extract-text ────────────────────────────

    @app.post("/extract-text", response_model=ExtractTextResponse)
    @limited
    async def extract_text(request: Request, pdf: Optional[UploadFile] = File(None)):
        """提取上传 PDF 的全部文本，不翻译。"""
        state = request.app.state
        async with state.upload_handler.receive(pdf) as uploaded:
            result = await state.extractor.extract(uploaded.content)

        return ExtractTextResponse(
            text=result.text,
            pages=result.page_count,
            text_length=result.text_length,
        )

    # ── POST /translate ──────────────────────────────

    @app.post("/translate", response_model=TranslateResponse)
    @limited
    async def translate(req: TranslateRequest, request: Request):
        """翻译一段文本（最多前 500 字符）。"""
        from_lang = req.from_lang or settings.translate_default_from
        to_lang = req.to_lang or settings.translate_default_to

        logger.info(f"POST /translate — {len(req.text)} chars, {from_lang}|{to_lang}")
        result = await request.app.state.translator.translate(req.text, from_lang, to_lang)
        return TranslateResponse(
            translated_text=result.translated_text,
            characters=result.characters,
            truncated=result.truncated,
        )

    # ── POST /process-pdf ────────────────────────────

    @app.post("/process-pdf", response_model=ProcessPdfResponse)
    @limited
    async def process_pdf_endpoint(request: Request, pdf: Optional[UploadFile] = File(None)):
        """提取 + 翻译前 500 字符 + 1000 字符预览。"""
        state = request.app.state
        async with state.upload_handler.receive(pdf) as uploaded:
            return await process_pdf(uploaded.content, state.extractor, state.translator)


# ── 应用工厂 ──────────────────────────────────────────

def _register_error_handlers(app: FastAPI, settings: Settings) -> None:

    @app.exception_handler(ServiceError)
    async def _service_error_handler(request: Request, exc: ServiceError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}", exc_info=exc)
        else:
            logger.warning(f"{request.method} {request.url.path} rejected: {exc}")
        return error_response(settings, exc.status_code, exc.message, str(exc))

    @app.exception_handler(RequestValidationError)
    async def _validation_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"{request.method} {request.url.path} invalid body: {exc.errors()}")
        details = [{"loc": list(err.get("loc", ())), "msg": err.get("msg")} for err in exc.errors()]
        locs = {tuple(err.get("loc", ())) for err in exc.errors()}
        if request.url.path == "/translate" and locs & {("body",), ("body", "text")}:
            message = TRANSLATE_TEXT_REQUIRED
        else:
            message = "Invalid request body"
        return error_response(settings, 400, message, details)

    @app.exception_handler(RateLimitExceeded)
    async def _rate_limit_handler(request: Request, exc: RateLimitExceeded):
        return error_response(settings, 429, "Too many requests, please try again later", str(exc.detail))

    @app.exception_handler(StarletteHTTPException)
    async def _http_error_handler(request: Request, exc: StarletteHTTPException):
        return error_response(settings, exc.status_code, str(exc.detail))

    @app.exception_handler(Exception)
    async def _unhandled_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled error on {request.method} {request.url.path}: {exc}", exc_info=exc)
        return error_response(
            settings, InternalError.status_code, InternalError.public_message, str(exc)
        )


def create_app(
    settings: Optional[Settings] = None,
    *,
    extractor=None,
    translator=None,
    upload_handler=None,
) -> FastAPI:
    """构建 FastAPI 应用；各适配器可注入替身用于测试。"""
    settings = settings or load_settings()
    logging.getLogger("pdf_service").setLevel(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(
            f"PDF Processing Service starting (env={settings.app_env}, "
            f"storage={settings.upload_storage})"
        )
        yield
        logger.info("PDF Processing Service shutting down")

    app = FastAPI(
        title="PDF Processing Service",
        version="1.0.0",
        description="PDF 文本提取与翻译",
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.upload_handler = upload_handler or build_upload_handler(settings)
    app.state.extractor = extractor or PdfTextExtractor()
    app.state.translator = translator or MyMemoryTranslator(
        api_url=settings.translate_api_url,
        timeout=settings.translate_timeout,
        max_chars=settings.translate_max_chars,
        email=settings.mymemory_email,
    )

    # ── 限流 ──────────────────────────────────────────
    limiter = Limiter(key_func=get_remote_address, enabled=bool(settings.rate_limit))
    app.state.limiter = limiter

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        content_type = request.headers.get("content-type", "")
        if content_type.startswith(_MULTIPART_TYPE):
            limit = settings.max_file_size + MULTIPART_OVERHEAD
        elif content_type.startswith(_LIMITED_BODY_TYPES):
            limit = settings.max_request_size
        else:
            return await call_next(request)

        # 在解析 multipart / JSON 之前按 Content-Length 拒绝，未声明长度的请求体一律拒绝
        content_length = request.headers.get("content-length")
        if content_length is None or not content_length.isdigit():
            return error_response(
                settings, 413, "Request body too large",
                "Content-Length header is required",
            )
        if int(content_length) > limit:
            return error_response(
                settings, 413, "Request body too large",
                f"{content_length} bytes exceeds {limit}",
            )
        return await call_next(request)

    @app.middleware("http")
    async def access_log(request: Request, call_next):
        started = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            elapsed_ms = (time.perf_counter() - started) * 1000
            logger.info(
                f"{request.method} {request.url.path} {status_code} {elapsed_ms:.1f}ms"
            )

    _register_error_handlers(app, settings)
    _register_routes(app, limiter, settings)
    return app


settings = load_settings()
app = create_app(settings)


# ── 入口点 ────────────────────────────────────────────

if __name__ == "__main__":
    logger.info(f"PDF Processing Service v1.0 starting on :{settings.port}")
    for endpoint in ENDPOINTS:
        logger.info(f"  {endpoint}")
    # uvicorn 收到 SIGINT / SIGTERM 时关闭监听并等待进行中的请求
    uvicorn.run(app, host=settings.host, port=settings.port, timeout_graceful_shutdown=10)
