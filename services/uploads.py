"""
上传处理：校验 multipart 上传的 PDF，并按配置的存储策略暂存。

两种策略:
- memory: 内容仅保存在进程内存中，请求结束即释放
- disk:   写入上传目录（按需创建），请求结束时无论成功失败都删除文件
"""

import asyncio
import logging
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import AsyncIterator, Optional

from fastapi import UploadFile

from exceptions import UploadRejectedError, ValidationError

logger = logging.getLogger("pdf_service.uploads")

PDF_MIME_TYPE = "application/pdf"
CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class UploadedFile:
    """单个请求独占的上传文件。"""
    filename: str
    mime_type: str
    size_bytes: int
    content: bytes
    path: Optional[Path] = None


async def _read_limited(upload: UploadFile, max_size: int) -> AsyncIterator[bytes]:
    """按块读取上传内容，超过 max_size 立即拒绝。"""
    total = 0
    while True:
        chunk = await upload.read(CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > max_size:
            raise UploadRejectedError(
                f"File exceeds {max_size} bytes",
                message="File too large",
                status_code=413,
            )
        yield chunk


class MemoryStorage:
    name = "memory"

    @asynccontextmanager
    async def stage(self, upload: UploadFile, max_size: int) -> AsyncIterator[UploadedFile]:
        parts = [chunk async for chunk in _read_limited(upload, max_size)]
        content = b"".join(parts)
        yield UploadedFile(
            filename=upload.filename or "upload.pdf",
            mime_type=upload.content_type,
            size_bytes=len(content),
            content=content,
        )


class DiskStorage:
    name = "disk"

    def __init__(self, upload_dir: Path):
        self.upload_dir = Path(upload_dir)

    def _target_path(self, filename: Optional[str]) -> Path:
        # 时间戳 + 随机后缀 + 原文件名，避免并发请求互相覆盖
        basename = Path(filename or "upload.pdf").name or "upload.pdf"
        return self.upload_dir / f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{basename}"

    @asynccontextmanager
    async def stage(self, upload: UploadFile, max_size: int) -> AsyncIterator[UploadedFile]:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        path = self._target_path(upload.filename)
        try:
            parts = [chunk async for chunk in _read_limited(upload, max_size)]
            await asyncio.to_thread(path.write_bytes, b"".join(parts))
            content = await asyncio.to_thread(path.read_bytes)
            size = len(content)
            logger.debug(f"Staged upload at {path} ({size} bytes)")
            yield UploadedFile(
                filename=upload.filename or path.name,
                mime_type=upload.content_type,
                size_bytes=size,
                content=content,
                path=path,
            )
        finally:
            path.unlink(missing_ok=True)
            logger.debug(f"Removed staged upload {path}")


class UploadHandler:
    """校验上传并委托给存储策略暂存。"""

    def __init__(self, storage, max_file_size: int):
        self.storage = storage
        self.max_file_size = max_file_size

    @asynccontextmanager
    async def receive(self, upload: Optional[UploadFile]) -> AsyncIterator[UploadedFile]:
        if upload is None or not upload.filename:
            raise ValidationError("No file in field 'pdf'", message="No PDF file uploaded")

        if upload.content_type != PDF_MIME_TYPE:
            raise UploadRejectedError(
                f"Rejected content type {upload.content_type!r}",
                message="Only PDF files are allowed",
            )

        async with self.storage.stage(upload, self.max_file_size) as uploaded:
            logger.info(
                f"Received upload {uploaded.filename!r} "
                f"({uploaded.size_bytes} bytes, storage={self.storage.name})"
            )
            yield uploaded


def build_upload_handler(settings) -> UploadHandler:
    if settings.upload_storage == "disk":
        storage = DiskStorage(settings.upload_dir)
    else:
        storage = MemoryStorage()
    return UploadHandler(storage, settings.max_file_size)
