# topup/services/uploads.py

"""
Сохранение скриншотов оплаты на диск.
Имя файла: <мс-время>-<случайное число>-<очищенное имя>, коллизии не проверяем.
"""

import os
import re
import time
import random

import aiofiles
import aiofiles.os
from fastapi import Request
from starlette.datastructures import UploadFile

UPLOADS_URL_PATH = "/uploads"
CHUNK_SIZE = 1024 * 1024


def sanitize_filename(name: str) -> str:
    """Пробелы -> '-', всё кроме [A-Za-z0-9._-] выбрасываем."""
    name = re.sub(r"\s+", "-", name or "")
    return re.sub(r"[^a-zA-Z0-9.\-_]", "", name)


def generate_filename(original: str) -> str:
    return f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}-{sanitize_filename(original)}"


def build_proof_url(request: Request, filename: str) -> str:
    base = f"{request.url.scheme}://{request.headers.get('host', request.url.netloc)}"
    return f"{base}{UPLOADS_URL_PATH}/{filename}"


async def save_payment_proof(upload: UploadFile, request: Request, uploads_dir: str) -> str:
    """
    Пишет файл в uploads_dir и возвращает его публичный URI.
    Пустая загрузка (нет имени файла) - пустая строка.
    """
    if upload is None or not upload.filename:
        return ""

    os.makedirs(uploads_dir, exist_ok=True)
    filename = generate_filename(upload.filename)
    path = os.path.join(uploads_dir, filename)

    async with aiofiles.open(path, "wb") as f:
        while chunk := await upload.read(CHUNK_SIZE):
            await f.write(chunk)

    await request.app.state.log.log_info("upload", "Скриншот оплаты сохранён", {"file": filename})
    return build_proof_url(request, filename)


async def discard_payment_proof(proof_url: str, request: Request, uploads_dir: str) -> None:
    """
    Удаляет сохранённый скриншот, если заказ так и не записался в базу.
    Ошибка удаления только логируется: исходную ошибку заказа не подменяем.
    """
    if not proof_url:
        return
    filename = os.path.basename(proof_url.rsplit("/", 1)[-1])
    path = os.path.join(uploads_dir, filename)
    try:
        await aiofiles.os.remove(path)
    except OSError as e:
        await request.app.state.log.log_warning("upload", f"Не удалось удалить скриншот: {e!r}", {"file": filename})
        return
    await request.app.state.log.log_info("upload", "Скриншот удалён, заказ не создан", {"file": filename})
