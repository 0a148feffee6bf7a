"""
Detección del content-type de un archivo a partir de sus primeros bytes

Sigue el algoritmo de "MIME sniffing" del estándar WHATWG: firmas binarias
conocidas, marcas BOM, prefijos HTML/XML y, por último, texto o binario.
"""
from typing import Optional

from .config import Config

TEXT_UTF8 = "text/plain; charset=utf-8"
OCTET_STREAM = "application/octet-stream"

# Bytes que identifican contenido binario
_BINARY_BYTES = frozenset(list(range(0x00, 0x09)) + [0x0B] + list(range(0x0E, 0x1B)) + list(range(0x1C, 0x20)))
_WHITESPACE = b"\t\n\x0c\r "
_TAG_TERMINATORS = b" >"

_HTML_TAGS = (
    b"<!DOCTYPE HTML", b"<HTML", b"<HEAD", b"<SCRIPT", b"<IFRAME", b"<H1", b"<DIV",
    b"<FONT", b"<TABLE", b"<A", b"<STYLE", b"<TITLE", b"<B", b"<BODY", b"<BR",
    b"<P", b"<!--",
)

# (prefijo, content-type); el orden importa
_EXACT_SIGNATURES = (
    (b"%PDF-", "application/pdf"),
    (b"%!PS-Adobe-", "application/postscript"),
    (b"\xfe\xff", "text/plain; charset=utf-16be"),
    (b"\xff\xfe", "text/plain; charset=utf-16le"),
    (b"\xef\xbb\xbf", TEXT_UTF8),
    (b"\x00\x00\x01\x00", "image/x-icon"),
    (b"\x00\x00\x02\x00", "image/x-icon"),
    (b"BM", "image/bmp"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"ID3", "audio/mpeg"),
    (b"OggS\x00", "application/ogg"),
    (b"MThd\x00\x00\x00\x06", "audio/midi"),
    (b"\x1a\x45\xdf\xa3", "video/webm"),
    (b"\x00\x01\x00\x00", "font/ttf"),
    (b"OTTO", "font/otf"),
    (b"ttcf", "font/collection"),
    (b"wOFF", "font/woff"),
    (b"wOF2", "font/woff2"),
    (b"\x1f\x8b\x08", "application/x-gzip"),
    (b"PK\x03\x04", "application/zip"),
    (b"Rar!\x1a\x07\x00", "application/x-rar-compressed"),
    (b"Rar!\x1a\x07\x01\x00", "application/x-rar-compressed"),
    (b"\x00asm", "application/wasm"),
    (b"7z\xbc\xaf\x27\x1c", "application/x-7z-compressed"),
    (b"BZh", "application/x-bzip2"),
)

# Contenedores RIFF/FORM: (prefijo, desplazamiento, marca, content-type)
_CONTAINER_SIGNATURES = (
    (b"RIFF", 8, b"WEBPVP", "image/webp"),
    (b"RIFF", 8, b"AVI ", "video/avi"),
    (b"RIFF", 8, b"WAVE", "audio/wave"),
    (b"FORM", 8, b"AIFF", "audio/aiff"),
)

# Fuentes Embedded OpenType: marca "LP" tras una cabecera de 34 bytes
_EOT_MAGIC = b"LP"
_EOT_OFFSET = 34


def _match_html(data: bytes) -> bool:
    upper = data.upper()
    for tag in _HTML_TAGS:
        if upper.startswith(tag) and len(data) > len(tag) and data[len(tag)] in _TAG_TERMINATORS:
            return True
    return False


def _match_container(data: bytes) -> Optional[str]:
    for prefix, offset, marker, content_type in _CONTAINER_SIGNATURES:
        if data.startswith(prefix) and data[offset:offset + len(marker)] == marker:
            return content_type
    return None


def _match_mp4(data: bytes) -> bool:
    # Caja ftyp: tamaño big-endian, marca principal y marcas compatibles
    if len(data) < 12:
        return False
    box_size = int.from_bytes(data[:4], "big")
    if len(data) < box_size or box_size % 4 != 0 or data[4:8] != b"ftyp":
        return False
    for start in range(8, box_size, 4):
        if start == 12:
            continue  # versión menor, no es una marca
        if data[start:start + 3] == b"mp4":
            return True
    return False


def detect_content_type(data: bytes) -> str:
    """
    Clasifica el contenido según sus primeros bytes

    Nunca falla: si no hay coincidencia devuelve "application/octet-stream".

    Args:
        data: Bytes iniciales del archivo (se usan como máximo 512)

    Returns:
        Content-type detectado
    """
    data = bytes(data[:Config.SNIFF_LEN])

    stripped = data.lstrip(_WHITESPACE)
    if _match_html(stripped):
        return "text/html; charset=utf-8"
    if stripped.startswith(b"<?xml"):
        return "text/xml; charset=utf-8"

    for prefix, content_type in _EXACT_SIGNATURES:
        if data.startswith(prefix):
            return content_type

    container_type = _match_container(data)
    if container_type:
        return container_type

    if _match_mp4(data):
        return "video/mp4"
    if data[_EOT_OFFSET:_EOT_OFFSET + len(_EOT_MAGIC)] == _EOT_MAGIC:
        return "application/vnd.ms-fontobject"

    if any(byte in _BINARY_BYTES for byte in data):
        return OCTET_STREAM
    return TEXT_UTF8
