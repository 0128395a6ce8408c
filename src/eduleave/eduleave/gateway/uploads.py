from __future__ import annotations

import base64

from ..core.constants import UPLOAD_ALLOWED_TYPES, UPLOAD_MAX_BYTES
from ..core.exceptions import ValidationError


def encode_upload(content: bytes, mime_type: str) -> str:
    """Check an attachment and return its base64 body for the backend."""
    if mime_type not in UPLOAD_ALLOWED_TYPES:
        raise ValidationError("Chỉ chấp nhận file ảnh (.jpg, .png)")
    if len(content) > UPLOAD_MAX_BYTES:
        raise ValidationError("Dung lượng file không được quá 4MB")
    return base64.b64encode(content).decode("ascii")
