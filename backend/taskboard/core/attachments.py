from __future__ import annotations

import base64
import binascii
from typing import Optional, Tuple

from taskboard.core.errors import ValidationError
from taskboard.core.roles import AttachmentType

_LINK_SCHEMES = ("http://", "https://")


def _split_data_url(data: str) -> str:
    """
    Accepts either a data URL ("data:image/png;base64,AAAA") or bare base64
    and returns the base64 payload.
    """
    v = data.strip()
    if v.startswith("data:"):
        header, sep, payload = v.partition(",")
        if not sep or ";base64" not in header:
            raise ValidationError("Inline file must be a base64 data URL.", code="invalid_attachment")
        return payload
    return v


def inline_payload_size(data: str) -> int:
    payload = _split_data_url(data)
    try:
        return len(base64.b64decode(payload, validate=True))
    except (binascii.Error, ValueError):
        raise ValidationError("Inline file is not valid base64.", code="invalid_attachment")


def validate_attachment(
    kind: Optional[str],
    value: Optional[str],
    *,
    max_inline_bytes: int,
    field: str = "attachment",
) -> Tuple[Optional[str], Optional[str]]:
    """
    Returns the (value, kind) pair to store, or (None, None) when nothing
    was attached. Files are size-capped; links are not.
    """
    if value is None or not value.strip():
        return None, None

    k = (kind or "").strip().lower()
    if k == AttachmentType.FILE.value:
        size = inline_payload_size(value)
        if size > max_inline_bytes:
            raise ValidationError(
                f"File too large! Max {max_inline_bytes // 1024}KB.",
                code="attachment_too_large",
                extra={"field": field, "size": size, "limit": max_inline_bytes},
            )
        return value.strip(), k

    if k == AttachmentType.LINK.value:
        link = value.strip()
        if not link.lower().startswith(_LINK_SCHEMES):
            raise ValidationError("Link must start with http:// or https://", code="invalid_attachment")
        return link, k

    raise ValidationError(f"{field} type must be 'file' or 'link'", code="invalid_attachment")
