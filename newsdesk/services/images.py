from __future__ import annotations

from typing import Optional

PLACEHOLDER = "placeholder.png"


def get_image_url(path: Optional[str], cdn_domain: str, legacy_host_marker: str) -> str:
    cdn_domain = cdn_domain.rstrip("/")
    if not path:
        # absolute so social previews still resolve
        return f"{cdn_domain}/{PLACEHOLDER}"

    cdn_host = cdn_domain.split("://", 1)[-1]
    if cdn_host and cdn_host in path:
        return path

    if legacy_host_marker and legacy_host_marker in path:
        _, _, key = path.partition(".com/")
        return f"{cdn_domain}/{key}"

    if not path.startswith("http"):
        return f"{cdn_domain}/{path.lstrip('/')}"

    return path
