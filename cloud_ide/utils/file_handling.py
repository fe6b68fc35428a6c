import os
import re
import unicodedata


def sanitize_filename(filename: str) -> str:
    name, ext = os.path.splitext(filename)

    name = unicodedata.normalize("NFD", name).encode("ascii", "ignore").decode("utf-8")

    name = re.sub(r"\s+", "_", name)

    name = re.sub(r"[^a-zA-Z0-9._()-]", "", name)

    return f"{name or 'file'}{ext}"


def join_storage_path(prefix: str, name: str) -> str:
    """Join a folder prefix (``"3/project/"``) and an object name."""
    if prefix and not prefix.endswith("/"):
        prefix += "/"
    return f"{prefix}{name}"
