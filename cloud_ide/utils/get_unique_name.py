import os
import re
from typing import Optional

from sqlalchemy.orm import Session

from cloud_ide.models.file import File
from cloud_ide.utils.file_handling import join_storage_path, sanitize_filename


def get_unique_file_name(
    db: Session, filename: str, parent_id: Optional[int], owner_id: int
) -> str:
    """Return ``filename`` or ``"name (n).ext"`` so siblings never collide."""
    base_title, suffix = os.path.splitext(filename.strip())

    query = db.query(File.name).filter(
        File.owner_id == owner_id,
        File.name.like(f"{base_title}%{suffix}"),
    )
    if parent_id is not None:
        query = query.filter(File.parent_id == parent_id)
    else:
        query = query.filter(File.parent_id.is_(None))
    existing_names = [row[0] for row in query.all()]

    max_suffix = 0

    safe_base_title = re.escape(base_title)
    safe_ext = re.escape(suffix)

    suffix_pattern = re.compile(rf"^{safe_base_title}\s*\((?P<suffix>\d+)\){safe_ext}$")

    is_exact_match = False

    for name in existing_names:
        if name == f"{base_title}{suffix}":
            is_exact_match = True
            continue

        match = suffix_pattern.match(name)
        if match:
            max_suffix = max(max_suffix, int(match.group("suffix")))

    if not (is_exact_match or max_suffix > 0):
        return f"{base_title}{suffix}"
    return f"{base_title} ({max_suffix + 1}){suffix}"


def get_unique_storage_key(db: Session, prefix: str, filename: str) -> str:
    """Object key under ``prefix`` for ``filename`` that no file record uses yet.

    Sanitising can map different names onto one key (``"a b.txt"`` and
    ``"a_b.txt"``), so the key itself gets the ``"name (n).ext"`` treatment.
    """
    safe_name = sanitize_filename(filename)
    base_title, suffix = os.path.splitext(safe_name)

    key = join_storage_path(prefix, safe_name)
    n = 0
    while db.query(File.id).filter(File.storage_key == key).first() is not None:
        n += 1
        key = join_storage_path(prefix, f"{base_title}({n}){suffix}")
    return key
