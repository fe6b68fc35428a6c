"""Ownership-or-collaboration access checks for folders and files.

A user may touch a folder or file when they own it, or when they are listed
on the active collaboration of the project (root folder) the node lives in.
Collaborations only ever attach to root folders, so every non-owner check
first walks the parent chain up to the root.

Collaborator roles are stored but not consulted here: any collaborator gets
the same read/write access as the owner.
"""
import logging
from typing import Optional, Union

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from cloud_ide.core.config import settings
from cloud_ide.models.collaboration import Collaboration, Collaborator
from cloud_ide.models.file import File
from cloud_ide.models.folder import Folder
from cloud_ide.models.user import User

logger = logging.getLogger(__name__)

Node = Union[Folder, File]


def resolve_root(
    db: Session, parent_id: Optional[int], max_depth: Optional[int] = None
) -> Optional[int]:
    """Follow parent links from ``parent_id`` up to the root folder.

    Performs one ``db.get`` per level. Returns the id of the first folder
    without a parent, or ``None`` when the chain is broken (a missing
    folder), cyclic, or deeper than ``max_depth``.
    """
    if max_depth is None:
        max_depth = settings.max_folder_depth

    current_id = parent_id
    visited = set()

    while current_id is not None:
        if current_id in visited:
            logger.warning(f"Cycle in folder chain at folder {current_id}")
            return None
        if len(visited) >= max_depth:
            logger.warning(
                f"Folder chain from {parent_id} exceeds {max_depth} levels"
            )
            return None
        visited.add(current_id)

        folder = db.get(Folder, current_id)
        if folder is None:
            logger.warning(f"Broken folder chain: folder {current_id} not found")
            return None
        if folder.parent_id is None:
            return folder.id
        current_id = folder.parent_id

    return None


def project_root_id(db: Session, node: Node) -> Optional[int]:
    """Id of the root folder whose collaboration governs ``node``."""
    if isinstance(node, Folder) and node.parent_id is None:
        return node.id
    return resolve_root(db, node.parent_id)


def is_collaborator(db: Session, project_id: int, user_id: int) -> bool:
    """Whether ``user_id`` is listed on the active collaboration of ``project_id``."""
    match = (
        db.query(Collaborator.id)
        .join(Collaboration, Collaborator.collaboration_id == Collaboration.id)
        .filter(
            Collaboration.project_id == project_id,
            Collaboration.is_active.is_(True),
            Collaborator.user_id == user_id,
        )
        .first()
    )
    return match is not None


def can_access(db: Session, user_id: int, node: Node) -> bool:
    if node.owner_id == user_id:
        return True

    root_id = project_root_id(db, node)
    if root_id is None:
        return False

    return is_collaborator(db, root_id, user_id)


def ensure_access(db: Session, user: User, node: Node) -> None:
    """Raise 403 unless ``user`` may read and write ``node``."""
    if not can_access(db, user.id, node):
        logger.warning(
            f"User {user.id} denied access to {type(node).__name__.lower()} {node.id}"
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN, detail="Unauthorized access"
        )
