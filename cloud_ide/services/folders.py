from typing import Optional, Set

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from cloud_ide.models.file import File
from cloud_ide.models.folder import Folder
from cloud_ide.schemas.file import GetFileResponse
from cloud_ide.schemas.folder import FolderNode


def validate_folder_name(name: str) -> None:
    """Reject names containing the storage path separator."""
    if "/" in name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Folder name cannot contain '/'",
        )


def ensure_unique_folder_name(
    db: Session, name: str, parent_id: Optional[int], owner_id: int
) -> None:
    filters = [Folder.name == name, Folder.owner_id == owner_id]
    if parent_id is not None:
        filters.append(Folder.parent_id == parent_id)
    else:
        filters.append(Folder.parent_id.is_(None))

    if db.query(Folder.id).filter(*filters).first():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Folder name {name} already exists",
        )


def build_folder_structure(
    db: Session, folder: Folder, _seen: Optional[Set[int]] = None
) -> FolderNode:
    """Recursive tree of ``folder``'s subfolders and files.

    Access is decided once by the caller on ``folder``; everything below it
    belongs to the same project.
    """
    seen = _seen if _seen is not None else set()
    seen.add(folder.id)

    files = (
        db.query(File).filter(File.parent_id == folder.id).order_by(File.name).all()
    )
    subfolders = (
        db.query(Folder)
        .filter(Folder.parent_id == folder.id)
        .order_by(Folder.name)
        .all()
    )

    node = FolderNode.model_validate(folder)
    node.files = [GetFileResponse.model_validate(f) for f in files]
    node.subfolders = [
        build_folder_structure(db, sub, seen) for sub in subfolders if sub.id not in seen
    ]
    return node
