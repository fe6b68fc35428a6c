from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from cloud_ide.api.v1.auth import get_current_user
from cloud_ide.core.database import get_db
from cloud_ide.models.file import File
from cloud_ide.models.folder import Folder
from cloud_ide.models.user import User
from cloud_ide.services.access_control import ensure_access


def load_accessible_file(db: Session, user: User, file_id: int) -> File:
    file = db.get(File, file_id)
    if not file:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="File not found")
    ensure_access(db, user, file)
    return file


def get_accessible_file(
    file_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> File:
    return load_accessible_file(db, current_user, file_id)


def get_accessible_folder(
    folder_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
) -> Folder:
    folder = db.get(Folder, folder_id)
    if not folder:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Folder not found")
    ensure_access(db, current_user, folder)
    return folder
