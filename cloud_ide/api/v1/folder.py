import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cloud_ide.api.deps import get_accessible_folder
from cloud_ide.api.v1.auth import get_current_user
from cloud_ide.core.database import get_db
from cloud_ide.models.folder import Folder
from cloud_ide.models.user import User
from cloud_ide.schemas.folder import (
    CreateFolderRequest,
    CreateFolderResponse,
    FolderStructureResponse,
    ListFoldersResponse,
)
from cloud_ide.services.access_control import ensure_access
from cloud_ide.services.folders import (
    build_folder_structure,
    ensure_unique_folder_name,
    validate_folder_name,
)
from cloud_ide.utils.storage import StorageError, create_folder_placeholder

logger = logging.getLogger(__name__)

router = APIRouter()


# Create a root folder, or a subfolder owned by the parent's owner
@router.post("", response_model=CreateFolderResponse, status_code=201)
async def create_folder(
    body: CreateFolderRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    folder_name = body.folder_name.strip()
    if not folder_name:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="FolderName Required"
        )
    validate_folder_name(folder_name)

    if body.parent_id is not None:
        parent_folder = db.get(Folder, body.parent_id)
        if not parent_folder:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND, detail="Parent folder not found"
            )
        ensure_access(db, current_user, parent_folder)

        folder_owner = parent_folder.owner_id
        folder_path = parent_folder.path + folder_name + "/"
    else:
        folder_owner = current_user.id
        folder_path = f"{current_user.id}/{folder_name}/"

    ensure_unique_folder_name(db, folder_name, body.parent_id, folder_owner)

    try:
        create_folder_placeholder(folder_path)
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error creating folder: {e}",
        )

    new_folder = Folder(
        name=folder_name,
        owner_id=folder_owner,
        parent_id=body.parent_id,
        path=folder_path,
    )
    try:
        db.add(new_folder)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise
    db.refresh(new_folder)
    logger.info(f"Folder \"{folder_name}\" ({new_folder.id}) created by user {current_user.id}")

    return {
        "success": True,
        "message": "Folder created successfully",
        "folder": new_folder,
    }


# Root folders (projects) owned by the caller
@router.get("", response_model=ListFoldersResponse)
async def list_root_folders(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    folders = (
        db.query(Folder)
        .filter(Folder.owner_id == current_user.id, Folder.parent_id.is_(None))
        .order_by(Folder.name)
        .all()
    )
    return {"success": True, "folders": folders}


@router.get("/{folder_id}/structure", response_model=FolderStructureResponse)
async def get_folder_structure(
    folder: Folder = Depends(get_accessible_folder),
    db: Session = Depends(get_db),
):
    return {"success": True, "structure": build_folder_structure(db, folder)}
