import logging
from datetime import datetime, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, File as FileParam, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from cloud_ide.api.deps import get_accessible_file
from cloud_ide.api.v1.auth import get_current_user
from cloud_ide.core.database import get_db
from cloud_ide.models.file import File
from cloud_ide.models.folder import Folder
from cloud_ide.models.user import User
from cloud_ide.schemas.file import (
    FileContentResponse,
    UpdateFileContentRequest,
    UpdateFileContentResponse,
    UploadFilesResponse,
)
from cloud_ide.schemas.base import EnvelopeResponse
from cloud_ide.services.access_control import ensure_access
from cloud_ide.utils.get_unique_name import get_unique_file_name, get_unique_storage_key
from cloud_ide.utils.storage import StorageError, read_object, remove_object, store_object

logger = logging.getLogger(__name__)

router = APIRouter()


def _discard_objects(keys: List[str]) -> None:
    """Best-effort removal of objects whose records were rolled back."""
    for key in keys:
        try:
            remove_object(key)
        except StorageError:
            logger.exception(f"Could not remove orphaned object '{key}'")


@router.post("/upload", response_model=UploadFilesResponse, status_code=201)
async def upload_files(
    folder_id: Optional[int] = Form(None),
    files: List[UploadFile] = FileParam([]),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    files = [f for f in files if f.filename]
    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No files uploaded")

    parent_folder_id = None
    folder_path = f"{current_user.id}/"
    file_owner = current_user.id

    if folder_id is not None:
        parent_folder = db.get(Folder, folder_id)
        if not parent_folder:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Folder not found")
        ensure_access(db, current_user, parent_folder)

        parent_folder_id = parent_folder.id
        folder_path = parent_folder.path
        file_owner = parent_folder.owner_id

    uploaded = []
    for upload in files:
        content = await upload.read()
        name = get_unique_file_name(db, upload.filename, parent_folder_id, file_owner)
        object_key = get_unique_storage_key(db, folder_path, name)

        try:
            store_object(object_key, content, upload.content_type)
        except StorageError as e:
            stored_keys = [f.storage_key for f in uploaded]
            db.rollback()
            _discard_objects(stored_keys)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error uploading files: {e}",
            )

        new_file = File(
            name=name,
            owner_id=file_owner,
            parent_id=parent_folder_id,
            storage_key=object_key,
            size=len(content),
            content_type=upload.content_type,
            path=object_key,
        )
        db.add(new_file)
        # Name and key checks for the next upload in this batch must see it
        db.flush()
        uploaded.append(new_file)

    db.commit()
    for new_file in uploaded:
        db.refresh(new_file)
    logger.info(f"User {current_user.id} uploaded {len(uploaded)} file(s) to folder {folder_id}")

    return {
        "success": True,
        "message": "Files uploaded successfully",
        "files": uploaded,
    }


@router.get("/{file_id}/content", response_model=FileContentResponse)
async def get_file_content(file: File = Depends(get_accessible_file)):
    try:
        data = read_object(file.storage_key)
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error fetching file content: {e}",
        )

    return {
        "success": True,
        "data": {
            "content": data.decode("utf-8", errors="replace"),
            "name": file.name,
            "type": file.content_type,
            "size": file.size,
        },
    }


@router.put("/{file_id}/content", response_model=UpdateFileContentResponse)
async def update_file_content(
    body: UpdateFileContentRequest,
    file: File = Depends(get_accessible_file),
    db: Session = Depends(get_db),
):
    data = body.content.encode("utf-8")
    try:
        store_object(file.storage_key, data, file.content_type or "text/plain")
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Error updating file content: {e}",
        )

    file.size = len(data)
    file.updated_at = datetime.now(timezone.utc)
    db.commit()
    db.refresh(file)

    return {
        "success": True,
        "message": "File updated successfully",
        "data": {"name": file.name, "size": file.size, "updatedAt": file.updated_at},
    }


@router.delete("/{file_id}", response_model=EnvelopeResponse)
async def delete_file(
    file: File = Depends(get_accessible_file),
    db: Session = Depends(get_db),
):
    # Keep the record when the object cannot be removed
    try:
        remove_object(file.storage_key)
    except StorageError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to delete file from storage: {e}",
        )

    file_id, file_name = file.id, file.name
    db.delete(file)
    db.commit()
    logger.info(f"Deleted file {file_id} ({file_name})")

    return {"success": True, "message": "File deleted successfully"}
