from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field

from cloud_ide.schemas.base import EnvelopeResponse, RequestModel


class GetFileResponse(BaseModel):
    id: int = Field(..., description="Unique identifier of the file")
    name: str = Field(..., description="Display name or filename")
    owner_id: int = Field(..., description="Owner of the file (the owning folder's owner)")
    parent_id: Optional[int] = Field(None, description="ID of the folder containing the file")
    storage_key: str = Field(..., description="Object key in the storage bucket")
    size: int = Field(..., description="Size of the content in bytes")
    content_type: Optional[str] = Field(None, description="MIME type of the content")
    path: str = Field(..., description="Path of the file inside the owner's tree")
    created_at: Optional[datetime] = Field(None, description="Timestamp when the file was created")
    updated_at: Optional[datetime] = Field(None, description="Timestamp when the file was last updated")
    model_config = {"from_attributes": True}


class UploadFilesResponse(EnvelopeResponse):
    files: List[GetFileResponse]


class FileContent(BaseModel):
    content: str
    name: str
    type: Optional[str] = None
    size: int


class FileContentResponse(EnvelopeResponse):
    data: FileContent


class UpdateFileContentRequest(RequestModel):
    content: str = Field(..., description="New text content of the file")


class UpdatedFile(BaseModel):
    name: str
    size: int
    updatedAt: Optional[datetime] = None


class UpdateFileContentResponse(EnvelopeResponse):
    data: UpdatedFile
