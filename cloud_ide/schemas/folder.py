from __future__ import annotations
from cloud_ide.schemas.base import EnvelopeResponse, RequestModel
from cloud_ide.schemas.file import GetFileResponse
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime


class CreateFolderRequest(RequestModel):
    folder_name: str = Field(..., description="The name of the folder")
    parent_id: Optional[int] = Field(None, description="The parent folder id")


class GetFolderResponse(BaseModel):
    id: int = Field(..., description="The id of the folder")
    name: str = Field(..., description="The name of the folder")
    owner_id: int = Field(..., description="The user id owning the folder")
    parent_id: Optional[int] = Field(None, description="The parent folder id")
    path: str = Field(..., description="Storage prefix of the folder")
    created_at: Optional[datetime] = Field(None, description="The creation time of the folder")
    updated_at: Optional[datetime] = Field(None, description="The update time of the folder")
    model_config = {"from_attributes": True}


class CreateFolderResponse(EnvelopeResponse):
    folder: GetFolderResponse


class ListFoldersResponse(EnvelopeResponse):
    folders: List[GetFolderResponse]


class FolderNode(GetFolderResponse):
    type: str = "folder"
    files: List[GetFileResponse] = []
    subfolders: List[FolderNode] = []


class FolderStructureResponse(EnvelopeResponse):
    structure: FolderNode
