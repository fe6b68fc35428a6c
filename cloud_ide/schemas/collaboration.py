from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from cloud_ide.schemas.base import EnvelopeResponse, RequestModel
from cloud_ide.schemas.folder import GetFolderResponse


class CreateCollaborationRequest(RequestModel):
    project_id: int = Field(..., description="Root folder to share")
    collaborator_emails: List[str] = Field(default_factory=list)


class RemoveCollaboratorRequest(RequestModel):
    collaboration_id: int
    collaborator_email: str


class NotifyCollaboratorsRequest(RequestModel):
    project_id: int
    change_message: str = ""


class CreateCollaborativeProjectRequest(RequestModel):
    project_name: str = ""
    collaborator_emails: List[str] = Field(default_factory=list)


class CollaboratorEntry(BaseModel):
    user_id: Optional[int] = None
    email: str
    role: str
    added_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class CollaborationSchema(BaseModel):
    id: int
    project_id: int
    owner_id: int
    project_name: str
    is_active: bool
    collaborators: List[CollaboratorEntry] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    model_config = {"from_attributes": True}


class CollaborationResponse(EnvelopeResponse):
    collaboration: CollaborationSchema


class CollaborativeProjectResponse(CollaborationResponse):
    project: GetFolderResponse


class UserCollaborationsResponse(EnvelopeResponse):
    ownedProjects: List[CollaborationSchema]
    sharedProjects: List[CollaborationSchema]


class NotifyCollaboratorsResponse(EnvelopeResponse):
    notifiedCount: int
    recipients: List[str]
