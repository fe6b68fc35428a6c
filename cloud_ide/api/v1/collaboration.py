from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from cloud_ide.api.v1.auth import get_current_user
from cloud_ide.core.database import get_db
from cloud_ide.models.user import User
from cloud_ide.schemas.collaboration import (
    CollaborationResponse,
    CollaborativeProjectResponse,
    CreateCollaborationRequest,
    CreateCollaborativeProjectRequest,
    NotifyCollaboratorsRequest,
    NotifyCollaboratorsResponse,
    RemoveCollaboratorRequest,
    UserCollaborationsResponse,
)
from cloud_ide.schemas.user import RegisteredUsersResponse
from cloud_ide.services import collaboration as collaboration_service

router = APIRouter()


# Create a collaboration for a project, or add collaborators to it
@router.post("/create", response_model=CollaborationResponse, status_code=201)
async def create_collaboration(
    body: CreateCollaborationRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = collaboration_service.invite_collaborators(
        db, current_user, body.project_id, body.collaborator_emails
    )
    return {
        "success": True,
        "message": result.message,
        "collaboration": result.collaboration,
    }


@router.get("/user", response_model=UserCollaborationsResponse)
async def get_user_collaborations(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    owned, shared = collaboration_service.list_user_collaborations(db, current_user)
    return {"success": True, "ownedProjects": owned, "sharedProjects": shared}


@router.post("/remove", response_model=CollaborationResponse)
async def remove_collaborator(
    body: RemoveCollaboratorRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    collaboration = collaboration_service.remove_collaborator(
        db, current_user, body.collaboration_id, body.collaborator_email
    )
    return {
        "success": True,
        "message": "Collaborator removed successfully",
        "collaboration": collaboration,
    }


@router.post("/notify", response_model=NotifyCollaboratorsResponse)
async def notify_collaborators(
    body: NotifyCollaboratorsRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    result = collaboration_service.notify_collaborators(
        db, current_user, body.project_id, body.change_message
    )
    return {
        "success": True,
        "message": f"Notifications sent to {result.notified_count} collaborator(s)",
        "notifiedCount": result.notified_count,
        "recipients": result.recipients,
    }


# Registered users other than the caller, for the share dialog
@router.get("/users", response_model=RegisteredUsersResponse)
async def get_registered_users(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    users = collaboration_service.list_registered_users(db, current_user)
    return {"success": True, "users": users}


@router.post("/project/create", response_model=CollaborativeProjectResponse, status_code=201)
async def create_collaborative_project(
    body: CreateCollaborativeProjectRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    project, collaboration = collaboration_service.create_collaborative_project(
        db, current_user, body.project_name, body.collaborator_emails
    )
    return {
        "success": True,
        "message": "Collaborative project created successfully",
        "collaboration": collaboration,
        "project": project,
    }
