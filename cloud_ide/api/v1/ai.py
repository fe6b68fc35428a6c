import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from cloud_ide.api.deps import load_accessible_file
from cloud_ide.api.v1.auth import get_current_user
from cloud_ide.core.config import settings
from cloud_ide.core.database import get_db
from cloud_ide.models.user import User
from cloud_ide.schemas.ai import (
    ChatRequest,
    ExplainCodeRequest,
    GenerateCodeRequest,
    RefactorCodeRequest,
)
from cloud_ide.utils.call_ai_service import call_ai_service
from cloud_ide.utils.storage import StorageError, read_object

logger = logging.getLogger(__name__)

router = APIRouter()

CHAT_SYSTEM_PROMPT = """You are an expert AI coding assistant integrated into a Cloud IDE.
You answer programming questions, generate production-ready code in any language,
explain code and concepts clearly, debug and fix issues, and refactor existing code.
Be concise but thorough, give code examples when relevant, and follow the
conventions of the language you are writing."""

GENERATE_SYSTEM_PROMPT = """You are a code generation expert. Generate clean, production-ready code based on the user's description.
Include proper error handling, comments, and follow best practices for the specified language.
ONLY return the code, no explanations unless specifically asked. Do not wrap the code in markdown code blocks."""

EXPLAIN_SYSTEM_PROMPT = """You are a code explanation expert. Provide clear, detailed explanations of code, breaking down:
- What the code does
- How it works
- Key concepts used
- Potential improvements or issues
Be educational but concise."""

REFACTOR_SYSTEM_PROMPT = """You are a code refactoring expert. Refactor the provided code focusing on: {focus}.
Provide the improved code with comments explaining the changes. Maintain functionality while improving quality."""


def _messages(system_prompt: str, user_prompt: str):
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def _require(value: str, detail: str) -> None:
    if not value or not value.strip():
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)


@router.post("/chat")
async def chat(
    body: ChatRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    _require(body.message, "Message is required")

    file_name = body.file_name
    file_content = body.file_content
    if body.file_id is not None:
        file = load_accessible_file(db, current_user, body.file_id)
        try:
            file_content = read_object(file.storage_key).decode("utf-8", errors="replace")
        except StorageError as e:
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error fetching file content: {e}",
            )
        file_name = file_name or file.name

    user_prompt = body.message
    if file_name and file_content:
        user_prompt += f"\n\nCurrent file: {file_name}\nContent:\n{file_content}"
    elif file_name:
        user_prompt += f"\n\nWorking with file: {file_name}"
    if body.language:
        user_prompt += f"\n\nTarget language: {body.language}"

    logger.info(f"AI chat for user {current_user.id}, prompt length {len(user_prompt)}")
    reply = await call_ai_service(_messages(CHAT_SYSTEM_PROMPT, user_prompt), temperature=0.7)

    return {
        "success": True,
        "data": {"response": reply, "type": "text", "model": settings.groq_model},
    }


@router.post("/generate-code")
async def generate_code(
    body: GenerateCodeRequest,
    current_user: User = Depends(get_current_user),
):
    _require(body.description, "Code description is required")

    language = body.language or "JavaScript"
    user_prompt = f"Generate {language} code for: {body.description}"
    if body.file_name:
        user_prompt += f"\n\nFile name: {body.file_name}"

    code = await call_ai_service(_messages(GENERATE_SYSTEM_PROMPT, user_prompt), temperature=0.3)

    return {
        "success": True,
        "data": {"code": code, "language": language.lower(), "model": settings.groq_model},
    }


@router.post("/explain")
async def explain_code(
    body: ExplainCodeRequest,
    current_user: User = Depends(get_current_user),
):
    _require(body.code, "Code to explain is required")

    user_prompt = f"Explain this {body.language or ''} code:\n\n{body.code}"
    if body.file_name:
        user_prompt = f"File: {body.file_name}\n\n{user_prompt}"

    explanation = await call_ai_service(
        _messages(EXPLAIN_SYSTEM_PROMPT, user_prompt), temperature=0.5
    )

    return {
        "success": True,
        "data": {"explanation": explanation, "model": settings.groq_model},
    }


@router.post("/refactor")
async def refactor_code(
    body: RefactorCodeRequest,
    current_user: User = Depends(get_current_user),
):
    _require(body.code, "Code to refactor is required")

    focus = body.improvement_type or "general"
    user_prompt = f"Refactor this {body.language or ''} code (focus: {focus}):\n\n{body.code}"
    if body.file_name:
        user_prompt = f"File: {body.file_name}\n\n{user_prompt}"

    code = await call_ai_service(
        _messages(REFACTOR_SYSTEM_PROMPT.format(focus=focus), user_prompt), temperature=0.4
    )

    return {
        "success": True,
        "data": {"code": code, "improvementType": focus, "model": settings.groq_model},
    }
