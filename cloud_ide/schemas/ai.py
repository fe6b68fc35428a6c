from typing import Optional

from pydantic import Field

from cloud_ide.schemas.base import RequestModel


class ChatRequest(RequestModel):
    message: str = ""
    file_content: Optional[str] = None
    file_name: Optional[str] = None
    language: Optional[str] = None
    file_id: Optional[int] = Field(None, description="Stored file to use as context")


class GenerateCodeRequest(RequestModel):
    description: str = ""
    language: Optional[str] = None
    file_name: Optional[str] = None


class ExplainCodeRequest(RequestModel):
    code: str = ""
    file_name: Optional[str] = None
    language: Optional[str] = None


class RefactorCodeRequest(RequestModel):
    code: str = ""
    file_name: Optional[str] = None
    language: Optional[str] = None
    improvement_type: Optional[str] = None
