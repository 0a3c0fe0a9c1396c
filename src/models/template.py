"""Action template models."""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


class TemplateElement(BaseModel):
    """One ordered element of a template. Unknown element fields are kept."""
    model_config = ConfigDict(extra="allow")

    description: str = Field(default="", description="Element description")
    title: Optional[str] = None
    type: Optional[str] = None


class ActionTemplate(BaseModel):
    """Reusable blueprint for document actions."""
    model_config = ConfigDict(extra="ignore")

    template_id: str = Field(..., description="Template ID (text)")
    title: str = Field(..., description="Template title")
    elements: list[TemplateElement] = Field(default_factory=list)
    created_at: Optional[str] = None
