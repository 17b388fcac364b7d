"""Pydantic models for the screenplay data model and API request/response schemas."""

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_TITLE = "Untitled Screenplay"
DEFAULT_AUTHOR = "Anonymous"

# Paragraph type used for scene headings; not an element kind.
SCENE_HEADING_TYPE = "Scene Heading"


class ElementKind(str, Enum):
    """Paragraph role of a scene element (FDX ``Paragraph/@Type``)."""

    ACTION = "Action"
    CHARACTER = "Character"
    DIALOGUE = "Dialogue"
    PARENTHETICAL = "Parenthetical"
    TRANSITION = "Transition"

    @classmethod
    def from_raw(cls, value: Any) -> "ElementKind":
        """Resolve an untyped value to a kind, falling back to ``ACTION``.

        Matching is case-insensitive against both member names and values,
        so ``"dialogue"``, ``"DIALOGUE"`` and ``"Dialogue"`` are equivalent.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return cls.ACTION
        key = value.strip().lower()
        for kind in cls:
            if key in (kind.value.lower(), kind.name.lower()):
                return kind
        return cls.ACTION


# ---------------------------------------------------------------------------
# Screenplay data model -- built once per conversion, read-only afterwards
# ---------------------------------------------------------------------------


class Element(BaseModel):
    """One paragraph-level unit within a scene."""

    model_config = ConfigDict(frozen=True)

    kind: ElementKind = Field(default=ElementKind.ACTION, description="Paragraph role")
    content: str = Field(default="", description="Paragraph text")

    @field_validator("kind", mode="before")
    @classmethod
    def resolve_kind(cls, v: Any) -> ElementKind:
        """Map any incoming value onto the closed kind vocabulary."""
        return ElementKind.from_raw(v)


class Scene(BaseModel):
    """A scene heading followed by its ordered body elements."""

    model_config = ConfigDict(frozen=True)

    heading: str = Field(..., description="Scene heading line, e.g. INT. KITCHEN - DAY")
    elements: tuple[Element, ...] = Field(default=(), description="Ordered body elements")


class Screenplay(BaseModel):
    """Structured screenplay -- transient, never persisted."""

    model_config = ConfigDict(frozen=True)

    scenes: tuple[Scene, ...] = Field(default=(), description="Scenes in document order")

    @property
    def element_count(self) -> int:
        return sum(len(scene.elements) for scene in self.scenes)


class TitlePageInfo(BaseModel):
    """Title page text supplied alongside a screenplay."""

    model_config = ConfigDict(frozen=True)

    title: str = Field(default=DEFAULT_TITLE, description="Screenplay title")
    author: str = Field(default=DEFAULT_AUTHOR, description="Screenplay author")

    @field_validator("title", mode="before")
    @classmethod
    def default_title(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_TITLE
        return str(v).strip()

    @field_validator("author", mode="before")
    @classmethod
    def default_author(cls, v: Any) -> str:
        if v is None or not str(v).strip():
            return DEFAULT_AUTHOR
        return str(v).strip()


# ---------------------------------------------------------------------------
# Structuring reply models -- the JSON shape requested from the LLM
# ---------------------------------------------------------------------------


class ElementReply(BaseModel):
    """Element object as returned by the text-generation service."""

    model_config = ConfigDict(extra="ignore")

    type: str | None = Field(None, description="Element kind, free text")
    content: str | None = Field("", description="Element text")


class SceneReply(BaseModel):
    """Scene object as returned by the text-generation service."""

    model_config = ConfigDict(extra="ignore")

    heading: str = Field(..., description="Scene heading")
    elements: list[ElementReply] = Field(default_factory=list, description="Scene elements")


class ScreenplayReply(BaseModel):
    """Top-level reply object as returned by the text-generation service."""

    model_config = ConfigDict(extra="ignore")

    scenes: list[SceneReply] = Field(..., description="Scenes in order")

    def to_screenplay(self) -> Screenplay:
        """Map the reply field-for-field onto the immutable ``Screenplay``."""
        return Screenplay(
            scenes=tuple(
                Scene(
                    heading=scene.heading,
                    elements=tuple(
                        Element(kind=el.type, content=el.content or "")
                        for el in scene.elements
                    ),
                )
                for scene in self.scenes
            )
        )


# Request Models


class ConvertRequest(BaseModel):
    """JSON body for the convert endpoint."""

    treatment: str = Field(..., description="Raw treatment text", min_length=1)
    title: str | None = Field(None, description="Screenplay title", max_length=200)
    author: str | None = Field(None, description="Screenplay author", max_length=200)


# Response Models


class ConversionResponse(BaseModel):
    """Successful conversion result referencing the generated file."""

    success: bool = Field(default=True, description="Always true for successful conversions")
    filename: str = Field(..., description="Name of the generated .fdx file")
    download_url: str = Field(..., description="Relative URL to download the file")
    title: str = Field(..., description="Title used on the title page")
    author: str = Field(..., description="Author used on the title page")
    scene_count: int = Field(..., ge=0, description="Number of scenes")
    element_count: int = Field(..., ge=0, description="Number of scene elements")
    message: str = Field(
        default="Screenplay generated successfully",
        description="Human-readable message",
    )


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(default="healthy", description="Service health status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")
    version: str = Field(default="0.1.0", description="API version")


class ReadinessResponse(BaseModel):
    """Readiness check response with dependency status."""

    status: str = Field(..., description="Overall readiness status")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Response timestamp")
    services: dict[str, bool] = Field(..., description="Service availability status")


# Error Response Models


class ErrorDetail(BaseModel):
    """Detailed error information."""

    field: str | None = Field(None, description="Field that caused the error")
    message: str = Field(..., description="Error message")
    error_code: str | None = Field(None, description="Error code for programmatic handling")


class ErrorResponse(BaseModel):
    """Standard error response."""

    success: bool = Field(default=False, description="Always false for errors")
    error: str = Field(..., description="Error type")
    message: str = Field(..., description="Human-readable error message")
    details: list[ErrorDetail] = Field(default_factory=list, description="Detailed error info")
    request_id: str | None = Field(None, description="Request tracking ID")
    timestamp: datetime = Field(default_factory=datetime.utcnow, description="Error timestamp")
