from pydantic import BaseModel, Field


class AskResponse(BaseModel):
    """Successful answer to a document question."""
    answer: str = Field(..., min_length=1, description="Trimmed answer text from the completion provider")


class ErrorResponse(BaseModel):
    """Uniform error envelope for every client- or server-fault."""
    error: str


class HealthResponse(BaseModel):
    status: str = "healthy"
    app: str
    version: str
