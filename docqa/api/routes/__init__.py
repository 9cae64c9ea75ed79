"""
docqa/api/routes/__init__.py

Shared FastAPI dependencies used across all route modules.
"""
from fastapi import Request

from docqa.pipeline.orchestrator import AskPipeline


def get_pipeline(request: Request) -> AskPipeline:
    """FastAPI dependency returning the pipeline built during app startup."""
    return request.app.state.pipeline
