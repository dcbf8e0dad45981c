"""Services for Robin."""
from .assistant_service import AssistantService

__all__ = ["AssistantService"]
