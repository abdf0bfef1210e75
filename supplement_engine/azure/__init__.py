"""Azure client initialization module."""
from supplement_engine.azure.openai_client import OpenAIClient, get_openai_client

__all__ = [
    "OpenAIClient",
    "get_openai_client",
]
