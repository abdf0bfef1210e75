"""Health check endpoints."""
from fastapi import APIRouter

from supplement_engine.azure import get_openai_client
from supplement_engine.config import settings
from supplement_engine.knowledge import get_knowledge_base
from supplement_engine.models.schemas import HealthResponse
from supplement_engine.utils.logging import get_logger

logger = get_logger(__name__)
router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check for the engine and its optional prose collaborator.

    Returns:
        HealthResponse; "degraded" when the catalogue has dangling references
        or an enabled prose model is unreachable
    """
    logger.info("Performing health check")

    services_status = {
        "knowledge_base": False,
        "prose_model": False,
    }

    try:
        services_status["knowledge_base"] = not get_knowledge_base().integrity_issues()
    except Exception as e:
        logger.error("Knowledge base health check error", error=str(e))

    if settings.prose_enabled:
        services_status["prose_model"] = await get_openai_client().health_check()

    required = [services_status["knowledge_base"]]
    if settings.prose_enabled:
        required.append(services_status["prose_model"])
    status = "healthy" if all(required) else "degraded"

    logger.info("Health check completed", status=status, services=services_status)

    return HealthResponse(
        status=status,
        services=services_status
    )
