"""Azure OpenAI client wrapper used by the prose writer."""
import random
import time
from typing import Optional
from azure.identity import DefaultAzureCredential, get_bearer_token_provider
from openai import AzureOpenAI
from openai import APIConnectionError, APITimeoutError, APIStatusError, RateLimitError

from supplement_engine.config import settings
from supplement_engine.utils.logging import get_logger

logger = get_logger(__name__)

COGNITIVE_SERVICES_SCOPE = "https://cognitiveservices.azure.com/.default"
RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})
TRANSIENT_ERRORS = (RateLimitError, APIStatusError, APITimeoutError, APIConnectionError)


def _is_transient(error: Exception) -> bool:
    """Rate limits, NoCapacity, 5xx and transport failures are worth retrying."""
    if isinstance(error, (APITimeoutError, APIConnectionError)):
        return True
    return getattr(error, "status_code", None) in RETRYABLE_STATUS_CODES or "NoCapacity" in str(error)


def _retry_after(error: Exception) -> Optional[float]:
    response = getattr(error, "response", None)
    headers = getattr(response, "headers", None)
    if headers is None:
        return None
    value = headers.get("retry-after")
    try:
        return float(value) if value is not None else None
    except ValueError:
        return None


def _retry_delay(error: Exception, attempt: int) -> float:
    """Seconds to wait before the next attempt: ``retry-after`` or exponential backoff, plus jitter."""
    base = max(0.1, float(settings.azure_openai_retry_base_seconds))
    ceiling = max(base, float(settings.azure_openai_retry_max_seconds))
    delay = _retry_after(error)
    if delay is None:
        delay = min(ceiling, base * (2 ** (attempt - 1)))
    return min(ceiling, delay + random.uniform(0, delay * 0.25))


class OpenAIClient:
    """Wrapper for Azure OpenAI with API-key or Entra ID authentication.

    The underlying client is created lazily, so constructing the wrapper never
    touches the network or requires configuration.
    """

    def __init__(self):
        self._client: Optional[AzureOpenAI] = None

    @property
    def client(self) -> AzureOpenAI:
        """Get or create the Azure OpenAI client.

        Returns:
            Configured AzureOpenAI client

        Raises:
            RuntimeError: If no endpoint is configured
        """
        if self._client is None:
            if not settings.azure_openai_endpoint:
                raise RuntimeError("AZURE_OPENAI_ENDPOINT is not configured")

            if settings.azure_openai_api_key:
                auth = {"api_key": settings.azure_openai_api_key}
            else:
                # Entra ID with auto-refreshing tokens
                auth = {
                    "azure_ad_token_provider": get_bearer_token_provider(
                        DefaultAzureCredential(), COGNITIVE_SERVICES_SCOPE
                    )
                }
            self._client = AzureOpenAI(
                azure_endpoint=settings.azure_openai_endpoint,
                api_version=settings.azure_openai_api_version,
                **auth,
            )
            logger.info(
                "Azure OpenAI client initialized",
                endpoint=settings.azure_openai_endpoint,
                auth="api_key" if settings.azure_openai_api_key else "entra_id",
            )

        return self._client

    async def health_check(self) -> bool:
        """Whether a client can be built from the current configuration."""
        try:
            _ = self.client
            return True
        except Exception as e:
            logger.error("Azure OpenAI health check failed", error=str(e))
            return False

    def chat_completions_create(self, **kwargs):
        """Create a chat completion, retrying transient failures.

        Synchronous; async callers should run it in a thread.

        Raises:
            The last OpenAI error once retries are exhausted, or immediately for
            non-transient errors
        """
        attempts = max(1, int(settings.azure_openai_max_retries))
        for attempt in range(1, attempts + 1):
            try:
                return self.client.chat.completions.create(**kwargs)
            except TRANSIENT_ERRORS as e:
                if attempt >= attempts or not _is_transient(e):
                    raise
                delay = _retry_delay(e, attempt)
                logger.warning(
                    "Azure OpenAI call failed; retrying",
                    attempt=attempt,
                    max_attempts=attempts,
                    status_code=getattr(e, "status_code", None),
                    sleep_seconds=round(delay, 2),
                )
                time.sleep(delay)
        raise RuntimeError("Azure OpenAI call failed with unknown error")


# Global singleton instance
_openai_client: Optional[OpenAIClient] = None


def get_openai_client() -> OpenAIClient:
    """Get the process-wide prose client."""
    global _openai_client
    if _openai_client is None:
        _openai_client = OpenAIClient()
    return _openai_client
