"""
Abstract base client for chat-completion providers.

Defines the interface every provider client must adhere to. This abstraction
lets the completion engine and handlers stay unaware of the wire format.
"""

from abc import ABC, abstractmethod
import structlog

from contract_assistant.models.llm_models import ChatCompletionRequest, ChatCompletionResponse


logger = structlog.get_logger(__name__)


class BaseLLMClient(ABC):
    """
    Abstract base class for chat-completion clients.

    Responsibilities:
    - Send exactly one request per chat_completion() call
    - Parse responses into ChatCompletionResponse
    - Raise LLMClientError subclasses on failure

    Does NOT handle:
    - Retries, backoff or attempt timeouts (that's CompletionEngine's job)
    - Error classification (that's the classifier's job)
    """

    def __init__(self, base_url: str, timeout: float = 60.0, **kwargs):
        """
        Initialize base client.

        Args:
            base_url: Base URL of the provider API (e.g., https://api.openai.com/v1)
            timeout: Transport-level timeout in seconds
            **kwargs: Additional provider-specific config
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.extra_config = kwargs

        logger.info(
            "Initialized LLM client",
            client_class=self.__class__.__name__,
            base_url=self.base_url,
            timeout=timeout,
        )

    @abstractmethod
    async def chat_completion(self, request: ChatCompletionRequest) -> ChatCompletionResponse:
        """
        Perform a single chat completion (one raw call, never retried here).

        Raises:
            LLMAPIError: Provider returned a non-2xx status
            LLMTimeoutError: Transport timeout
            LLMConnectionError: Network failure
            LLMResponseFormatError: Unusable 2xx body
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Check if the provider is reachable with the configured credentials.

        Note:
            This should NOT raise exceptions - return False on error.
        """
        pass

    async def close(self):
        """
        Close client connections and cleanup resources.

        Default implementation does nothing.
        """
        logger.debug("Closing LLM client", client_class=self.__class__.__name__)

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"timeout={self.timeout}s)"
        )
