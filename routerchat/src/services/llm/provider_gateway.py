"""Client for the external chat completion provider (OpenAI-compatible API)."""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import requests

from routerchat.conf.config import Config
from routerchat.src.data_classes import ProviderCompletion
from routerchat.src.services.errors import ProviderError

logger = logging.getLogger(__name__)


class BaseProviderGateway(ABC):
    """Base class for completion provider gateways.

    This abstract class defines the interface that all gateways must implement.
    """

    @abstractmethod
    def complete(
        self,
        provider_model_id: str,
        messages: List[Dict[str, str]],
        api_key: str,
    ) -> ProviderCompletion:
        """Request a single completion for the given conversation.

        Args:
            provider_model_id: Provider-routable model string
            messages: Ordered ``{role, content}`` conversation, oldest first
            api_key: Provider credential

        Returns:
            ProviderCompletion: Normalized reply text and token usage

        Raises:
            ProviderError: On network failure, timeout, HTTP error or empty response
        """


class OpenRouterGateway(BaseProviderGateway):
    """Gateway that calls an OpenRouter-style ``/chat/completions`` endpoint.

    One request per call, no retries: any failure is surfaced to the caller
    as a single ProviderError.
    """

    def __init__(
        self,
        api_base_url: str = Config.OPENROUTER_API_BASE_URL,
        max_tokens: int = Config.PROVIDER_MAX_TOKENS,
        temperature: float = Config.PROVIDER_TEMPERATURE,
        timeout: float = Config.PROVIDER_TIMEOUT,
        referer: str = Config.OPENROUTER_REFERER,
        app_title: str = Config.OPENROUTER_APP_TITLE,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize the gateway.

        Args:
            api_base_url: Base URL of the provider API (e.g. "https://openrouter.ai/api/v1")
            max_tokens: Default completion token budget
            temperature: Default sampling temperature
            timeout: Request timeout in seconds; a timeout counts as a provider error
            referer: Value of the HTTP-Referer attribution header
            app_title: Value of the X-Title attribution header
            session: Optional pre-configured requests session
        """
        self.api_base_url = api_base_url.rstrip("/")
        self.chat_completions_url = f"{self.api_base_url}/chat/completions"
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.timeout = timeout
        self.referer = referer
        self.app_title = app_title
        self.session = session or requests.Session()

    def complete(
        self,
        provider_model_id: str,
        messages: List[Dict[str, str]],
        api_key: str,
    ) -> ProviderCompletion:
        """Send the conversation to the provider and normalize the reply.

        Args:
            provider_model_id: Provider-routable model string
            messages: Ordered ``{role, content}`` conversation, oldest first
            api_key: Provider credential

        Returns:
            ProviderCompletion with the first choice's content and total token usage

        Raises:
            ProviderError: On network failure, timeout, HTTP error or empty response
        """
        payload = {
            "model": provider_model_id,
            "messages": messages,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
        }
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "HTTP-Referer": self.referer,
            "X-Title": self.app_title,
        }
        logger.debug(
            f"Sending {len(messages)} message(s) to {self.chat_completions_url} "
            f"for model {provider_model_id}"
        )

        try:
            response = self.session.post(
                self.chat_completions_url,
                json=payload,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.exceptions.Timeout:
            logger.error(f"Request to completion provider timed out after {self.timeout}s")
            raise ProviderError("timeout")
        except requests.exceptions.RequestException as e:
            logger.error(f"Could not reach completion provider: {str(e)}")
            raise ProviderError("network_error", f"Completion provider unreachable: {str(e)}")

        if not response.ok:
            error_detail = self._error_detail(response)
            error_msg = f"OpenRouter API error: {response.status_code} - {error_detail}"
            logger.error(error_msg)
            raise ProviderError(f"http_{response.status_code}", error_msg)

        try:
            data = response.json()
        except ValueError:
            logger.error("Completion provider returned a non-JSON body")
            raise ProviderError("invalid_response")

        return self.normalize_response(data, provider_model_id)

    @staticmethod
    def normalize_response(data: Any, provider_model_id: str) -> ProviderCompletion:
        """Turn a provider response body into a ProviderCompletion.

        Args:
            data: Decoded JSON body
            provider_model_id: Model the completion was requested for

        Returns:
            ProviderCompletion; missing content becomes "" and missing usage 0

        Raises:
            ProviderError: "empty_response" if there is no choice to read,
                "invalid_response" if the body does not have the expected shape
        """
        if not isinstance(data, dict):
            raise ProviderError("invalid_response")

        choices = data.get("choices")
        if not choices:
            raise ProviderError("empty_response", "No response from OpenRouter API")
        if not isinstance(choices, list) or not isinstance(choices[0], dict):
            raise ProviderError("invalid_response", "Malformed choices in provider response")

        message = choices[0].get("message") or {}
        if not isinstance(message, dict):
            raise ProviderError("invalid_response", "Malformed message in provider response")
        content = message.get("content") or ""
        if not isinstance(content, str):
            raise ProviderError("invalid_response", "Provider returned non-text content")

        usage = data.get("usage") or {}
        if not isinstance(usage, dict):
            raise ProviderError("invalid_response", "Malformed usage in provider response")
        try:
            token_usage = int(usage.get("total_tokens") or 0)
        except (TypeError, ValueError):
            raise ProviderError("invalid_response", "Malformed token usage in provider response")

        return ProviderCompletion(
            content=content, token_usage=token_usage, model=provider_model_id
        )

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.reason or "Unknown error"
        if isinstance(body, dict):
            error = body.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return response.reason or "Unknown error"
