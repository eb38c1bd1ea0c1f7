"""
OpenAI transport implementation.

Communicates with the OpenAI REST API (or any compatible server) using
httpx AsyncClient. Supports:
- Chat completions, plain text or JSON Schema constrained (response_format)
- Model listing and single-model metadata
- Exact token counting with tiktoken
- Connection pooling via a persistent client

Every failure leaves this module either as a TransportError carrying a
TransportErrorSignal, or as a ProviderError(INVALID_RESPONSE /
NO_MODELS_FOUND) for payloads that arrived but are malformed.
"""

import json
import time
from functools import lru_cache
from typing import Any, Dict, Optional

import httpx
import structlog
import tiktoken

from llm_resilience.llm.exceptions import (
    ProviderError,
    TransportError,
    TransportErrorSignal,
)
from llm_resilience.llm.output_parser import parse_structured_output
from llm_resilience.models.enums import ErrorKind
from llm_resilience.models.llm_models import CallOptions, OutputSchema, PromptPayload
from llm_resilience.monitoring.metrics import llm_latency_seconds, llm_tokens_total


logger = structlog.get_logger(__name__)


@lru_cache(maxsize=32)
def _encoding_for_model(model_name: str) -> Optional[tiktoken.Encoding]:
    """
    tiktoken encoding for the model, loaded at most once per model name.

    The first load may download the BPE file. A failed load is cached as
    None so later budget checks fall back to the approximation instead of
    retrying the download.
    """
    try:
        return tiktoken.encoding_for_model(model_name)
    except KeyError:
        logger.debug("No tiktoken encoding for model", model=model_name)
        return None
    except Exception as e:
        logger.warning(
            "Failed to load tiktoken encoding",
            model=model_name,
            error=str(e),
            error_type=type(e).__name__,
        )
        return None


def signal_from_response(response: httpx.Response, cause: BaseException) -> TransportErrorSignal:
    """
    Build a signal from an error response.

    OpenAI error bodies look like:
    {"error": {"message": "...", "type": "invalid_request_error", "code": "context_length_exceeded"}}
    """
    error_body: Dict[str, Any] = {}
    try:
        body = response.json()
        if isinstance(body, dict) and isinstance(body.get("error"), dict):
            error_body = body["error"]
    except ValueError:
        pass

    message = error_body.get("message") or response.text or response.reason_phrase
    return TransportErrorSignal(
        message=str(message),
        status_code=response.status_code,
        provider_error_code=error_body.get("code"),
        provider_error_type=error_body.get("type"),
        response_received=True,
        cause=cause,
    )


def build_messages(prompt_payload: PromptPayload) -> list[Dict[str, Any]]:
    """Plain text prompts become a single user message."""
    if isinstance(prompt_payload, str):
        return [{"role": "user", "content": prompt_payload}]
    return list(prompt_payload)


class OpenAITransport:
    """
    OpenAI-specific transport using httpx for async HTTP communication.

    API Endpoints:
    - POST /v1/chat/completions: Completion with optional response_format
    - GET /v1/models: List available models
    - GET /v1/models/{model}: Get model details

    No retries happen here; a single HTTP attempt maps to a single
    executor attempt.
    """

    def __init__(
        self,
        api_key: str,
        model_name: str,
        base_url: str = "https://api.openai.com",
        timeout: int = 60,
        provider_name: str = "openai",
        connection_limits: Optional[httpx.Limits] = None,
        http_transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the OpenAI transport.

        Args:
            api_key: Bearer token for the Authorization header
            model_name: Model used for token counting
            base_url: API host (without the /v1 suffix)
            timeout: Request timeout in seconds
            provider_name: Provider label for errors and metrics
            connection_limits: httpx connection pool limits (default: 10 max connections)
            http_transport: Custom httpx transport (e.g. httpx.MockTransport in tests)
        """
        self.api_key = api_key
        self.model_name = model_name
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.provider_name = provider_name

        if connection_limits is None:
            connection_limits = httpx.Limits(
                max_keepalive_connections=5,
                max_connections=10,
                keepalive_expiry=30.0
            )

        self._client: Optional[httpx.AsyncClient] = None
        self._connection_limits = connection_limits
        self._http_transport = http_transport

        logger.info(
            "OpenAI transport initialized",
            base_url=self.base_url,
            model=model_name,
            timeout=timeout,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                limits=self._connection_limits,
                transport=self._http_transport,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
            )
            logger.debug("Created new httpx AsyncClient")
        return self._client

    async def _request(
        self,
        method: str,
        path: str,
        payload: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        """
        Send one HTTP request and normalize failures.

        Raises:
            TransportError: Connection-level failure or non-2xx response
        """
        client = await self._get_client()
        try:
            response = await client.request(method, path, json=payload)
            response.raise_for_status()
            return response

        except httpx.HTTPStatusError as e:
            signal = signal_from_response(e.response, e)
            logger.warning(
                "OpenAI HTTP error",
                path=path,
                status_code=signal.status_code,
                provider_error_code=signal.provider_error_code,
                provider_error_type=signal.provider_error_type,
                error=signal.message,
            )
            raise TransportError(signal) from e

        except httpx.TimeoutException as e:
            logger.warning("OpenAI request timeout", path=path, timeout=self.timeout, error=str(e))
            raise TransportError(
                TransportErrorSignal(
                    message=f"Request timeout after {self.timeout}s",
                    response_received=False,
                    cause=e,
                )
            ) from e

        except httpx.RequestError as e:
            logger.warning(
                "OpenAI network error",
                path=path,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise TransportError(
                TransportErrorSignal(
                    message=f"Network error connecting to OpenAI API: {e}",
                    response_received=False,
                    cause=e,
                )
            ) from e

    def _json(self, response: httpx.Response, context: str) -> Any:
        try:
            return response.json()
        except json.JSONDecodeError as e:
            raise ProviderError(
                f"Invalid JSON response from OpenAI API while trying to {context}",
                ErrorKind.INVALID_RESPONSE,
                self.provider_name,
                status_code=response.status_code,
                cause=e,
            ) from e

    async def invoke(
        self,
        prompt_payload: PromptPayload,
        call_options: CallOptions,
        schema: Optional[OutputSchema] = None,
    ) -> Any:
        """
        Run a chat completion.

        POST /v1/chat/completions with payload:
        {
            "model": "gpt-4-turbo",
            "messages": [{"role": "user", "content": "..."}],
            "temperature": 0.1,
            "max_tokens": 1024,
            "stop": ["###"],
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": "extract_Invoice", "schema": {...}}
            }
        }
        """
        bound = call_options.bound
        payload: Dict[str, Any] = {
            "model": bound.model,
            "messages": build_messages(prompt_payload),
            "temperature": bound.temperature,
        }

        if bound.max_tokens is not None:
            payload["max_tokens"] = bound.max_tokens
        if bound.top_p is not None:
            payload["top_p"] = bound.top_p
        if bound.presence_penalty is not None:
            payload["presence_penalty"] = bound.presence_penalty
        if bound.frequency_penalty is not None:
            payload["frequency_penalty"] = bound.frequency_penalty
        if call_options.runtime.stop:
            payload["stop"] = call_options.runtime.stop

        if schema is not None:
            json_schema: Dict[str, Any] = {
                "name": schema.extraction_name,
                "schema": schema.json_schema,
            }
            if schema.description:
                json_schema["description"] = schema.description
            payload["response_format"] = {"type": "json_schema", "json_schema": json_schema}

        logger.info(
            "Sending completion request to OpenAI",
            model=bound.model,
            temperature=bound.temperature,
            max_tokens=bound.max_tokens,
            has_schema=schema is not None,
        )

        start_time = time.time()
        try:
            response = await self._request("POST", "/v1/chat/completions", payload)
        except TransportError:
            llm_latency_seconds.labels(model=bound.model, success="false").observe(
                time.time() - start_time
            )
            raise
        latency_ms = int((time.time() - start_time) * 1000)

        data = self._json(response, "read a completion")
        try:
            choice = data["choices"][0]
            message = choice["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(
                "Completion response has no choices",
                ErrorKind.INVALID_RESPONSE,
                self.provider_name,
                status_code=response.status_code,
                cause=e,
            ) from e

        usage = data.get("usage") or {}
        prompt_tokens = usage.get("prompt_tokens")
        completion_tokens = usage.get("completion_tokens")
        model_version = data.get("model", bound.model)

        logger.info(
            "OpenAI completion successful",
            model=model_version,
            latency_ms=latency_ms,
            prompt_tokens=prompt_tokens,
            completion_tokens=completion_tokens,
            finish_reason=choice.get("finish_reason"),
        )

        llm_latency_seconds.labels(model=bound.model, success="true").observe(latency_ms / 1000.0)
        if prompt_tokens:
            llm_tokens_total.labels(model=bound.model, token_type="prompt").inc(prompt_tokens)
        if completion_tokens:
            llm_tokens_total.labels(model=bound.model, token_type="completion").inc(completion_tokens)

        if message.get("refusal"):
            raise ProviderError(
                f"Model refused the request: {message['refusal']}",
                ErrorKind.INVALID_RESPONSE,
                self.provider_name,
                status_code=response.status_code,
            )

        content = message.get("content") or ""
        if schema is None:
            return content
        return parse_structured_output(content, schema, self.provider_name)

    def count_tokens(self, text: str) -> Optional[int]:
        """Exact token count via tiktoken; None when the model has no known encoding."""
        encoding = _encoding_for_model(self.model_name)
        if encoding is None:
            return None
        # Special-token text in a prompt is counted as ordinary text
        return len(encoding.encode(text, disallowed_special=()))

    async def list_model_ids(self) -> list[str]:
        """
        List available models via GET /v1/models.

        Response: {"object": "list", "data": [{"id": "gpt-4-turbo", ...}, ...]}
        """
        logger.debug("Fetching available models from OpenAI API")
        response = await self._request("GET", "/v1/models")
        data = self._json(response, "fetch OpenAI models")

        models = data.get("data") if isinstance(data, dict) else None
        if not isinstance(models, list):
            logger.warning("Invalid models listing payload", payload_type=type(data).__name__)
            raise ProviderError(
                "Invalid response format from OpenAI API: missing or invalid data array",
                ErrorKind.INVALID_RESPONSE,
                self.provider_name,
                status_code=response.status_code,
            )

        try:
            model_ids = [model["id"] for model in models]
        except (KeyError, TypeError) as e:
            raise ProviderError(
                "Invalid response format from OpenAI API: model entry without id",
                ErrorKind.INVALID_RESPONSE,
                self.provider_name,
                status_code=response.status_code,
                cause=e,
            ) from e

        if not model_ids:
            logger.warning("No models found in OpenAI API response")
            raise ProviderError(
                "No models found in OpenAI API response",
                ErrorKind.NO_MODELS_FOUND,
                self.provider_name,
                status_code=response.status_code,
            )

        logger.debug("Listed available models", count=len(model_ids))
        return model_ids

    async def retrieve_model(self, model_name: str) -> Dict[str, Any]:
        """Get model metadata via GET /v1/models/{model}."""
        response = await self._request("GET", f"/v1/models/{model_name}")
        data = self._json(response, f"retrieve model {model_name}")
        if not isinstance(data, dict):
            raise ProviderError(
                f"Invalid model payload for {model_name}",
                ErrorKind.INVALID_RESPONSE,
                self.provider_name,
                status_code=response.status_code,
            )
        return data

    async def close(self) -> None:
        """Close the HTTP client connection."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            logger.debug("Closed OpenAI transport connection")

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"base_url={self.base_url}, "
            f"model={self.model_name}, "
            f"timeout={self.timeout}s)"
        )
