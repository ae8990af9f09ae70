"""OpenAI provider supporting the chat-completions and responses call shapes."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

import httpx

from ...config import LoggingConfig, ProviderConfig
from ...core.errors import CredentialError, ProviderEmptyResult, ProviderError, ProviderSchemaError
from ...core.types import SummaryRequest
from ...utils.logging import log_event, redact_secret, redact_text, truncate_text
from ..responses import chat_message_text, extract_response_text, is_incomplete
from ..tracing import record_span_error, set_span_output, start_span
from .base import SummaryProvider

logger = logging.getLogger(__name__)

MAX_BEARER_TOKEN_CHARS = 200
_ERROR_SUMMARY_CHARS = 300

_MAX_TOKENS_RE = re.compile(r"max_tokens", re.IGNORECASE)
_MAX_COMPLETION_TOKENS_RE = re.compile(r"max_?completion_?tokens", re.IGNORECASE)
_UNSUPPORTED_RE = re.compile(r"unsupported_parameter|unsupported parameter", re.IGNORECASE)
_TEXT_FORMAT_RE = re.compile(r"text\.(format|verbosity)", re.IGNORECASE)
_TOOL_CHOICE_RE = re.compile(r"tool_choice", re.IGNORECASE)

_KEY_GUIDANCE = (
    "API key contains non-ASCII characters. It was likely pasted with a stray "
    "or typographic character (such as an ellipsis); copy the key again from "
    "your provider dashboard."
)


def validate_header_value(name: str, value: str) -> None:
    """Reject header values the HTTP layer cannot send.

    Raises:
        CredentialError: If the value is not plain ASCII, or if it is an
            Authorization bearer token longer than 200 characters. The
            offending value is never included in the message.
    """
    try:
        value.encode("ascii")
    except UnicodeEncodeError:
        if name.lower() == "authorization":
            raise CredentialError(_KEY_GUIDANCE) from None
        raise CredentialError(f"Header {name} contains non-ASCII characters") from None
    if name.lower() == "authorization" and value.startswith("Bearer "):
        if len(value) - len("Bearer ") > MAX_BEARER_TOKEN_CHARS:
            raise CredentialError(
                f"API key is longer than {MAX_BEARER_TOKEN_CHARS} characters; check that only the key was pasted"
            )


def check_api_key(api_key: str | None) -> str:
    key = (api_key or "").strip()
    if not key:
        raise CredentialError("API key not set")
    validate_header_value("Authorization", f"Bearer {key}")
    return key


class OpenAIProvider(SummaryProvider):
    """OpenAI-backed provider.

    Models matching ``structured_model_prefixes`` go straight to the
    ``/responses`` endpoint. Everything else uses ``/chat/completions`` and
    switches to ``/responses`` when the server rejects the token parameter.
    """

    def __init__(
        self,
        cfg: ProviderConfig,
        client: httpx.AsyncClient,
        log_cfg: LoggingConfig | None = None,
        llm_logger: logging.Logger | None = None,
    ):
        self.cfg = cfg
        self.client = client
        self.log_cfg = log_cfg or LoggingConfig()
        self.llm_logger = llm_logger

    def uses_structured_shape(self, model_id: str) -> bool:
        prefixes = tuple(p.lower() for p in self.cfg.structured_model_prefixes)
        return bool(prefixes) and model_id.lower().startswith(prefixes)

    async def complete(self, request: SummaryRequest) -> str:
        api_key = check_api_key(request.api_key)
        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
        }

        if self.uses_structured_shape(request.model_id):
            return await self._responses(request, headers, api_key)
        return await self._chat(request, headers, api_key)

    async def _chat(self, request: SummaryRequest, headers: dict[str, str], api_key: str) -> str:
        payload = {
            "model": request.model_id,
            "messages": [
                {"role": "system", "content": request.system_prompt},
                {"role": "user", "content": request.user_text},
            ],
        }
        with start_span(
            "openai.chat",
            kind="llm",
            input_value=request.user_text,
            attributes={"llm.model": request.model_id, "llm.provider": "openai"},
        ) as span:
            resp = await self._post("chat/completions", payload, headers, api_key, span)
            if resp.is_success:
                text = chat_message_text(_json_or_none(resp))
                if not text or not text.strip():
                    exc = ProviderEmptyResult("No summary returned by OpenAI")
                    record_span_error(span, exc)
                    self._log_llm_response(request, "llm_chat_response", "empty", resp.text, api_key)
                    raise exc
                set_span_output(span, text)
                self._log_llm_response(request, "llm_chat_response", "ok", text, api_key)
                return text

            body = redact_secret(resp.text, api_key)
            if resp.status_code == 400 and _MAX_TOKENS_RE.search(body) and _MAX_COMPLETION_TOKENS_RE.search(body):
                log_event(
                    logger,
                    "Chat shape rejected token parameter, switching to responses",
                    level=logging.DEBUG,
                    model=request.model_id,
                )
                set_span_output(span, "switched_to_responses")
            else:
                exc = ProviderError(
                    f"OpenAI error ({resp.status_code}): {_error_summary(body)}",
                    status_code=resp.status_code,
                    body=body,
                )
                record_span_error(span, exc)
                self._log_llm_response(request, "llm_chat_response", "provider_error", body, api_key)
                raise exc
        return await self._responses(request, headers, api_key)

    async def _responses(self, request: SummaryRequest, headers: dict[str, str], api_key: str) -> str:
        base_payload: dict[str, Any] = {
            "model": request.model_id,
            "instructions": request.system_prompt,
            "input": [
                {
                    "role": "user",
                    "content": [{"type": "input_text", "text": request.user_text}],
                }
            ],
        }
        caps: list[int | None] = [None, self.cfg.fallback_output_cap]
        include_format = True
        include_tool_choice = True
        last_status: int | None = None
        last_body: str | None = None

        with start_span(
            "openai.responses",
            kind="llm",
            input_value=request.user_text,
            attributes={"llm.model": request.model_id, "llm.provider": "openai"},
        ) as span:
            for index, cap in enumerate(caps):
                has_higher_cap = index < len(caps) - 1
                while True:
                    payload = dict(base_payload)
                    if include_tool_choice:
                        payload["tool_choice"] = "none"
                    if include_format:
                        payload["text"] = {"format": {"type": "text"}, "verbosity": "low"}
                    if cap:
                        payload["max_output_tokens"] = cap

                    resp = await self._post("responses", payload, headers, api_key, span)
                    if resp.is_success:
                        data = _json_or_none(resp)
                        text = extract_response_text(data)
                        if text and text.strip():
                            set_span_output(span, text)
                            self._log_llm_response(request, "llm_responses_response", "ok", text, api_key)
                            return text
                        if is_incomplete(data) and has_higher_cap:
                            log_event(
                                logger,
                                "Incomplete empty response, retrying with output cap",
                                level=logging.DEBUG,
                                model=request.model_id,
                                cap=caps[index + 1],
                            )
                            break
                        exc = ProviderEmptyResult("No summary returned by OpenAI")
                        record_span_error(span, exc)
                        self._log_llm_response(request, "llm_responses_response", "empty", resp.text, api_key)
                        raise exc

                    last_status = resp.status_code
                    last_body = redact_secret(resp.text, api_key)
                    if _UNSUPPORTED_RE.search(last_body):
                        if include_format and _TEXT_FORMAT_RE.search(last_body):
                            include_format = False
                            continue
                        if include_tool_choice and _TOOL_CHOICE_RE.search(last_body):
                            include_tool_choice = False
                            continue
                    break

            summary = _error_summary(last_body or "no response body")
            exc = ProviderSchemaError(
                f"OpenAI error ({last_status if last_status is not None else 'responses'}): {summary}",
                status_code=last_status,
                body=last_body,
            )
            record_span_error(span, exc)
            self._log_llm_response(request, "llm_responses_response", "provider_error", last_body or "", api_key)
            raise exc

    async def _post(
        self,
        path: str,
        payload: dict[str, Any],
        headers: dict[str, str],
        api_key: str,
        span: Any | None,
    ) -> httpx.Response:
        url = f"{self.cfg.base_url.rstrip('/')}/{path}"
        try:
            return await self.client.post(url, json=payload, headers=headers, timeout=self.cfg.timeout_seconds)
        except httpx.HTTPError as exc:
            error = ProviderError(
                f"OpenAI request failed: {type(exc).__name__}: {redact_secret(str(exc), api_key)}"
            )
            record_span_error(span, error)
            raise error from None

    def _log_llm_response(
        self,
        request: SummaryRequest,
        event: str,
        status: str,
        content: str,
        api_key: str,
    ) -> None:
        if self.llm_logger is None:
            return
        detail = self.log_cfg.llm_log_detail
        redaction = self.log_cfg.llm_log_redaction
        payload = {
            "event": event,
            "status": status,
            "model": request.model_id,
            "raw_response": truncate_text(redact_text(redact_secret(content, api_key), redaction)),
        }
        if detail == "prompt_response":
            payload["raw_prompt"] = truncate_text(redact_text(request.user_text, redaction))
        log_event(self.llm_logger, "LLM response", **payload)


def _json_or_none(resp: httpx.Response) -> Any:
    try:
        return resp.json()
    except (json.JSONDecodeError, ValueError):
        return None


def _error_summary(body: str) -> str:
    """One-line, human-readable form of an error body."""
    message = None
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, ValueError):
        data = None
    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict) and isinstance(error.get("message"), str):
            message = error["message"]
        elif isinstance(error, str):
            message = error
    text = " ".join((message or body).split())
    if len(text) > _ERROR_SUMMARY_CHARS:
        text = text[:_ERROR_SUMMARY_CHARS] + "..."
    return text
