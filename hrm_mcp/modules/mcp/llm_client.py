"""HTTP clients for the Claude and Gemini text APIs used by report generation."""

from __future__ import annotations

import time
from typing import Any, Dict

import requests
from loguru import logger

TRANSIENT_STATUS_CODES = {500, 502, 503, 529}


class LLMClient:
    """
    Minimal completion client with retry on 429 and transient 5xx.

    Subclasses build the provider request and extract the text answer.
    """

    provider = "base"

    def __init__(
        self,
        api_key: str,
        model: str,
        api_base: str,
        request_timeout: int = 45,
        max_attempts: int = 4,
    ):
        self.api_key = api_key
        self.model = model
        self.api_base = api_base.rstrip("/")
        self.request_timeout = request_timeout
        self.max_attempts = max_attempts

    def complete(self, prompt: str, *, system: str | None = None, max_tokens: int = 4096) -> str:
        if not self.api_key:
            raise ValueError(f"API key not configured for {self.provider}")

        endpoint, headers, payload = self._build_request(prompt, system, max_tokens)
        data = self._post(endpoint, headers, payload)
        return self._extract_text(data)

    def _post(self, endpoint: str, headers: Dict[str, str], payload: Dict[str, Any]) -> Dict[str, Any]:
        attempts = 0
        last_response: requests.Response | None = None

        while attempts < self.max_attempts:
            attempts += 1
            try:
                logger.debug(
                    "Calling {provider} (attempt {attempt})",
                    provider=self.provider,
                    attempt=attempts,
                )
                last_response = requests.post(
                    endpoint, headers=headers, json=payload, timeout=self.request_timeout
                )
            except requests.exceptions.Timeout:
                logger.warning(
                    "{provider} timeout on attempt {attempt}",
                    provider=self.provider,
                    attempt=attempts,
                )
                if attempts >= self.max_attempts:
                    raise
                time.sleep(2**attempts)
                continue

            if last_response.status_code == 200:
                return last_response.json()

            if last_response.status_code == 429:
                retry_after = last_response.headers.get("retry-after", "2")
                wait_time = min(int(retry_after), 60) if retry_after.isdigit() else 2**attempts
                logger.warning(
                    "{provider} rate limit 429 (attempt {attempt}) retry_after={retry}",
                    provider=self.provider,
                    attempt=attempts,
                    retry=retry_after,
                )
                time.sleep(wait_time)
                continue

            if last_response.status_code in TRANSIENT_STATUS_CODES:
                wait_time = 2**attempts
                logger.warning(
                    "{provider} transient error {code}, retrying in {wait}s",
                    provider=self.provider,
                    code=last_response.status_code,
                    wait=wait_time,
                )
                time.sleep(wait_time)
                continue

            logger.error(
                "{provider} API error {code}: {body}",
                provider=self.provider,
                code=last_response.status_code,
                body=last_response.text[:400],
            )
            last_response.raise_for_status()

        status = last_response.status_code if last_response is not None else "no response"
        raise RuntimeError(f"{self.provider} request failed after {attempts} attempts ({status})")

    def _build_request(
        self, prompt: str, system: str | None, max_tokens: int
    ) -> tuple[str, Dict[str, str], Dict[str, Any]]:
        raise NotImplementedError

    def _extract_text(self, data: Dict[str, Any]) -> str:
        raise NotImplementedError


class ClaudeClient(LLMClient):
    provider = "claude"
    ANTHROPIC_VERSION = "2023-06-01"

    def _build_request(self, prompt, system, max_tokens):
        headers = {
            "Content-Type": "application/json",
            "x-api-key": self.api_key,
            "anthropic-version": self.ANTHROPIC_VERSION,
        }
        payload: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": max_tokens,
            "messages": [{"role": "user", "content": prompt}],
        }
        if system:
            payload["system"] = system
        return f"{self.api_base}/messages", headers, payload

    def _extract_text(self, data):
        blocks = data.get("content") or []
        return "".join(block.get("text", "") for block in blocks if block.get("type") == "text")


class GeminiClient(LLMClient):
    provider = "gemini"

    def _build_request(self, prompt, system, max_tokens):
        headers = {"Content-Type": "application/json", "x-goog-api-key": self.api_key}
        payload: Dict[str, Any] = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": {"maxOutputTokens": max_tokens},
        }
        if system:
            payload["systemInstruction"] = {"parts": [{"text": system}]}
        return f"{self.api_base}/models/{self.model}:generateContent", headers, payload

    def _extract_text(self, data):
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)
