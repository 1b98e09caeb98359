"""
Calling the AI proxy with classified retries.

Each call runs a small state machine:

    attempting --success--> succeeded
    attempting --failure--> waiting --timer--> attempting
    attempting --failure--> failed

Which failure edge is taken depends on how the failure is classified
(warming_up, auth_failure, network_failure, other) and on the remaining
attempt budget, as listed in TRANSITIONS.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, Dict, List, Optional, Union

import httpx

from .errors import (
    UNREACHABLE_MESSAGE,
    AIRequestError,
    BackendUnreachableError,
    InvalidApiKeyError,
    TaskManagerError,
)
from .http import error_message, json_body

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 2000

Sleep = Callable[[float], Awaitable[None]]


class RetryState(str, Enum):
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class FailureKind(str, Enum):
    WARMING_UP = "warming_up"
    AUTH_FAILURE = "auth_failure"
    NETWORK_FAILURE = "network_failure"
    OTHER = "other"


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str
    status_code: Optional[int] = None


# PUBLIC_INTERFACE
@dataclass
class RetryConfig:
    """Configuration for retry behavior.

    Attributes:
        max_attempts: Total attempts per call, first one included
        warmup_step: Seconds per attempt while the model is loading (linear)
        network_base_delay: First delay after a network failure, doubled each time
        other_step: Seconds per attempt for any other failure (linear)
    """

    max_attempts: int = 3
    warmup_step: float = 5.0
    network_base_delay: float = 2.0
    other_step: float = 1.0


@dataclass(frozen=True)
class Transition:
    """What to do with one kind of failure.

    Attributes:
        retryable: Whether a retry is allowed while attempts remain
        delay: Seconds to wait after the given (1-based) attempt
        give_up: Error raised once the machine moves to failed
    """

    retryable: bool
    delay: Callable[[RetryConfig, int], float]
    give_up: Callable[[Failure, RetryConfig], TaskManagerError]


def _still_loading(failure: Failure, config: RetryConfig) -> TaskManagerError:
    return AIRequestError(f"AI model is still loading after {config.max_attempts} attempts: {failure.message}")


TRANSITIONS: Dict[FailureKind, Transition] = {
    FailureKind.WARMING_UP: Transition(
        retryable=True,
        delay=lambda c, attempt: c.warmup_step * attempt,
        give_up=_still_loading,
    ),
    FailureKind.AUTH_FAILURE: Transition(
        retryable=False,
        delay=lambda c, attempt: 0.0,
        give_up=lambda f, c: InvalidApiKeyError("Invalid API key. Please check your Gemini API key."),
    ),
    FailureKind.NETWORK_FAILURE: Transition(
        retryable=True,
        delay=lambda c, attempt: c.network_base_delay * (2 ** (attempt - 1)),
        give_up=lambda f, c: BackendUnreachableError(UNREACHABLE_MESSAGE),
    ),
    FailureKind.OTHER: Transition(
        retryable=True,
        delay=lambda c, attempt: c.other_step * attempt,
        give_up=lambda f, c: AIRequestError(f.message),
    ),
}


# PUBLIC_INTERFACE
@dataclass
class RetryMachine:
    """Tracks one call through attempting/waiting/succeeded/failed."""

    config: RetryConfig
    state: RetryState = RetryState.ATTEMPTING
    attempt: int = 1
    delays: List[float] = field(default_factory=list)
    error: Optional[TaskManagerError] = None

    def succeed(self) -> None:
        self._expect(RetryState.ATTEMPTING)
        self.state = RetryState.SUCCEEDED

    def fail(self, failure: Failure) -> Optional[float]:
        """
        Record a failed attempt. Returns the delay to wait before the next
        attempt, or None when the machine has moved to failed.
        """
        self._expect(RetryState.ATTEMPTING)
        transition = TRANSITIONS[failure.kind]
        if transition.retryable and self.attempt < self.config.max_attempts:
            delay = transition.delay(self.config, self.attempt)
            self.delays.append(delay)
            self.state = RetryState.WAITING
            return delay
        self.state = RetryState.FAILED
        self.error = transition.give_up(failure, self.config)
        return None

    def resume(self) -> None:
        self._expect(RetryState.WAITING)
        self.attempt += 1
        self.state = RetryState.ATTEMPTING

    def _expect(self, state: RetryState) -> None:
        if self.state is not state:
            raise RuntimeError(f"invalid transition from {self.state.value}, expected {state.value}")


def classify_response(status_code: int, message: str) -> FailureKind:
    """Classify a non-2xx proxy response."""
    if status_code == 503 or "loading" in message.lower():
        return FailureKind.WARMING_UP
    if status_code in (401, 403):
        return FailureKind.AUTH_FAILURE
    return FailureKind.OTHER


# PUBLIC_INTERFACE
class AIProxyClient:
    """
    Client for POST /ai/generate with classified retry/backoff.

    Args:
        http: AsyncClient whose base_url points at the backend API.
        config: Retry budget and delays.
        sleep: Awaitable used for waiting; asyncio.sleep unless a test swaps it.
    """

    def __init__(
        self,
        http: httpx.AsyncClient,
        config: Optional[RetryConfig] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        self._http = http
        self.config = config or RetryConfig()
        self._sleep = sleep

    async def _attempt(self, prompt: str, api_key: str, max_tokens: int) -> Union[str, Failure]:
        try:
            response = await self._http.post(
                "/ai/generate",
                json={"prompt": prompt, "apiKey": api_key, "maxTokens": max_tokens},
            )
        except httpx.TransportError as exc:
            return Failure(FailureKind.NETWORK_FAILURE, str(exc) or exc.__class__.__name__)

        body = json_body(response)
        if response.is_success:
            text = body.get("generatedText") if isinstance(body, dict) else None
            if not isinstance(text, str):
                return Failure(FailureKind.OTHER, "AI proxy response has no generatedText", response.status_code)
            return text

        message = error_message(response, "API error")
        if isinstance(body, dict):
            # Loading hints may sit in any of the error fields.
            hint = " ".join(str(body.get(k) or "") for k in ("error", "message", "details"))
        else:
            hint = message
        return Failure(classify_response(response.status_code, f"{message} {hint}"), message, response.status_code)

    # PUBLIC_INTERFACE
    async def generate(self, prompt: str, api_key: str, max_tokens: int = DEFAULT_MAX_TOKENS) -> str:
        """
        Return the generated text for `prompt`.

        Raises:
            InvalidApiKeyError: the key was rejected (never retried).
            BackendUnreachableError: the backend could not be reached on any attempt.
            AIRequestError: the proxy kept failing until the budget ran out.
        """
        machine = RetryMachine(self.config)
        while True:
            logger.info("Calling AI via backend proxy (attempt %d/%d)", machine.attempt, self.config.max_attempts)
            outcome = await self._attempt(prompt, api_key, max_tokens)
            if isinstance(outcome, str):
                machine.succeed()
                logger.info("AI response received")
                return outcome

            delay = machine.fail(outcome)
            if delay is None:
                logger.error("AI call failed after %d attempt(s): %s", machine.attempt, outcome.message)
                raise machine.error or AIRequestError(outcome.message)

            logger.warning(
                "AI call attempt %d failed (%s): %s; retrying in %.1fs",
                machine.attempt,
                outcome.kind.value,
                outcome.message,
                delay,
            )
            await self._sleep(delay)
            machine.resume()
