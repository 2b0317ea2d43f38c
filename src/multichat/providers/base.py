"""Provider adapter building blocks.

A provider is answered by an ordered list of tiers (real upstream first,
local simulation last). ``FallbackChain`` walks the tiers; ``ProviderAdapter``
wraps a chain and turns every failure into data, so callers never see an
exception from ``complete`` or ``stream``.
"""

from abc import ABC, abstractmethod
from contextlib import aclosing
from collections.abc import AsyncGenerator, Callable, Sequence
from dataclasses import dataclass

from multichat.core.config import Settings
from multichat.core.errors import ErrorCategory, ProviderError
from multichat.observability.constants import LogEvents
from multichat.observability.logger import get_logger
from multichat.schemas.requests import ProviderId
from multichat.schemas.responses import StreamEvent

logger = get_logger(__name__)

FallThroughPolicy = Callable[[ProviderError], bool]
FallbackNotice = Callable[[ProviderError], str | None]


def any_error(error: ProviderError) -> bool:  # noqa: ARG001
    """Fall through on every failure."""
    return True


def transient_only(error: ProviderError) -> bool:
    """Fall through on rate limits, timeouts, network errors and 5xx only."""
    return error.transient


@dataclass(frozen=True)
class ProviderResult:
    """Outcome of one ``complete`` call; ``ok`` iff there is no error."""

    text: str = ""
    error: ProviderError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class Tier(ABC):
    """One way of answering a prompt (an upstream API or a simulation)."""

    name: str = "tier"

    def is_configured(self) -> bool:
        """Whether the credentials this tier needs are present."""
        return True

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """Return the full answer or raise ``ProviderError``."""

    @abstractmethod
    def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        """Yield answer fragments or raise ``ProviderError``."""


class FallbackChain:
    """Try tiers in order until one answers.

    Unconfigured tiers are skipped. A failing tier hands over to the next
    configured one when ``fall_through`` accepts the error; when streaming,
    only while the failing tier has not emitted anything yet. The error of
    the last tier tried is the chain's error.
    """

    def __init__(
        self,
        label: str,
        tiers: Sequence[Tier],
        fall_through: FallThroughPolicy = any_error,
        on_fallback: FallbackNotice | None = None,
    ):
        self.label = label
        self.tiers = list(tiers)
        self.fall_through = fall_through
        self.on_fallback = on_fallback

    def configured_tiers(self) -> list[Tier]:
        configured = []
        for tier in self.tiers:
            if tier.is_configured():
                configured.append(tier)
            else:
                logger.debug(LogEvents.PROVIDER_TIER_SKIPPED, service=self.label, tier=tier.name)
        return configured

    def first_configured(self) -> str | None:
        """Name of the tier that would be tried first."""
        return next((tier.name for tier in self.tiers if tier.is_configured()), None)

    async def complete(self, prompt: str) -> str:
        *leading, last = self._require_tiers()
        for tier in leading:
            try:
                return await tier.complete(prompt)
            except ProviderError as e:
                if not self._may_fall_through(tier, e):
                    raise
        return await last.complete(prompt)

    async def stream(self, prompt: str) -> AsyncGenerator[str, None]:
        *leading, last = self._require_tiers()
        for tier in leading:
            emitted = False
            try:
                async with aclosing(tier.stream(prompt)) as fragments:
                    async for fragment in fragments:
                        emitted = True
                        yield fragment
                return
            except ProviderError as e:
                if not self._may_fall_through(tier, e, emitted=emitted):
                    raise
                notice = self.on_fallback(e) if self.on_fallback else None
                if notice:
                    yield notice

        async with aclosing(last.stream(prompt)) as fragments:
            async for fragment in fragments:
                yield fragment

    def _require_tiers(self) -> list[Tier]:
        tiers = self.configured_tiers()
        if not tiers:
            raise ProviderError(
                self.label,
                ErrorCategory.CONFIGURATION,
                f"{self.label} is not configured",
            )
        return tiers

    def _may_fall_through(self, tier: Tier, error: ProviderError, emitted: bool = False) -> bool:
        allowed = not emitted and self.fall_through(error)
        logger.warning(
            LogEvents.PROVIDER_TIER_FAILED,
            service=self.label,
            tier=tier.name,
            error_type=error.category.value,
            error=error.message,
            falling_through=allowed,
        )
        return allowed


class ProviderAdapter(ABC):
    """Answers prompts for one provider.

    Adapters are cheap and built fresh for every request; they hold the
    settings they were given and nothing else.
    """

    provider: ProviderId

    def __init__(self, settings: Settings):
        self.settings = settings
        self.chain = self.build_chain()

    @property
    def service(self) -> str:
        """Display name reported in results and stream events."""
        return self.provider.display_name

    @abstractmethod
    def build_chain(self) -> FallbackChain:
        """Return the ordered tiers that answer for this provider."""

    def stream_fragments(self, prompt: str) -> AsyncGenerator[str, None]:
        """Raw fragment source for ``stream``; adapters may add prefaces."""
        return self.chain.stream(prompt)

    async def complete(self, prompt: str) -> ProviderResult:
        """Run the prompt to completion. Never raises."""
        try:
            text = await self.chain.complete(prompt)
        except ProviderError as e:
            logger.warning(
                LogEvents.PROVIDER_CALL_FAILED,
                service=self.service,
                error_type=e.category.value,
                error=e.message,
            )
            return ProviderResult(error=e)
        except Exception as e:
            logger.exception(LogEvents.PROVIDER_UNEXPECTED_ERROR, service=self.service)
            return ProviderResult(error=self._internal_error(e))

        logger.info(LogEvents.PROVIDER_CALL_COMPLETED, service=self.service, chars=len(text))
        return ProviderResult(text=text)

    async def stream(self, prompt: str) -> AsyncGenerator[StreamEvent, None]:
        """Yield one event per non-empty fragment, then exactly one terminal event."""
        try:
            async with aclosing(self.stream_fragments(prompt)) as fragments:
                async for fragment in fragments:
                    if fragment:
                        yield self._event(content=fragment)
        except ProviderError as e:
            logger.warning(
                LogEvents.PROVIDER_CALL_FAILED,
                service=self.service,
                error_type=e.category.value,
                error=e.message,
            )
            yield self._terminal(e)
            return
        except Exception as e:
            logger.exception(LogEvents.PROVIDER_UNEXPECTED_ERROR, service=self.service)
            yield self._terminal(self._internal_error(e))
            return

        yield self._event(done=True)

    def _event(self, content: str = "", done: bool = False) -> StreamEvent:
        return StreamEvent(
            service=self.service, provider=self.provider, content=content, done=done
        )

    def _terminal(self, error: ProviderError) -> StreamEvent:
        return StreamEvent(
            service=self.service,
            provider=self.provider,
            done=True,
            error=error.message,
            error_type=error.category.value,
        )

    def _internal_error(self, exc: Exception) -> ProviderError:
        return ProviderError(
            self.service, ErrorCategory.INTERNAL, detail=str(exc) or type(exc).__name__
        )
