"""Abstract interface for summary providers."""

from __future__ import annotations

from abc import ABC, abstractmethod

from ...core.types import SummaryRequest


class SummaryProvider(ABC):
    """Provider interface: one request in, raw model text out."""

    @abstractmethod
    async def complete(self, request: SummaryRequest) -> str:
        """Return the raw (unsanitized) model output for a request."""
        raise NotImplementedError
