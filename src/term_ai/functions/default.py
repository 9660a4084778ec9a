"""Identity function, always registered first."""

from __future__ import annotations

from term_ai.functions.base import PipelineFunction


class DefaultFunction(PipelineFunction):
    """Never claims input; converts it with plain chunking when nobody else does."""

    @property
    def name(self) -> str:
        return "default"
