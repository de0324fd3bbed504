"""
Analysis view: the state machine behind the Toxicity Checker page.

Phases and the events that move between them::

    INITIAL --mount--> LOADING --load resolved--> READY
                               --load rejected or cancelled--> FAILED (terminal)
    READY/COMPLETE --analyze--> ANALYZING --classify resolved--> COMPLETE
                                          --classify rejected--> COMPLETE | READY

Failures never leave the view: they are logged and the loading flag drops.
Cancellation drops the flag too, then propagates to the caller.
After ``unmount()`` late completions are dropped instead of applied.
"""

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from .provider import LabelPrediction, ModelProvider, ToxicityModel

logger = logging.getLogger(__name__)


class Phase(str, Enum):
    INITIAL = "initial"
    LOADING = "loading"
    READY = "ready"
    ANALYZING = "analyzing"
    COMPLETE = "complete"
    FAILED = "failed"


@dataclass
class AnalysisState:
    phase: Phase = Phase.INITIAL
    model_handle: Optional[ToxicityModel] = None
    input_text: str = ""
    predictions: Tuple[LabelPrediction, ...] = ()
    is_loading: bool = False


def can_analyze(state: AnalysisState) -> bool:
    return (
        state.model_handle is not None
        and not state.is_loading
        and bool(state.input_text.strip())
    )


class AnalysisView:
    def __init__(self, provider: ModelProvider, threshold: float) -> None:
        self.provider = provider
        # same value drives load() and the render-time verdict
        self.threshold = threshold
        self.state = AnalysisState()
        self._mount_started = False
        self._alive = True

    @property
    def alive(self) -> bool:
        return self._alive

    def set_text(self, text: str) -> None:
        self.state.input_text = text

    def can_analyze(self) -> bool:
        return can_analyze(self.state)

    async def mount(self) -> None:
        """Load the model. Runs once per view; later calls do nothing."""
        if self._mount_started or not self._alive:
            return
        self._mount_started = True
        self.state.phase = Phase.LOADING
        self.state.is_loading = True

        try:
            model = await self.provider.load(self.threshold)
        except asyncio.CancelledError:
            if self._alive:
                logger.warning("Model load cancelled")
                self.state.phase = Phase.FAILED
            raise
        except Exception:
            if not self._alive:
                logger.debug("View unmounted, dropping model load failure")
                return
            logger.exception("Failed to load model")
            self.state.phase = Phase.FAILED
            return
        finally:
            if self._alive:
                self.state.is_loading = False

        if not self._alive:
            logger.debug("View unmounted, dropping loaded model")
            return
        self.state.model_handle = model
        self.state.phase = Phase.READY

    def _settle_after_analysis(self) -> None:
        self.state.phase = Phase.COMPLETE if self.state.predictions else Phase.READY

    async def analyze(self) -> None:
        """Classify the current input. No-op unless ``can_analyze()``."""
        if not self._alive or not self.can_analyze():
            return
        model = self.state.model_handle
        self.state.phase = Phase.ANALYZING
        self.state.is_loading = True

        try:
            predictions = await model.classify(self.state.input_text)
        except asyncio.CancelledError:
            if self._alive:
                logger.warning("Analysis cancelled")
                self._settle_after_analysis()
            raise
        except Exception:
            if not self._alive:
                logger.debug("View unmounted, dropping analysis failure")
                return
            logger.exception("Analysis failed")
            self._settle_after_analysis()
            return
        finally:
            if self._alive:
                self.state.is_loading = False

        if not self._alive:
            logger.debug("View unmounted, dropping analysis result")
            return
        self.state.predictions = tuple(predictions)
        self.state.phase = Phase.COMPLETE

    def unmount(self) -> None:
        self._alive = False
