"""
Model provider contract.

The view only ever talks to a provider through two calls:

- ``await provider.load(threshold)`` returns a ``ToxicityModel``
- ``await model.classify(text)`` returns one ``LabelPrediction`` per label

Anything with that shape can be injected (a transformers checkpoint, a fake
in tests).
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple


class ToxicityProviderError(Exception):
    """Base class for provider failures."""


class ModelLoadError(ToxicityProviderError):
    """Checkpoint or tokenizer could not be loaded."""


class InferenceError(ToxicityProviderError):
    """Forward pass failed."""


@dataclass(frozen=True)
class PredictionResult:
    # (p_not_toxic, p_toxic)
    probabilities: Tuple[float, float]
    match: Optional[bool] = None


@dataclass(frozen=True)
class LabelPrediction:
    label: str
    results: Tuple[PredictionResult, ...]

    @property
    def toxic_probability(self) -> float:
        return self.results[0].probabilities[1]


def match_for(probabilities: Tuple[float, float], threshold: float) -> Optional[bool]:
    """True/False when one class clears the threshold, None when neither does."""
    if probabilities[1] > threshold:
        return True
    if probabilities[0] > threshold:
        return False
    return None


class ToxicityModel(Protocol):
    async def classify(self, text: str) -> List[LabelPrediction]: ...


class ModelProvider(Protocol):
    async def load(self, threshold: float) -> ToxicityModel: ...
