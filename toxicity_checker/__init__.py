from .provider import (
    InferenceError,
    LabelPrediction,
    ModelLoadError,
    ModelProvider,
    PredictionResult,
    ToxicityModel,
    ToxicityProviderError,
)
from .view import AnalysisState, AnalysisView, Phase

__all__ = [
    "AnalysisState",
    "AnalysisView",
    "InferenceError",
    "LabelPrediction",
    "ModelLoadError",
    "ModelProvider",
    "Phase",
    "PredictionResult",
    "ToxicityModel",
    "ToxicityProviderError",
]
