import asyncio
import logging
import threading
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import torch
from transformers import AutoModelForSequenceClassification, AutoTokenizer

from .provider import (
    InferenceError,
    LabelPrediction,
    ModelLoadError,
    PredictionResult,
    match_for,
)

logger = logging.getLogger(__name__)


class ToxicBert:
    """Loaded sequence-classification checkpoint bound to one threshold.

    Multi-label checkpoints (e.g. unitary/toxic-bert) get one sigmoid score per
    label. Binary checkpoints get a softmax over (non-toxic, toxic) and report a
    single label.
    """

    def __init__(
        self,
        tokenizer,
        model,
        threshold: float,
        device: str = "cpu",
        labels: Optional[Sequence[str]] = None,
        max_length: int = 512,
    ) -> None:
        self.tokenizer = tokenizer
        self.model = model
        self.threshold = threshold
        self.device = device
        self.max_length = max_length

        config = model.config
        self.id2label: Dict[int, str] = {int(k): v for k, v in config.id2label.items()}
        problem_type = getattr(config, "problem_type", None)
        self.multi_label = problem_type == "multi_label_classification" or (
            problem_type is None and len(self.id2label) != 2
        )
        self.labels = self._resolve_labels(labels)

    def _resolve_labels(self, labels: Optional[Sequence[str]]) -> Tuple[str, ...]:
        known = (
            [self.id2label[i] for i in sorted(self.id2label)]
            if self.multi_label
            else [self.id2label.get(1, "toxicity")]
        )
        if not labels:
            return tuple(known)
        unknown = [label for label in labels if label not in known]
        if unknown:
            raise ModelLoadError(f"Unknown labels {unknown}, model provides {known}")
        # keep model order, not request order
        return tuple(label for label in known if label in labels)

    def _scores(self, text: str) -> List[Tuple[str, float]]:
        inputs = self.tokenizer(
            text,
            return_tensors="pt",
            truncation=True,
            max_length=self.max_length,
            padding=True,
        ).to(self.device)
        with torch.no_grad():
            logits = self.model(**inputs).logits
        if self.multi_label:
            proba = torch.sigmoid(logits)[0].cpu().numpy()
            return [(self.id2label[i], float(p)) for i, p in enumerate(proba)]
        proba = torch.softmax(logits, dim=-1)[0].cpu().numpy()
        return [(self.id2label.get(1, "toxicity"), float(proba[1]))]

    def predict(self, text: str) -> List[LabelPrediction]:
        predictions = []
        for label, p_toxic in self._scores(text):
            if label not in self.labels:
                continue
            probabilities = (float(np.clip(1.0 - p_toxic, 0.0, 1.0)), p_toxic)
            result = PredictionResult(
                probabilities=probabilities,
                match=match_for(probabilities, self.threshold),
            )
            predictions.append(LabelPrediction(label=label, results=(result,)))
        return predictions

    async def classify(self, text: str) -> List[LabelPrediction]:
        try:
            return await asyncio.to_thread(self.predict, text)
        except Exception as e:
            raise InferenceError(f"Inference failed: {e}") from e


class ToxicBertProvider:
    """Loads tokenizer and weights once; every ``load`` reuses them.

    One instance is shared by all sessions, so the first load runs under a
    lock and concurrent callers wait for it instead of loading again.
    """

    def __init__(
        self,
        model_id: str,
        device: str = "cpu",
        labels: Optional[Sequence[str]] = None,
        max_length: int = 512,
    ) -> None:
        self.model_id = model_id
        self.device = device
        self.labels = tuple(labels) if labels else None
        self.max_length = max_length
        self._weights = None
        self._weights_lock = threading.Lock()
        self._models: Dict[float, ToxicBert] = {}

    def _load_weights(self):
        logger.info("Loading model %s on %s", self.model_id, self.device)
        tokenizer = AutoTokenizer.from_pretrained(self.model_id)
        model = AutoModelForSequenceClassification.from_pretrained(self.model_id).to(self.device)
        model.eval()
        logger.info("Model %s loaded", self.model_id)
        return tokenizer, model

    def _ensure_weights(self):
        with self._weights_lock:
            if self._weights is None:
                self._weights = self._load_weights()
            return self._weights

    async def load(self, threshold: float) -> ToxicBert:
        if threshold in self._models:
            return self._models[threshold]
        try:
            tokenizer, model = await asyncio.to_thread(self._ensure_weights)
        except Exception as e:
            raise ModelLoadError(f"Could not load '{self.model_id}': {e}") from e
        toxic_bert = ToxicBert(
            tokenizer,
            model,
            threshold=threshold,
            device=self.device,
            labels=self.labels,
            max_length=self.max_length,
        )
        return self._models.setdefault(threshold, toxic_bert)
