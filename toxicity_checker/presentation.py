import html
from dataclasses import dataclass
from typing import Iterable, List, Optional

from .provider import LabelPrediction
from .view import AnalysisState

TITLE = "Toxicity Checker"
PLACEHOLDER = "Enter text to analyze for toxicity"
ANALYZE_LABEL = "Analyze Toxicity"
PROCESSING_LABEL = "Processing..."
LOADING_MODEL_TEXT = "Loading toxicity model..."
ANALYZING_TEXT = "Analyzing text..."
RESULTS_TITLE = "Analysis Results:"


@dataclass(frozen=True)
class ResultRow:
    label: str
    verdict: str
    is_toxic: bool
    percentage: str


def capitalize_label(label: str) -> str:
    """Upper-case the first character only: identity_attack -> Identity_attack."""
    return label[:1].upper() + label[1:]


def format_percentage(probability: float) -> str:
    return f"{probability * 100:.2f}"


def result_row(prediction: LabelPrediction, threshold: float) -> ResultRow:
    probability = prediction.toxic_probability
    is_toxic = probability > threshold
    percentage = format_percentage(probability)
    verdict = "Toxic" if is_toxic else "Not Toxic"
    return ResultRow(
        label=capitalize_label(prediction.label),
        verdict=f"{verdict} ({percentage}%)",
        is_toxic=is_toxic,
        percentage=percentage,
    )


def result_rows(predictions: Iterable[LabelPrediction], threshold: float) -> List[ResultRow]:
    return [result_row(p, threshold) for p in predictions]


def status_text(state: AnalysisState) -> Optional[str]:
    if state.model_handle is None:
        return LOADING_MODEL_TEXT
    if state.is_loading:
        return ANALYZING_TEXT
    return None


def button_label(state: AnalysisState) -> str:
    return PROCESSING_LABEL if state.is_loading else ANALYZE_LABEL


def status_html(text: str) -> str:
    return f"<p class='tc-status'>{html.escape(text)}</p>"


def results_html(rows: List[ResultRow]) -> str:
    items = "".join(
        "<li class='tc-result-item'>"
        f"<span class='tc-label'>{html.escape(row.label)}</span>"
        f"<span class='{'tc-toxic' if row.is_toxic else 'tc-not-toxic'}'>{html.escape(row.verdict)}</span>"
        "</li>"
        for row in rows
    )
    return (
        "<div class='tc-results'>"
        f"<h3 class='tc-title'>{RESULTS_TITLE}</h3>"
        f"<ul class='tc-results-list'>{items}</ul>"
        "</div>"
    )
