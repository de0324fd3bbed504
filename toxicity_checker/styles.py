from typing import Dict

Style = Dict[str, str]

MOBILE_BREAKPOINT = 480  # px, inclusive

BASE_STYLES: Dict[str, Style] = {
    "container": {
        "font-family": "Arial, sans-serif",
        "max-width": "600px",
        "margin": "0 auto",
        "padding": "20px",
        "box-sizing": "border-box",
    },
    "title": {
        "text-align": "center",
        "color": "#333",
        "margin-bottom": "20px",
    },
    "textarea_container": {
        "width": "100%",
        "margin-bottom": "15px",
    },
    "textarea": {
        "width": "100%",
        "padding": "12px",
        "border-radius": "4px",
        "border": "1px solid #ddd",
        "font-size": "16px",
        "resize": "vertical",
        "min-height": "100px",
        "box-sizing": "border-box",
    },
    "button_container": {
        "display": "flex",
        "justify-content": "center",
        "margin-bottom": "20px",
    },
    "button": {
        "background-color": "#4CAF50",
        "color": "white",
        "border": "none",
        "padding": "10px 20px",
        "font-size": "16px",
        "border-radius": "4px",
        "cursor": "pointer",
        "transition": "background-color 0.3s",
    },
    "button_disabled": {
        "background-color": "#cccccc",
        "cursor": "not-allowed",
    },
    "results_container": {
        "background-color": "#f9f9f9",
        "border-radius": "8px",
        "padding": "15px",
        "box-shadow": "0 2px 4px rgba(0,0,0,0.1)",
    },
    "results_list": {
        "list-style-type": "none",
        "padding": "0",
    },
    "result_item": {
        "padding": "10px",
        "border-bottom": "1px solid #eee",
        "display": "flex",
        "justify-content": "space-between",
        "align-items": "center",
    },
    "toxic": {
        "color": "#d32f2f",
        "font-weight": "bold",
    },
    "not_toxic": {
        "color": "#388e3c",
    },
    "loading_text": {
        "text-align": "center",
        "color": "#666",
        "font-style": "italic",
    },
    "label": {
        "color": "#333",
        "font-weight": "bold",
        "margin-right": "10px",
    },
}

MOBILE_STYLES: Dict[str, Style] = {
    "container": {"padding": "10px"},
    "textarea": {"font-size": "14px"},
    "button": {"padding": "8px 16px", "font-size": "14px"},
}

# Streamlit renders the text area and button itself, so those are styled
# through its test ids; everything else is our own markup.
SELECTORS: Dict[str, str] = {
    "container": '[data-testid="stMainBlockContainer"], .block-container',
    "title": ".tc-title",
    "textarea_container": '[data-testid="stTextArea"]',
    "textarea": '[data-testid="stTextArea"] textarea',
    "button_container": '[data-testid="stButton"]',
    "button": '[data-testid="stButton"] button',
    "button_disabled": '[data-testid="stButton"] button:disabled',
    "results_container": ".tc-results",
    "results_list": ".tc-results-list",
    "result_item": ".tc-result-item",
    "toxic": ".tc-toxic",
    "not_toxic": ".tc-not-toxic",
    "loading_text": ".tc-status",
    "label": ".tc-label",
}


def is_mobile(width: float) -> bool:
    return width <= MOBILE_BREAKPOINT


def styles_for(width: float) -> Dict[str, Style]:
    """Resolve the style table for a viewport of the given width.

    Mobile overrides are merged into each base entry rather than replacing it.
    """
    merged = {key: dict(style) for key, style in BASE_STYLES.items()}
    if is_mobile(width):
        for key, overrides in MOBILE_STYLES.items():
            merged[key].update(overrides)
    return merged


def _rule(selector: str, style: Style) -> str:
    body = "; ".join(f"{prop}: {value}" for prop, value in style.items())
    return f"{selector} {{ {body}; }}"


def stylesheet() -> str:
    """CSS for the page; the browser applies the mobile block on resize."""
    rules = [_rule(SELECTORS[key], style) for key, style in BASE_STYLES.items()]
    mobile = [_rule(SELECTORS[key], style) for key, style in MOBILE_STYLES.items()]
    rules.append(
        f"@media (max-width: {MOBILE_BREAKPOINT}px) {{\n  " + "\n  ".join(mobile) + "\n}"
    )
    return "<style>\n" + "\n".join(rules) + "\n</style>"
