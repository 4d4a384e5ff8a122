# gradio_app.py
"""
Gradio UI for the conversation analyzer backend:
 - paste a two-person conversation, pick analysis type / model / temperature / length
 - create + analyze in one click
 - analysis cards (tone, power, patterns, insights) + recommendations
 - score chart (emotional intensity, resolution potential, communication quality, power balance)
 - recent analyses table

The UI talks to the backend over HTTP only.

Run:
 uvicorn conversation_analyzer.main:app
 python gradio_app.py
"""

import io
import requests
import gradio as gr
import matplotlib.pyplot as plt
from typing import List, Dict, Optional, Any, Tuple
from PIL import Image

from conversation_analyzer.config import (
    ANALYSIS_TYPES,
    DEFAULT_MAX_TOKENS,
    DEFAULT_TEMPERATURE,
    MAX_TOKEN_CHOICES,
    SUGGESTED_MODELS,
    config,
)

# ----------------- Config / Endpoints -----------------
DEFAULT_BACKEND_URL = config.BACKEND_URL
CONVERSATIONS_ENDPOINT = "/api/conversations"
ANALYZE_ENDPOINT = "/api/conversations/{conversation_id}/analyze"
ANALYSES_ENDPOINT = "/api/analyses"

SCORE_LABELS = [
    ("emotionalIntensity", "Emotional intensity"),
    ("resolutionPotential", "Resolution potential"),
    ("communicationQuality", "Communication quality"),
    ("powerBalance", "Power balance"),
]

CARD_FIELDS = [
    ("emotionalTone", "emotionalToneDescription", "Emotional Tone"),
    ("powerDynamics", "powerDynamicsDescription", "Power Dynamics"),
    ("communicationPatterns", "communicationPatternsDescription", "Communication Patterns"),
    ("relationshipInsights", "relationshipInsightsDescription", "Relationship Insights"),
]

EXAMPLE_CONVERSATION = (
    "Alex: You said you'd call last night. I waited up.\n"
    "Sam: I told you work was crazy. I can't always drop everything.\n"
    "Alex: I'm not asking you to drop everything. Just a text.\n"
    "Sam: Fine. I'll text next time. Can we not make this a thing?"
)

# ----------------- Backend helpers -----------------
def _error_detail(r: requests.Response) -> str:
    try:
        return r.json().get("detail") or r.text
    except ValueError:
        return r.text

def _raise_for_status(r: requests.Response):
    if r.status_code >= 400:
        raise RuntimeError(f"{r.status_code}: {_error_detail(r)}")

def create_conversation(backend_url: str, payload: Dict[str, Any]) -> Dict:
    url = backend_url.rstrip("/") + CONVERSATIONS_ENDPOINT
    r = requests.post(url, json=payload, timeout=10)
    _raise_for_status(r)
    return r.json()

def analyze_conversation(backend_url: str, conversation_id: str) -> Dict:
    url = backend_url.rstrip("/") + ANALYZE_ENDPOINT.format(conversation_id=conversation_id)
    r = requests.post(url, timeout=120)
    _raise_for_status(r)
    return r.json()

def fetch_analyses(backend_url: str) -> List[Dict]:
    url = backend_url.rstrip("/") + ANALYSES_ENDPOINT
    r = requests.get(url, timeout=12)
    _raise_for_status(r)
    return r.json()

# ----------------- UI helpers -----------------
def format_result_markdown(result: Dict[str, Any]) -> str:
    """Render an analysis result as markdown cards + recommendations + full text."""
    lines = []
    for short_key, long_key, title in CARD_FIELDS:
        short = result.get(short_key) or "n/a"
        lines.append(f"### {title}: {short}")
        if result.get(long_key):
            lines.append(str(result[long_key]))
        lines.append("")

    recs = result.get("recommendations") or []
    if isinstance(recs, list) and recs:
        lines.append("### Recommendations")
        lines.extend(f"{i}. {rec}" for i, rec in enumerate(recs, start=1))
        lines.append("")

    scores = ", ".join(f"{label}: {_score(result.get(key)):g}/10" for key, label in SCORE_LABELS)
    lines.append(f"**Scores** - {scores}")

    if result.get("rawAnalysis"):
        lines.append("")
        lines.append("### Full Analysis")
        lines.append(str(result["rawAnalysis"]))
    return "\n".join(lines).strip()

def _score(value: Any) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0

def plot_scores_image(result: Dict[str, Any]) -> bytes:
    """Produce PNG bytes of a horizontal bar chart of the four 0-10 scores."""
    labels = [label for _, label in SCORE_LABELS]
    values = [_score(result.get(key)) for key, _ in SCORE_LABELS]
    fig, ax = plt.subplots(figsize=(6, 3))
    ax.barh(labels, values)
    ax.set_xlim(0, 10)
    ax.invert_yaxis()
    for i, v in enumerate(values):
        ax.text(min(v + 0.15, 9.4), i, f"{v:g}", va="center")
    ax.set_xlabel("Score (0-10)")
    ax.set_title("Relationship scores")
    ax.grid(True, axis="x", linestyle=':', linewidth=0.5)
    plt.tight_layout()
    buf = io.BytesIO()
    fig.savefig(buf, format="png", dpi=120)
    plt.close(fig)
    buf.seek(0)
    return buf.read()

def build_recent_rows(items: List[Dict]) -> List[List[Any]]:
    """Turn /api/analyses items into table rows (newest first, as returned)."""
    rows = []
    for item in items:
        conv = item.get("conversation") or {}
        title = conv.get("title") or (conv.get("content") or "")[:40] or "(conversation missing)"
        rows.append([
            item.get("createdAt", ""),
            title,
            conv.get("analysisType", ""),
            item.get("emotionalTone") or "",
            item.get("emotionalIntensity") or "",
            item.get("resolutionPotential") or "",
        ])
    return rows

# ----------------- App functions -----------------
def run_analysis(
    backend_url: str,
    title: str,
    content: str,
    analysis_type: str,
    model: str,
    temperature: float,
    max_tokens: Any,
) -> Tuple[str, Optional[Image.Image], str]:
    """
    Create conversation -> analyze it.
    Returns (result_markdown, score_image, status_text)
    """
    if not content or content.strip() == "":
        return "", None, "Paste a conversation first"

    payload = {
        "title": (title or "").strip() or None,
        "content": content,
        "analysisType": analysis_type,
        "model": model,
        "temperature": str(round(float(temperature), 2)),
        "maxTokens": int(max_tokens),
    }
    try:
        conversation = create_conversation(backend_url, payload)
    except Exception as e:
        return "", None, f"Could not save conversation: {e}"

    try:
        data = analyze_conversation(backend_url, conversation["id"])
    except Exception as e:
        return "", None, f"Conversation saved ({conversation['id']}) but analysis failed: {e}"

    result = data.get("result", {}) or {}
    markdown = format_result_markdown(result)
    try:
        img = Image.open(io.BytesIO(plot_scores_image(result))).convert("RGB")
    except Exception as e:
        return markdown, None, f"Analysis done, chart failed: {e}"
    return markdown, img, f"Analysis {data.get('analysis', {}).get('id', '')} saved"

def load_recent(backend_url: str) -> Tuple[List[List[Any]], str]:
    try:
        items = fetch_analyses(backend_url)
    except Exception as e:
        return [], f"Refresh failed: {e}"
    return build_recent_rows(items), f"{len(items)} analyses"

# ----------------- Build Gradio UI -----------------
def build_demo() -> gr.Blocks:
    with gr.Blocks(title="Conversation Analyzer") as demo:
        gr.Markdown("## Conversation Analyzer\nPsychological analysis of a two-person conversation.")

        with gr.Row():
            # Left column: input form
            with gr.Column(scale=2):
                backend_url = gr.Textbox(label="Backend URL", value=DEFAULT_BACKEND_URL)
                title = gr.Textbox(label="Title (optional)")
                content = gr.Textbox(label="Conversation", lines=12, value=EXAMPLE_CONVERSATION,
                                     placeholder="Person A: ...\nPerson B: ...")
                analysis_type = gr.Dropdown(label="Analysis type", choices=ANALYSIS_TYPES, value=ANALYSIS_TYPES[0])
                model = gr.Dropdown(label="Model", choices=SUGGESTED_MODELS, value=config.DEFAULT_MODEL,
                                    allow_custom_value=True)
                temperature = gr.Slider(label="Temperature", minimum=0.1, maximum=1.0, step=0.1,
                                        value=float(DEFAULT_TEMPERATURE))
                max_tokens = gr.Dropdown(label="Response length (max tokens)",
                                         choices=[str(n) for n in MAX_TOKEN_CHOICES],
                                         value=str(DEFAULT_MAX_TOKENS))
                analyze_btn = gr.Button("Analyze", variant="primary")
                status = gr.Text(label="Status", interactive=False)

            # Right column: results
            with gr.Column(scale=3):
                result_md = gr.Markdown("No analysis yet.")
                score_image = gr.Image(label="Scores", type="pil", interactive=False)

        with gr.Accordion("Recent analyses", open=False):
            recent = gr.Dataframe(
                headers=["Created", "Conversation", "Type", "Tone", "Intensity", "Resolution"],
                interactive=False,
            )
            recent_status = gr.Text(label="", interactive=False)
            refresh_btn = gr.Button("Refresh")

        analyze_btn.click(
            fn=run_analysis,
            inputs=[backend_url, title, content, analysis_type, model, temperature, max_tokens],
            outputs=[result_md, score_image, status],
        )
        refresh_btn.click(fn=load_recent, inputs=[backend_url], outputs=[recent, recent_status])
    return demo


if __name__ == "__main__":
    build_demo().launch(share=False, inbrowser=True)
