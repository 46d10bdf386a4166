# result_map.py
from typing import Dict, List, Sequence

import plotly.graph_objects as go

from quiz_core import AnswerOutcome

# z values per country; the colorscale below maps them to red/green
MISSED = 0
CORRECT = 1

_result_colorscale = [
    (0.0, "#F87171"),  # missed -> red
    (0.5, "#F87171"),
    (0.5, "#4ADE80"),
    (1.0, "#4ADE80"),  # correct -> green
]


def summarize_answers(answers: Sequence[AnswerOutcome]) -> Dict[str, Dict]:
    """Collapse a session's answers into {code: {name, correct, picked}}.

    A country asked twice keeps its latest outcome.
    """
    summary: Dict[str, Dict] = {}
    for outcome in answers:
        q = outcome.question
        summary[q.code] = {
            "name": q.display_name,
            "correct": outcome.is_correct,
            "picked": outcome.selected.display_name,
        }
    return summary


def build_result_map(answers: Sequence[AnswerOutcome]) -> go.Figure:
    summary = summarize_answers(answers)
    codes: List[str] = list(summary)
    z = [CORRECT if summary[c]["correct"] else MISSED for c in codes]

    hover_text = []
    for code in codes:
        entry = summary[code]
        if entry["correct"]:
            verdict = "Correct"
        else:
            verdict = f"Missed (you picked {entry['picked']})"
        hover_text.append(f"<b>{entry['name']}</b><br>{verdict}")

    choropleth = go.Choropleth(
        locations=codes,
        locationmode="ISO-3",
        z=z,
        zmin=MISSED,
        zmax=CORRECT,
        text=hover_text,
        colorscale=_result_colorscale,
        autocolorscale=False,
        showscale=False,
        marker_line_width=0.7,
        marker_line_color="#94A3B8",
        hovertemplate="%{text}<extra></extra>",
    )

    fig = go.Figure(data=[choropleth])
    fig.update_layout(
        template="plotly_white",
        font=dict(family="Inter, Segoe UI, Roboto, Helvetica, Arial, sans-serif", color="#0f172a"),
        hoverlabel=dict(bgcolor="#FFFFFF", bordercolor="#E2E8F0", font=dict(color="#0f172a")),
        geo=dict(
            showframe=False,
            showcoastlines=True,
            coastlinecolor="#CBD5E1",
            coastlinewidth=0.5,
            showland=True,
            landcolor="#F8FAFC",
            showocean=True,
            oceancolor="#F1F5F9",
            lakecolor="#F1F5F9",
            projection_type="natural earth",
        ),
        paper_bgcolor="#FFFFFF",
        margin=dict(l=0, r=0, t=0, b=0),
        height=420,
    )
    return fig
