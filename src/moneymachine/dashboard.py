"""
Dashboard renderer: galaxy view, live wire, trader actions and node detail.

Produces one self-contained HTML page from a controller snapshot. The graph is
a plotly figure drawn from the layout result; analysis text from the LLM is
markdown and rendered as such.
"""

import html
from datetime import datetime
from typing import Any, Dict, List, Optional

import markdown
import plotly.graph_objects as go

from moneymachine.layout import (
    LayoutResult, LINK_COLORS, NODE_FILL, link_color, link_width, node_stroke, label_size,
)
from moneymachine.models import FlowType, ModelProvider

MODEL_LABELS = {
    ModelProvider.GEMINI: "GOOGLE GEMINI 2.5",
    ModelProvider.OPENAI: "OPENAI GPT-4",
    ModelProvider.ANTHROPIC: "CLAUDE 3.5",
    ModelProvider.XAI: "xAI GROK",
}

ANALYSIS_TITLES = {
    ModelProvider.GEMINI: "Gemini Analysis",
    ModelProvider.OPENAI: "GPT-4 Analysis",
    ModelProvider.ANTHROPIC: "Claude Analysis",
    ModelProvider.XAI: "Grok Analysis",
}


def format_clock(timestamp_ms: int) -> str:
    """24h HH:MM:SS in local time"""
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%H:%M:%S")


def sentiment_badge(score: float) -> str:
    if score > 60:
        return "badge-bull"
    if score < 40:
        return "badge-bear"
    return "badge-flat"


def build_galaxy_figure(result: LayoutResult) -> go.Figure:
    fig = go.Figure()
    positions = {n.id: (n.x, n.y) for n in result.nodes}

    # One trace per flow type so the legend doubles as the color key
    for flow in FlowType:
        xs, ys, widths = [], [], []
        for link in result.links:
            if link.type != flow:
                continue
            (x1, y1), (x2, y2) = positions[link.source], positions[link.target]
            xs += [x1, x2, None]
            ys += [y1, y2, None]
            widths.append(link_width(link))
        fig.add_trace(go.Scatter(
            x=xs, y=ys, mode="lines", name=flow.value,
            line=dict(color=LINK_COLORS[flow], width=max(widths) if widths else 1),
            opacity=0.6, hoverinfo="skip",
        ))

    for link in result.links:
        (x1, y1), (x2, y2) = positions[link.source], positions[link.target]
        fig.add_annotation(
            x=x2, y=y2, ax=x1, ay=y1, xref="x", yref="y", axref="x", ayref="y",
            showarrow=True, arrowhead=2, arrowsize=1, arrowwidth=link_width(link),
            arrowcolor=link_color(link), opacity=0.6, standoff=_node_radius(result, link.target),
            text="",
        )

    fig.add_trace(go.Scatter(
        x=[n.x for n in result.nodes],
        y=[n.y for n in result.nodes],
        mode="markers+text",
        name="Companies",
        showlegend=False,
        text=[n.ticker for n in result.nodes],
        textposition="middle center",
        textfont=dict(color="white", family="monospace", size=[label_size(n) for n in result.nodes]),
        customdata=[n.id for n in result.nodes],
        hovertext=[f"{n.id} ({n.ticker})<br>{n.desc or ''}<br>Sentiment {round(n.sentiment_score)}/100"
                   for n in result.nodes],
        hoverinfo="text",
        marker=dict(
            size=[n.val * 2 for n in result.nodes],
            color=NODE_FILL,
            line=dict(color=[node_stroke(n) for n in result.nodes], width=3),
        ),
    ))

    fig.add_trace(go.Scatter(
        x=[n.x for n in result.nodes],
        y=[n.y + n.val + 15 for n in result.nodes],
        mode="text",
        showlegend=False,
        hoverinfo="skip",
        text=[n.id for n in result.nodes],
        textfont=dict(color="#888", size=10),
    ))

    fig.update_layout(
        paper_bgcolor="#0a0a0a",
        plot_bgcolor="#0a0a0a",
        font=dict(color="#ccc", family="monospace"),
        margin=dict(l=10, r=10, t=10, b=10),
        legend=dict(orientation="h", x=0, y=1.02),
        dragmode="pan",
        xaxis=dict(visible=False, range=[0, result.width]),
        # Screen coordinates grow downwards
        yaxis=dict(visible=False, range=[result.height, 0], scaleanchor="x"),
    )
    return fig


def _node_radius(result: LayoutResult, node_id: str) -> float:
    for n in result.nodes:
        if n.id == node_id:
            return n.val
    return 0


def render_news_feed(news: List[Dict[str, Any]]) -> str:
    if not news:
        return '<p class="muted">Waiting for market data...</p>'
    items = []
    for item in news:
        impact_class = "impact-high" if item["impactLevel"] == "HIGH" else "impact-other"
        chips = "".join(f'<span class="chip">${html.escape(t)}</span>' for t in item["relatedTickers"])
        items.append(f"""
        <div class="news-item">
            <div class="row"><span class="badge {impact_class}">{html.escape(item["type"])}</span>
            <span class="clock">{format_clock(item["timestamp"])}</span></div>
            <p>{html.escape(item["headline"])}</p>
            <div>{chips}</div>
        </div>""")
    return "".join(items)


def render_signal_panel(signals: List[Dict[str, Any]], analysis: Dict[str, Any], current_model: str) -> str:
    form = """
    <form id="add-stock" class="row">
        <input name="ticker" placeholder="ADD TICKER (e.g. PLTR)" autocomplete="off">
        <button type="submit">+</button>
    </form>"""
    if not signals:
        return form + '<p class="muted center">Scanning for alpha...</p>'

    title = ANALYSIS_TITLES[ModelProvider.parse(current_model)]
    cards = []
    for s in signals:
        if s["id"] == analysis.get("signalId"):
            if analysis.get("loading"):
                body = '<span class="pulse">Analyzing capital flow derivatives...</span>'
            else:
                body = markdown.markdown(html.escape(analysis.get("text") or ""))
            footer = f'<div class="analysis"><h4>{title}</h4>{body}</div>'
        else:
            footer = f'<button class="analyze" data-signal="{html.escape(s["id"])}">DEEP ANALYZE</button>'
        cards.append(f"""
        <div class="signal signal-{s["action"].lower()}">
            <span class="clock right">{format_clock(s["timestamp"])}</span>
            <div class="action">{s["action"]} {html.escape(s["ticker"])}</div>
            <div class="strength">Signal Strength: <b>{s["strength"]}</b></div>
            <p class="reason">{html.escape(s["reason"])}</p>
            {footer}
        </div>""")
    return form + "".join(cards)


def render_node_detail(node: Optional[Dict[str, Any]]) -> str:
    if node is None:
        return """
        <h3>WAITING FOR SELECTION...</h3>
        <p class="muted">Select a node to view detailed capital flows or watch the feed for algorithmic updates.</p>"""
    score = node["sentimentScore"]
    bar = "bar-bull" if score > 50 else "bar-bear"
    return f"""
        <div class="row"><h3 class="neon">{html.escape(node["id"])} ({html.escape(node["ticker"])})</h3>
        <span class="badge {sentiment_badge(score)}">SENTIMENT: {round(score)}/100</span></div>
        <p>{html.escape(node.get("desc") or "")}</p>
        <div class="track"><div class="{bar}" style="width: {score}%"></div></div>"""


def render_dashboard(snapshot: Dict[str, Any], result: LayoutResult) -> str:
    current_model = snapshot["currentModel"]
    options = "".join(
        f'<option value="{p.value}"{" selected" if p.value == current_model else ""}>{label}</option>'
        for p, label in MODEL_LABELS.items()
    )
    figure_html = build_galaxy_figure(result).to_html(
        full_html=False, include_plotlyjs="cdn", div_id="galaxy", config={"scrollZoom": True},
    )

    return f"""<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>THE AI MONEY MACHINE</title>
    <style>
        body {{ margin: 0; background: #000; color: #ddd; font-family: monospace; }}
        header {{ height: 56px; display: flex; align-items: center; justify-content: space-between; padding: 0 24px; border-bottom: 1px solid #222; }}
        h1 {{ font-size: 18px; color: #fff; }}
        main {{ display: grid; grid-template-columns: 3fr 6fr 3fr; height: calc(100vh - 57px); }}
        aside, section {{ overflow-y: auto; padding: 16px; }}
        section {{ position: relative; background: #0a0a0a; border-left: 1px solid #111; border-right: 1px solid #111; }}
        .row {{ display: flex; justify-content: space-between; align-items: center; gap: 8px; }}
        .muted {{ color: #666; font-size: 12px; }} .center {{ text-align: center; }}
        .news-item {{ padding: 12px; border-left: 2px solid #333; background: #111; margin-bottom: 12px; }}
        .badge {{ font-size: 10px; font-weight: bold; padding: 2px 6px; border-radius: 3px; }}
        .impact-high {{ background: #4a1010; color: #f87171; }} .impact-other {{ background: #10204a; color: #60a5fa; }}
        .badge-bull {{ background: #14532d; color: #86efac; }} .badge-bear {{ background: #7f1d1d; color: #fca5a5; }}
        .badge-flat {{ background: #1f2937; color: #9ca3af; }}
        .chip {{ font-size: 10px; color: #39ff14; border: 1px solid #39ff1455; padding: 0 4px; margin-right: 4px; }}
        .clock {{ font-size: 10px; color: #666; }} .right {{ float: right; }}
        .signal {{ padding: 16px; border-radius: 8px; margin-bottom: 16px; border: 1px solid #333; }}
        .signal-buy {{ border-color: #39ff1455; }} .signal-short {{ border-color: #ff313155; }}
        .signal-buy .action {{ color: #39ff14; }} .signal-short .action {{ color: #ff3131; }} .signal-hold .action {{ color: #9ca3af; }}
        .action {{ font-size: 20px; font-weight: 900; }} .strength {{ font-size: 10px; color: #999; }}
        .reason {{ font-size: 12px; font-style: italic; border-left: 2px solid #555; padding-left: 8px; }}
        .analysis {{ background: #050505; padding: 8px; font-size: 12px; }} .analysis h4 {{ color: #00ffff; margin: 0 0 4px; }}
        .pulse {{ animation: pulse 1s infinite; }} @keyframes pulse {{ 50% {{ opacity: .4; }} }}
        .detail {{ position: absolute; left: 24px; right: 24px; bottom: 24px; background: #000c; border: 1px solid #222; padding: 16px; border-radius: 8px; }}
        .neon {{ color: #39ff14; margin: 0; }} .track {{ background: #222; height: 4px; border-radius: 2px; }}
        .bar-bull {{ background: #39ff14; height: 100%; }} .bar-bear {{ background: #ff3131; height: 100%; }}
        button, input, select {{ background: #111; color: #00ffff; border: 1px solid #333; font-family: monospace; padding: 4px 8px; }}
        button.analyze {{ width: 100%; }}
    </style>
</head>
<body>
    <header>
        <h1>THE AI MONEY MACHINE</h1>
        <div class="row">
            <label class="muted">BRAIN:</label>
            <select id="model">{options}</select>
            <span class="muted">DB: CONNECTED</span>
        </div>
    </header>
    <main>
        <aside><h2>LIVE WIRE</h2>{render_news_feed(snapshot["news"])}</aside>
        <section>
            {figure_html}
            <div class="detail">{render_node_detail(snapshot["selectedNode"])}</div>
        </section>
        <aside><h2>TRADER ACTIONS</h2>{render_signal_panel(snapshot["signals"], snapshot["analysis"], current_model)}</aside>
    </main>
    <script>
        const post = (url, body) => fetch(url, {{
            method: "POST", headers: {{"Content-Type": "application/json"}}, body: JSON.stringify(body || {{}})
        }}).then(() => window.location.reload());
        document.getElementById("model").onchange = (e) => post("/api/v1/model", {{provider: e.target.value}});
        document.getElementById("add-stock").onsubmit = (e) => {{
            e.preventDefault();
            const ticker = e.target.ticker.value.trim().toUpperCase();
            if (ticker) post("/api/v1/stocks", {{ticker}});
        }};
        document.querySelectorAll("button.analyze").forEach((b) => {{
            b.onclick = () => post(`/api/v1/signals/${{b.dataset.signal}}/analyze`);
        }});
        document.getElementById("galaxy").on("plotly_click", (ev) => {{
            const id = ev.points[0].customdata;
            if (id) post(`/api/v1/nodes/${{encodeURIComponent(id)}}/select`);
        }});
        setTimeout(() => window.location.reload(), 3000);
    </script>
</body>
</html>
"""
