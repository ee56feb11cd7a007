"""Generate a self-contained HTML timeline of a refinement playback."""

import html
import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from refineplay.engine import RefinementEngine
from refineplay.errors import InvalidPass
from refineplay.metrics import (
    build_series,
    chart_datasets,
    describe_change,
    format_metrics,
    key_insight,
    pass_label,
    pass_labels,
)
from refineplay.models import METRIC_NAMES, Pass, Problem


def write_timeline(engine: RefinementEngine, output_path: str | Path) -> Path:
    """Write the passes shown so far (history + current) as an HTML page."""
    problem = engine.get_problem()
    current = engine.get_current_pass()
    if problem is None or current is None:
        raise InvalidPass("No problem selected; nothing to render")

    html_text = render_timeline(problem, [*engine.history, current], total=engine.total_passes)
    path = Path(output_path)
    path.write_text(html_text, encoding="utf-8")
    return path


def render_timeline(problem: Problem, passes: Sequence[Pass], total: int | None = None) -> str:
    """Render pass cards and a metrics chart for ``passes`` in visiting order."""
    if not passes:
        raise InvalidPass(f"No passes to render for {problem.key}")
    total = total or len(passes)

    cards = []
    for i, p in enumerate(passes):
        change = describe_change(passes[i - 1], p) if i > 0 else ""
        cards.append(_render_card(p, i, total, change))

    series = build_series(passes[:-1], format_metrics(passes[-1]))
    return _render_html(
        problem=problem,
        cards=cards,
        labels=pass_labels(len(passes)),
        datasets=chart_datasets(series),
        generated_at=datetime.now().strftime("%Y-%m-%d %H:%M"),
    )


def _render_card(p: Pass, index: int, total: int, change: str) -> str:
    metrics = format_metrics(p)
    bars = "".join(
        f'''<div class="metric-item"><strong>{name.capitalize()}</strong>
        <div class="metric-bar"><div class="metric-fill" style="width: {getattr(metrics, name)}%"></div></div>
        <span>{getattr(metrics, name)}%</span></div>'''
        for name in METRIC_NAMES
    )
    change_html = f'<div class="pass-change">{html.escape(change)}</div>' if change else ""
    return f"""<div class="pass-card" id="pass-{index + 1}">
  <div class="pass-header">
    <div class="pass-number">{html.escape(pass_label(index, total))}</div>
    <div class="metrics-mini">{bars}
      <div class="metric-item"><strong>Errors</strong> <span>{metrics.errors}</span></div>
      <div class="metric-item"><strong>Average</strong> <span>{metrics.average}%</span></div>
    </div>
  </div>
  {change_html}
  <pre class="pass-text">{html.escape(p.output)}</pre>
  <div class="pass-critique"><strong>Model Critique:</strong><pre>{html.escape(p.critique)}</pre></div>
  <div class="pass-insight">{html.escape(key_insight(index + 1))}</div>
</div>"""


def _render_html(
    *,
    problem: Problem,
    cards: list[str],
    labels: list[str],
    datasets: list[dict],
    generated_at: str,
) -> str:
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="UTF-8">
<meta name="viewport" content="width=device-width, initial-scale=1.0">
<title>{html.escape(problem.title)} | Refinement Timeline</title>
<style>
  * {{ margin: 0; padding: 0; box-sizing: border-box; }}
  body {{ font-family: system-ui, -apple-system, 'Segoe UI', Roboto, sans-serif;
         background: #0f172a; color: #f1f5f9; padding: 20px; }}
  h1 {{ color: #14b8a6; margin-bottom: 4px; }}
  .subtitle {{ color: #94a3b8; margin-bottom: 24px; font-size: 14px; }}
  .section {{ margin-bottom: 32px; }}
  .section-title {{ font-size: 16px; font-weight: 600; margin-bottom: 12px;
                    border-bottom: 1px solid #1e293b; padding-bottom: 8px; }}
  .chart-container {{ position: relative; height: 300px; background: #1e293b; border: 1px solid #334155;
                     border-radius: 6px; padding: 16px; }}
  .pass-card {{ background: #1e293b; border: 1px solid #334155; border-radius: 6px;
                padding: 14px 18px; margin-bottom: 12px; }}
  .pass-header {{ display: flex; justify-content: space-between; gap: 16px; margin-bottom: 10px; }}
  .pass-number {{ font-weight: 700; color: #14b8a6; white-space: nowrap; }}
  .metrics-mini {{ display: flex; flex-wrap: wrap; gap: 12px; font-size: 12px; color: #94a3b8; }}
  .metric-item {{ display: flex; align-items: center; gap: 6px; }}
  .metric-bar {{ width: 80px; height: 6px; background: #334155; border-radius: 3px; }}
  .metric-fill {{ height: 100%; background: #14b8a6; border-radius: 3px; }}
  .pass-change {{ font-size: 13px; color: #22c55e; margin-bottom: 8px; }}
  pre {{ white-space: pre-wrap; font-family: ui-monospace, monospace; font-size: 13px; }}
  .pass-text {{ background: #0f172a; border-radius: 4px; padding: 10px; margin-bottom: 8px; }}
  .pass-critique {{ font-size: 13px; color: #cbd5e1; margin-bottom: 8px; }}
  .pass-insight {{ font-size: 12px; color: #94a3b8; font-style: italic; }}
</style>
<script src="https://cdn.jsdelivr.net/npm/chart.js@4"></script>
</head>
<body>

<h1>{html.escape(problem.title)}</h1>
<p class="subtitle">{html.escape(problem.description)} &middot; {len(cards)} passes &middot; generated {generated_at}</p>

<div class="section">
  <div class="section-title">Quality Metrics Across Passes</div>
  <div class="chart-container">
    <canvas id="metricsChart"></canvas>
  </div>
</div>

<div class="section">
  <div class="section-title">Refinement Timeline</div>
  {"".join(cards)}
</div>

<script>
const labels = {json.dumps(labels)};
const datasets = {json.dumps(datasets)};

new Chart(document.getElementById('metricsChart'), {{
  type: 'line',
  data: {{
    labels,
    datasets: datasets.map(d => ({{
      label: d.label, data: d.data, borderColor: d.color, backgroundColor: d.color,
      borderWidth: 2, pointRadius: 4,
    }})),
  }},
  options: {{
    plugins: {{ legend: {{ labels: {{ color: '#f1f5f9' }} }} }},
    scales: {{
      x: {{ title: {{ display: true, text: 'Refinement Pass', color: '#94a3b8' }}, ticks: {{ color: '#94a3b8' }} }},
      y: {{ min: 0, max: 105, title: {{ display: true, text: 'Score (0-100)', color: '#94a3b8' }},
            ticks: {{ color: '#94a3b8' }}, grid: {{ color: '#334155' }} }}
    }},
    maintainAspectRatio: false,
    responsive: true,
  }}
}});
</script>

</body>
</html>"""
