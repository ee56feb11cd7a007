#!/usr/bin/env python3
"""Refineplay MCP Server: browse refinement passes and their metrics."""

import json
import logging
import sys

from mcp.server.fastmcp import FastMCP

from refineplay.catalog import Catalog, catalog_for
from refineplay.config import load_config
from refineplay.errors import InvalidPass, UnknownProblem
from refineplay.metrics import describe_change, format_metrics, metric_history, pass_label

mcp = FastMCP("refineplay")
logger = logging.getLogger(__name__)

# Redirect all logging to stderr so stdout stays clean for MCP stdio transport
logging.basicConfig(
    stream=sys.stderr,
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

_catalog: Catalog | None = None


def _get_catalog() -> Catalog:
    global _catalog
    if _catalog is None:
        _catalog = catalog_for(load_config())
    return _catalog


def _pass_at(problem_key: str, pass_number: int):
    problem = _get_catalog().get(problem_key)
    if not 1 <= pass_number <= problem.pass_count:
        raise InvalidPass(
            f"{problem_key} has passes 1-{problem.pass_count}, got {pass_number}"
        )
    return problem, problem.passes[pass_number - 1]


@mcp.tool()
def list_problems() -> str:
    """List available problems with titles, descriptions and pass counts."""
    result = [
        {
            "key": key,
            "title": p.title,
            "description": p.description,
            "passes": p.pass_count,
        }
        for key, p in _get_catalog().items()
    ]
    return json.dumps(result)


@mcp.tool()
def get_pass(problem_key: str, pass_number: int) -> str:
    """Get one pass (1-based) with its output, critique and formatted metrics."""
    try:
        problem, p = _pass_at(problem_key, pass_number)
        return json.dumps({
            "label": pass_label(pass_number - 1, problem.pass_count),
            "output": p.output,
            "critique": p.critique,
            "metrics": format_metrics(p).model_dump(),
        })
    except (UnknownProblem, InvalidPass) as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def get_metric_history(problem_key: str, passes: int = 0) -> str:
    """Get per-metric score sequences for the first N passes (all passes when N is 0)."""
    try:
        problem = _get_catalog().get(problem_key)
        return json.dumps(metric_history(problem, passes or problem.pass_count).model_dump())
    except UnknownProblem as e:
        return json.dumps({"error": str(e)})


@mcp.tool()
def describe_pass_change(problem_key: str, pass_number: int) -> str:
    """Describe what improved from the previous pass to pass N (1-based, N >= 2)."""
    try:
        problem, current = _pass_at(problem_key, pass_number)
        if pass_number < 2:
            raise InvalidPass("The first pass has no previous pass to compare with")
        previous = problem.passes[pass_number - 2]
        return json.dumps({"change": describe_change(previous, current)})
    except (UnknownProblem, InvalidPass) as e:
        return json.dumps({"error": str(e)})


if __name__ == "__main__":
    mcp.run()
