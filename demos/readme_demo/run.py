"""README demo runner.

Walks through the four usage levels of the evaluator: plain expressions,
expressions over a variable store, a custom operator in a context, and the
assignment macro. Writes a deterministic readme_demo_summary.json.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

_DEMO_DIR = Path(__file__).parent


def run_demo(output_dir: Path | None = None) -> dict[str, Any]:
    """Execute the README demo end-to-end.

    Args:
        output_dir: Directory to write the summary. Defaults to the demo directory.

    Returns:
        Summary dict of each example's expression and result.
    """
    from shuntyard import Context, UnaryOperator, eval_str, eval_str_with_vars, eval_str_with_vars_and_ctx

    out = output_dir or _DEMO_DIR
    examples: list[dict[str, Any]] = []

    # 1. Default context, no variables
    result = eval_str("10 + 10 * 10")
    examples.append({"name": "simple", "expr": "10 + 10 * 10", "result": result})
    print(f"simple example: {result}")

    # 2. Caller-owned variable store
    variables = {"a": 1.0, "b": 2.0, "c": 3.0}
    result = eval_str_with_vars("a + b * c", variables)
    examples.append({"name": "with_variables", "expr": "a + b * c", "result": result})
    print(f"example with variables: {result}")

    # 3. Custom unary operator registered in a context
    ctx = Context.default()
    ctx.insert_unary(UnaryOperator(token="$$$", function=lambda v: v * 1000.0))
    result = eval_str_with_vars_and_ctx("$$$42.0", {}, ctx)
    examples.append({"name": "with_context", "expr": "$$$42.0", "result": result})
    print(f"example with custom unary operator from ctx: {result}")

    # 4. Assignment macro writes into the store
    store: dict[str, float] = {}
    result = eval_str_with_vars_and_ctx("a = 22.0 + 20.0", store, Context.default_with_macros())
    examples.append({"name": "macros", "expr": "a = 22.0 + 20.0", "result": result, "store": store})
    print(f"macro example: a = {result}")

    summary = {"examples": examples}
    out.mkdir(parents=True, exist_ok=True)
    (out / "readme_demo_summary.json").write_text(
        json.dumps(summary, indent=2, sort_keys=True) + "\n"
    )
    return summary


if __name__ == "__main__":
    run_demo()
