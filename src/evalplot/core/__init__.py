"""
Core contracts for evalplot (vocabulary, pivots, chart options, errors, constants).

## Contracts (single source of truth)
- Grammar — relation names and output devices.
- Pivots — naming-convention extraction and major/minor classification.
- Options — per-chart defaults and override resolution (pydantic models).
- Errors/Constants — typed failures and fixed literals.

## Notes
- Zero‑IO policy: stdlib + pydantic only; paths are inspected, never opened.
- Option wire names are camelCase (``xLog``); model attributes are lower_snake.

## Downstream usage
- evalplot.script — reads PivotState and ChartOptions to synthesize statements.
- evalplot.reports — classifies inputs once per report and resolves options per chart.

## Examples
```python
from evalplot.core.pivots import classify_pivots
from evalplot.core.options import resolve_options
state = classify_pivots(["Algorithm_Split/alg1_0.csv", "Algorithm_Split/alg2_0.csv"])
state.major.header  # 'Algorithm'
resolve_options("detOptions", ["yLog=false"]).y_log  # False
```
"""
