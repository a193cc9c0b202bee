"""
evalplot — R report synthesis for evaluation results.

Subpackages
- core — pivots, chart options, vocabulary (zero-IO).
- io — configuration, input probes, runtime collaborators.
- script — typed statement IR, R serializer, synthesis engine.
- reports — recognition, detection, landmarking and metadata reports plus the CLI.
"""

__version__ = "0.1.0"
