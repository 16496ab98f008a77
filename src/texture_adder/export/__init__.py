"""
Export module: size planning, encoding, delivery and orchestration.

Key modules:

- :py:mod:`texture_adder.export.planner`: Output size and export plan
- :py:mod:`texture_adder.export.encoder`: PNG, JPEG and WebP encoding
- :py:mod:`texture_adder.export.delivery`: Save and share sinks
- :py:mod:`texture_adder.export.pipeline`: Export state machine
"""

from texture_adder.export.encoder import EncodedImage, encode
from texture_adder.export.planner import ExportPlan, plan_output_size

__all__ = [
    "EncodedImage",
    "ExportPlan",
    "encode",
    "plan_output_size",
]
