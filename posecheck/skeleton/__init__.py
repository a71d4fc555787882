"""
Skeleton tracking utilities.

This package defines the sensor-agnostic skeleton model, the leg-raise
evaluator, render planning and the frame sources that feed them.
"""
