"""
resmeasures - residential energy model measures.

Translates HPXML building descriptions into whole-building energy models
and runs batches of per-building simulations.
"""

__version__ = "2.5.0"
