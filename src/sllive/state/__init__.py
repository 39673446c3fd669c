"""State layer.

This package owns everything that persists between poll ticks: the line
selection, per-vehicle render/heading state and the label singleton. Only
the session mutates it.
"""
