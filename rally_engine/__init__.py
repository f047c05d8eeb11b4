"""Monte-Carlo Tree Search planner for a stochastic rally vehicle."""

__version__ = "0.1.0"
