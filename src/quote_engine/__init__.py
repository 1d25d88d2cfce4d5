"""
Quote Engine Package

Cost estimation and formal quoting for custom software projects.
Prices a project category's rate template (features, tier multipliers,
custom surcharge), converts to the client's currency and splits formal
quotes into a three-phase milestone schedule.
"""

__version__ = "1.0.0"
