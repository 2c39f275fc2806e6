"""Cluster scale-out advice: instance pricing, node scoring, simulation groups, plans and a pricing tool."""

__version__ = "0.1.0"

__all__ = [
    "awsprice",
    "generator",
    "operator_cli",
    "pricing",
    "scadctl",
    "scorer",
    "simgroup",
]