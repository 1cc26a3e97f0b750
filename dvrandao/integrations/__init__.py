"""dvrandao.integrations

Boundary helpers for consumers of proof circles.
"""
