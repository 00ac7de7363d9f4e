"""Real-time notification delivery package.

Ensures the local ``notistream`` package takes precedence over similarly
named distributions that might be installed in the environment.
"""
