"""Slack request router.

Verifies signed requests from Slack and dispatches the decoded payload to
the first registered handler whose predicates all hold.
"""

__version__ = "0.1.0"
