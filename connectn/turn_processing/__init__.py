"""Turn/action processing helpers.

This package centralizes validation so networked and single-device play flow
through the same checks and report the same errors.
"""
