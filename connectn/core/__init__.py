"""Core gameplay primitives (board, win detection, capture rules).

Kept free of FastAPI and redis concerns so it can be reused by the session
logic, single-device play, and tests.
"""
