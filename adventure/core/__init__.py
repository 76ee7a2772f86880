"""Core gameplay primitives (triggers, randomness, combat, session state, events).

Kept free of FastAPI concerns so it can be reused by API routes, the game loop, and tests.
"""
