"""Session sink adapters.

Accepted webhook sessions are handed to a sink; the database and job queue
behind it are external collaborators.
"""
