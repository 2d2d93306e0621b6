"""Business logic services.

Services contain the refresh/generation logic and are called by routes.
Collaborators (store, provider chain, clock) are passed in explicitly.
"""
