"""Services Layer - async orchestration of config, users, tokens and mail.

Invariants:
    - One component per file, collaborators injected through the constructor
    - Services raise VerimailError subclasses; they never build HTTP responses
"""
