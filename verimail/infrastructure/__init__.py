"""Infrastructure Layer - concrete collaborators and cross-cutting concerns.

Invariants:
    - Every class here satisfies a Protocol from core/repository_protocols.py
    - Library exceptions are mapped to core errors or Envelopes at this boundary
"""
