"""verimail - templated email dispatch and email ownership verification.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
