"""
safe_assistant - Governed action assistant

A generative model proposes actions; an external authorization service
decides; the model explains the decision under validation and fallback
guards, and the explanation can be narrated with word timing.
"""

__version__ = "1.0.0"
