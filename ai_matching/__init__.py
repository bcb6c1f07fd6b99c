"""
AI candidate-to-job matching and scoring engine.
"""

__app_name__ = "ai-matching"
__version__ = "0.1.0"
