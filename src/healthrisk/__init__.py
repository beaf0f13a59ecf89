"""
healthrisk: synthetic medical data, preprocessing primitives and a
from-scratch neural risk model for a health-risk demo.

NOT a clinically validated model. Do not use for medical decisions.
"""

__version__ = "0.1.0"
