"""
CI Summarizer
=============

CI-triggered commit reviews, log diagnosis and release notes written
by a language model from GitHub and Semaphore data.
"""

__version__ = "0.1.0"
