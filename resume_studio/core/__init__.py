"""
Core module - configuration, auth, errors, logging and response envelopes.
"""
