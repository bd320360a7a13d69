"""
Core configuration, security and error types.
"""
