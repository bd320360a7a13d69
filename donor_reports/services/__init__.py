"""
Report engine services.
"""
