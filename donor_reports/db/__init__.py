"""
Database engine, session and migrations.
"""
