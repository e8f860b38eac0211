"""
Back-Office Core
Configuration, database, logging, security and exceptions
"""
