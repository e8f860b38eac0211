"""
Back-Office Services
"""
