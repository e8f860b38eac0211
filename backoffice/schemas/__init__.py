"""
Back-Office Pydantic Schemas
"""
