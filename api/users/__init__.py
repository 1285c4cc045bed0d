"""
User profile records: entity, repository, row stores and HTTP endpoints.
"""
