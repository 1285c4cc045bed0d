"""
Shared, cross-cutting code for the API.

`core/` holds the small building blocks every feature uses (DB handle,
settings, logging, hashing, response envelope). Feature SQL and business
rules stay in the feature package (e.g. `users/`).
"""
