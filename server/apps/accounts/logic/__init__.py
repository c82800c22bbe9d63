"""Business logic layer for accounts app.

- Registration of users with hashed credentials
- Token-based login, logout and identity resolution

Every file operation receives an identity resolved here.
"""
