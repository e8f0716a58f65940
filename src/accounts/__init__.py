"""Account management service.

Sign-in-or-register against a Keycloak realm, account editing with
role-aware permissions, and admin user search, served over FastAPI.
"""

__version__ = "0.1.0"
