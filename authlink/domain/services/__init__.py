"""Domain services for the authentication and external-link bounded contexts.

- `auth`: credential login, registration, password reset, refresh-token
  sessions and access-token issuance.
- `external_link`: the OAuth2 flow that links accounts at external providers.
"""
