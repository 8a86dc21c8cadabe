"""Authentication and authorization.

Learn: Three pieces:
1. Users → email/password (bcrypt) → signed JWT (password.py, jwt.py)
2. Bearer JWT → Principal for each request (dependencies.py)
3. Principal + resource → allow / Forbidden (policy.py)

The policy module is pure: it never touches the database. Services
load the resource (404 if it doesn't exist) and then ask the policy.
"""
