"""
Use Cases

Organized by domain folder:
- auth/: Registration, login, email verification, passwords, profile
- sessions/: Listing and revoking the caller's sessions
- invitations/: Invitation workflow
- roles/: Role and permission management
"""
