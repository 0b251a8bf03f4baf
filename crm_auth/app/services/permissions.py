"""Permission catalogue seeded at startup."""

PERMISSION_CATALOGUE = {
    "roles:read": "View roles and their permissions",
    "roles:write": "Create and update roles",
    "roles:delete": "Delete roles",
    "invitations:read": "View pending invitations",
    "invitations:create": "Invite users to the organization",
    "invitations:delete": "Revoke invitations",
    "accounts:read": "View accounts",
    "accounts:create": "Create accounts",
    "accounts:update": "Update accounts",
    "accounts:delete": "Delete accounts",
    "agents:read": "View agents",
    "agents:create": "Create agents",
    "agents:update": "Update agents",
    "agents:delete": "Delete agents",
    "clients:read": "View clients",
    "clients:create": "Create clients",
    "clients:update": "Update clients",
    "clients:delete": "Delete clients",
    "insurers:read": "View insurers",
    "insurers:create": "Create insurers",
    "insurers:update": "Update insurers",
    "insurers:delete": "Delete insurers",
}
