"""
Row Access Configuration
This config defines who may read and write each table, one rule per (resource, action).
It mirrors the row-level-security policies in supabase/migrations and is evaluated
by app.core.policy on every service read/write path.

Rule values:
- "anyone": anonymous and signed-in callers
- "owner":  signed-in caller whose id equals the row's owner column
- "system": no client may perform it (database triggers only)
- "cascade": no direct client access; happens through a foreign-key cascade
"""

ANYONE = "anyone"
OWNER = "owner"
SYSTEM = "system"
CASCADE = "cascade"

ACTIONS = ["read", "create", "update", "delete"]

# Define resources, their owner column and per-action rules
RESOURCES = {
    "profiles": {
        "owner_column": "id",
        "rules": {"read": ANYONE, "create": SYSTEM, "update": OWNER, "delete": CASCADE},
        "description": "Public user profiles, created by the signup trigger"
    },
    "tutorials": {
        "owner_column": "user_id",
        "rules": {"read": ANYONE, "create": OWNER, "update": OWNER, "delete": OWNER},
        "description": "Authored tutorials"
    },
    "tutorial_likes": {
        "owner_column": "user_id",
        "rules": {"read": ANYONE, "create": OWNER, "update": SYSTEM, "delete": OWNER},
        "description": "One like per user per tutorial"
    },
    "tutorial_comments": {
        "owner_column": "user_id",
        "rules": {"read": ANYONE, "create": OWNER, "update": SYSTEM, "delete": OWNER},
        "description": "Append-only tutorial comments"
    },
    "enrollments": {
        "owner_column": "user_id",
        "rules": {"read": OWNER, "create": OWNER, "update": SYSTEM, "delete": OWNER},
        "description": "Private tutorial enrollments"
    },
}


def get_permission_matrix():
    """
    Returns the access matrix in a serialisable form
    Format: {
        "permissions": [
            {"name": "tutorials:update", "resource": "tutorials", "action": "update", "rule": "owner", "description": "..."},
            ...
        ]
    }
    """
    permissions = []
    for resource, config in RESOURCES.items():
        for action in ACTIONS:
            permissions.append({
                "name": f"{resource}:{action}",
                "resource": resource,
                "action": action,
                "rule": config["rules"][action],
                "description": f"{action.capitalize()} {config['description'][0].lower()}{config['description'][1:]}"
            })
    return {"permissions": permissions}
