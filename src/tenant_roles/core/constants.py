"""Application-wide constants.

Reserved role names, permission action names and field lengths live here
so the models, schemas and services agree on them.
"""

# Reserved roles exist in every provider and are seeded by the system
ADMIN_ROLE = "admin"
USER_ROLE = "user"
PENDING_ROLE = "pending"
DENIED_ROLE = "denied"

# Seeding order doubles as the default priority order (admin first)
RESERVED_ROLE_NAMES: tuple[str, ...] = (ADMIN_ROLE, USER_ROLE, PENDING_ROLE, DENIED_ROLE)

# Permission actions understood by the admin surface
CAN_CREATE_ROOMS = "can_create_rooms"
CAN_EDIT_ROLES = "can_edit_roles"
CAN_MANAGE_USERS = "can_manage_users"
CAN_EDIT_SITE_SETTINGS = "can_edit_site_settings"
CAN_MANAGE_ROOMS_RECORDINGS = "can_manage_rooms_recordings"
CAN_APPEAR_IN_SHARE_LIST = "can_appear_in_share_list"
SEND_PROMOTED_EMAIL = "send_promoted_email"
SEND_DEMOTED_EMAIL = "send_demoted_email"

DEFAULT_ROLE_PERMISSIONS: dict[str, dict[str, bool]] = {
    ADMIN_ROLE: {
        CAN_CREATE_ROOMS: True,
        CAN_EDIT_ROLES: True,
        CAN_MANAGE_USERS: True,
        CAN_EDIT_SITE_SETTINGS: True,
        CAN_MANAGE_ROOMS_RECORDINGS: True,
        CAN_APPEAR_IN_SHARE_LIST: True,
        SEND_PROMOTED_EMAIL: True,
        SEND_DEMOTED_EMAIL: True,
    },
    USER_ROLE: {
        CAN_CREATE_ROOMS: True,
        CAN_APPEAR_IN_SHARE_LIST: True,
    },
    PENDING_ROLE: {},
    DENIED_ROLE: {},
}

# Registration methods known to the site settings store
REGISTRATION_METHODS: tuple[str, ...] = ("open", "invite", "approval")

# String field lengths
MAX_PROVIDER_LENGTH = 63
MAX_UID_LENGTH = 64
MAX_EMAIL_LENGTH = 255
MAX_NAME_LENGTH = 255
MAX_ROLE_NAME_LENGTH = 100
MAX_PERMISSION_ACTION_LENGTH = 50
MAX_INVITE_TOKEN_LENGTH = 64

# Invitation tokens
INVITE_TOKEN_BYTES = 24

# Inserts racing another worker on (provider, priority) are retried this often
CREATE_ROLE_ATTEMPTS = 3
