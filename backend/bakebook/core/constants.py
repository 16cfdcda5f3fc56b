"""
Application Constants
Defines constant values used throughout the application.

This module contains all application-wide constants including:
- Outbox operation kinds and statuses
- Local store slot names
- Identifier prefixes used by the offline client
- Validation limits
"""

# Outbox Operation Kinds
OP_CREATE = "create"  # POST /api/recipes
OP_UPDATE = "update"  # PUT /api/recipes/{id}
OP_DELETE = "delete"  # DELETE /api/recipes/{id}

# Outbox Item Statuses
STATUS_PENDING = "pending"  # Waiting for the next sync pass
STATUS_SYNCING = "syncing"  # Being replayed right now
STATUS_SYNCED = "synced"  # Confirmed by the server
STATUS_ERROR = "error"  # Last attempt failed, see item.error

VALID_STATUSES = [STATUS_PENDING, STATUS_SYNCING, STATUS_SYNCED, STATUS_ERROR]

# Statuses a sync pass will attempt. "syncing" only survives outside a pass
# when an earlier pass was interrupted.
RETRYABLE_STATUSES = [STATUS_PENDING, STATUS_ERROR, STATUS_SYNCING]

# Local Store Slots
SLOT_USER = "user"
SLOT_TOKEN = "token"
SLOT_RECIPES = "recipes"
SLOT_OUTBOX = "outbox"

VALID_SLOTS = [SLOT_USER, SLOT_TOKEN, SLOT_RECIPES, SLOT_OUTBOX]

# Identifier Prefixes
TEMP_ID_PREFIX = "temp_"  # Recipes created offline
OUTBOX_ID_PREFIX = "offline_"  # Outbox items

# Fields that only exist on the client copy of a recipe and are never sent
CLIENT_ONLY_FIELDS = ("id", "user_id", "created_at", "updated_at")

# Auth Validation
MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6

# Cookbook
DEFAULT_COOKBOOK_TITLE = "My Recipe Collection"
