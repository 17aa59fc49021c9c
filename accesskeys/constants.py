"""Shared constants for the access key service.

Literal strings used by more than one module live here: audit event
vocabulary, sortable columns, and default file locations.
"""

# ─── Audit Events ─────────────────────────────────────────────────────────────

# ObjectType stamped on every event emitted by the key lifecycle.
EVENT_OBJECT_TYPE: str = "key"

# Event descriptions. Formatted with the key name.
EVENT_KEY_CREATED: str = "Access Key {name} created"
EVENT_KEY_UPDATED: str = "Access Key {name} updated"
EVENT_KEY_DELETED: str = "Access Key {name} deleted"

# ─── Listing ──────────────────────────────────────────────────────────────────

# Columns a caller may sort the key listing by.
SORTABLE_KEY_COLUMNS: frozenset[str] = frozenset({"name", "type"})

# Column used when the caller gives no sort column, or an unrecognized one.
DEFAULT_KEY_SORT_COLUMN: str = "name"

# Query-string value of ``order`` that inverts the sort.
SORT_DESCENDING: str = "desc"

# ─── Storage Defaults ─────────────────────────────────────────────────────────

DEFAULT_KEYS_DB_PATH: str = "~/.accesskeys/keys.db"
DEFAULT_EVENTS_DB_PATH: str = "~/.accesskeys/events.db"

# Tables whose key columns reference access_key.id. A row in any of them
# blocks hard deletion of the referenced key.
KEY_REFERENCE_COLUMNS: tuple[tuple[str, str], ...] = (
    ("inventory", "ssh_key_id"),
    ("inventory", "become_key_id"),
    ("repository", "ssh_key_id"),
    ("template", "vault_key_id"),
)
