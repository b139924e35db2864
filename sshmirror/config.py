"""
Configuration constants for sshmirror
"""
import os
from pathlib import Path, PurePosixPath
from typing import Optional

# ══════════════════════════════════════════════════════════════════════════════
#  DEFAULTS  ── overridden by YAML config, apply_profile() or apply_env()
# ══════════════════════════════════════════════════════════════════════════════

SSH_HOST = "example.com"
SSH_PORT = 22
SSH_USER = "root"
# Path to your private key, or None to use ssh-agent / ~/.ssh/id_*
SSH_KEY_PATH: Optional[str] = None  # e.g. "~/.ssh/id_ed25519"
SSH_PASSWORD: Optional[str] = None  # only if you use password auth

LOCAL_ROOT = Path(".")
# local_root exactly as configured; a relative value is resolved against the
# SFTP login directory when it is used as the remote default
LOCAL_ROOT_SETTING = "."
# None → mirror onto LOCAL_ROOT_SETTING on the remote host
REMOTE_ROOT: Optional[PurePosixPath] = None

# Seconds of quiet before pending change events are flushed as one batch
SETTLE_SECONDS = 0.2

# SSH keep-alive interval (seconds)
KEEPALIVE = 30

# Connection retry settings (the mirror engine itself never retries)
RETRY_MAX = 5
RETRY_BASE_DELAY = 2.0  # seconds; doubles each attempt

CONFIG_FILE_NAME = ".sshmirror"

ENV_PREFIX = "SSHMIRROR_"


def get_remote_root() -> PurePosixPath:
    """Return REMOTE_ROOT, defaulting to the configured local_root string."""
    if REMOTE_ROOT is not None:
        return REMOTE_ROOT
    return PurePosixPath(LOCAL_ROOT_SETTING.replace("\\", "/") or ".")


# ══════════════════════════════════════════════════════════════════════════════
#  GLOBAL CONFIG FILE  ── $XDG_CONFIG_HOME/sshmirror/config.yaml
# ══════════════════════════════════════════════════════════════════════════════

def get_global_config_dir() -> Path:
    """Return the global config directory for sshmirror."""
    xdg = os.environ.get("XDG_CONFIG_HOME", "")
    if xdg:
        return Path(xdg) / "sshmirror"
    if os.name == "nt":
        appdata = os.environ.get("APPDATA", "")
        if appdata:
            return Path(appdata) / "sshmirror"
    return Path.home() / ".config" / "sshmirror"


def load_global_config() -> dict:
    """Load global config from the sshmirror config directory."""
    import yaml

    cfg_path = get_global_config_dir() / "config.yaml"
    if not cfg_path.is_file():
        return {}
    try:
        with cfg_path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError):
        return {}


# ══════════════════════════════════════════════════════════════════════════════
#  PROJECT CONFIG FILE  ── .sshmirror (searched upward)
# ══════════════════════════════════════════════════════════════════════════════

def find_config_file(start: Optional[Path] = None) -> Optional[Path]:
    """
    Search upward from *start* (default: cwd) for a .sshmirror YAML file.
    Returns the Path if found, or None if no .sshmirror exists in any parent.
    """
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILE_NAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def load_config_file(path: Path) -> dict:
    """Parse a .sshmirror YAML file and return its contents as a dict."""
    import yaml

    with path.open("r", encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def get_profile(data: dict, profile_name: str = "default") -> dict:
    """
    Extract a named profile from a .sshmirror or config.yaml data dict.
    Falls back to the first profile if the named one is not found.
    Returns a flat profile dict merged with top-level defaults.
    """
    defaults = data.get("defaults", {})
    profiles = data.get("profiles", [])
    if not profiles:
        return defaults.copy()
    profile = next((p for p in profiles if p.get("name") == profile_name), None)
    if profile is None:
        profile = profiles[0]
    merged = defaults.copy()
    merged.update(profile)
    return merged


# ══════════════════════════════════════════════════════════════════════════════
#  APPLY PROFILE  ── mutates module-level variables
# ══════════════════════════════════════════════════════════════════════════════

def apply_profile(profile: dict):
    """
    Apply a profile dict to the module-level config variables.
    Supports keys: server, port, user, ssh_key, ssh_password, local_root,
                   remote_root, base_remote (prepended to remote_root if
                   remote_root is relative), settle_seconds, keepalive.
    """
    global SSH_HOST, SSH_PORT, SSH_USER, SSH_KEY_PATH, SSH_PASSWORD
    global LOCAL_ROOT, LOCAL_ROOT_SETTING, REMOTE_ROOT, SETTLE_SECONDS, KEEPALIVE

    if "server" in profile:
        SSH_HOST = str(profile["server"])
    if "port" in profile:
        SSH_PORT = int(profile["port"])
    if "user" in profile:
        SSH_USER = str(profile["user"])
    elif "username" in profile:
        SSH_USER = str(profile["username"])
    if "ssh_key" in profile:
        SSH_KEY_PATH = expand_key_path(profile["ssh_key"])
    if "ssh_password" in profile:
        SSH_PASSWORD = str(profile["ssh_password"]) if profile["ssh_password"] else None
    if "local_root" in profile:
        LOCAL_ROOT_SETTING = str(profile["local_root"])
        LOCAL_ROOT = Path(profile["local_root"]).expanduser().resolve()
    if "remote_root" in profile:
        rr = str(profile["remote_root"])
        base = str(profile.get("base_remote", "")).rstrip("/")
        if base and not rr.startswith("/"):
            rr = f"{base}/{rr}"
        REMOTE_ROOT = PurePosixPath(rr)
    if "settle_seconds" in profile:
        SETTLE_SECONDS = float(profile["settle_seconds"])
    if "keepalive" in profile:
        KEEPALIVE = int(profile["keepalive"])


def apply_env(environ: Optional[dict] = None):
    """
    Apply SSHMIRROR_* environment overrides on top of the active profile:
      SSHMIRROR_REMOTE_HOST, SSHMIRROR_REMOTE_PORT, SSHMIRROR_REMOTE_USER,
      SSHMIRROR_PRIVATE_KEY, SSHMIRROR_LOCAL_DIR, SSHMIRROR_REMOTE_DIR
    """
    env = os.environ if environ is None else environ
    mapping = {
        "REMOTE_HOST": "server",
        "REMOTE_PORT": "port",
        "REMOTE_USER": "user",
        "PRIVATE_KEY": "ssh_key",
        "LOCAL_DIR": "local_root",
        "REMOTE_DIR": "remote_root",
    }
    overrides = {
        key: env[ENV_PREFIX + name]
        for name, key in mapping.items()
        if env.get(ENV_PREFIX + name)
    }
    if overrides:
        apply_profile(overrides)


def expand_key_path(value) -> Optional[str]:
    """Expand a leading ~ in a private key path; empty values mean no key."""
    if not value:
        return None
    return str(Path(str(value)).expanduser())
