"""
Default parameters for cache reclamation
Centralized configuration for the client agent cache and the update cache
"""
from dataclasses import dataclass


@dataclass
class ReclaimDefaults:
    """Default reclamation parameters"""
    # Secondary cache - Windows Update download store and its owning service
    SECONDARY_CACHE_PATH = r"C:\Windows\SoftwareDistribution"
    SECONDARY_SERVICE_NAME = "wuauserv"
    GRACE_PERIOD_SECONDS = 10              # wait for the service to recreate its directory

    # Remote channel
    SSH_PORT = 22
    CONNECT_TIMEOUT = 10
    COMMAND_TIMEOUT = 300                  # per remote script
    CONTROL_DIR = "/tmp"
    POWERSHELL_EXECUTABLE = "powershell"

    # Configuration layout
    CONFIG_FILE = "/etc/cachereclaim/cachereclaim.yaml"
    CONFIG_ENV_VAR = "CACHERECLAIM_CONFIG"
    SECRETS_FILE = "secrets/cachereclaim.env"
    GROUPS_DIR = "groups"

    BYTES_PER_MB = 1024 * 1024
