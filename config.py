#!/usr/bin/env python3
"""
Configuration manager for cache reclamation
Handles loading YAML settings, host groups and dotenv secrets
"""
import glob
import logging
import os
from typing import Any, Dict, List, Optional

import yaml
from dotenv import dotenv_values
from pydantic import ValidationError

from models.settings import ReclaimSettings
from services.errors import ConfigError
from services.reclaim_defaults import ReclaimDefaults

logger = logging.getLogger(__name__)


class ReclaimConfig:
    """Manages the reclamation configuration in YAML format"""

    def __init__(self, config_file: Optional[str] = None):
        self.config_file = config_file or os.environ.get(ReclaimDefaults.CONFIG_ENV_VAR, ReclaimDefaults.CONFIG_FILE)
        self.config_dir = os.path.dirname(os.path.abspath(self.config_file))
        self.config = self.load_config()
        self.settings = self._build_settings(self.config['global_settings'])

    def load_config(self) -> Dict[str, Any]:
        """Load global settings + host groups, with secrets merged into both"""
        secrets = self._load_secrets()
        return {
            'global_settings': self._merge_secrets(self._load_global_settings(), secrets),
            'host_groups': self._merge_secrets(self._load_host_groups(), secrets)
        }

    def _load_global_settings(self) -> Dict[str, Any]:
        """Load global settings from the settings file; a missing file means defaults"""
        if not os.path.exists(self.config_file):
            logger.debug(f"No settings file at {self.config_file}, using defaults")
            return {}

        try:
            with open(self.config_file, 'r') as f:
                content = f.read().strip()
        except OSError as e:
            raise ConfigError(f"Could not read settings file {self.config_file}: {e}")

        if not content:
            return {}

        try:
            settings = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise ConfigError(f"Malformed settings file {self.config_file}: {e}")

        if settings is None:
            return {}
        if not isinstance(settings, dict):
            raise ConfigError(f"Settings file {self.config_file} must contain a mapping")
        return settings

    def _load_secrets(self) -> Dict[str, str]:
        """Load secrets from the dotenv file next to the settings file"""
        secrets_file = os.path.join(self.config_dir, ReclaimDefaults.SECRETS_FILE)
        if not os.path.exists(secrets_file):
            return {}
        return {key: value for key, value in dotenv_values(secrets_file).items() if value is not None}

    def _load_host_groups(self) -> Dict[str, List[str]]:
        """Load named host groups from groups/*.yaml"""
        groups = {}
        groups_dir = os.path.join(self.config_dir, ReclaimDefaults.GROUPS_DIR)

        if not os.path.exists(groups_dir):
            return groups

        for group_file in sorted(glob.glob(os.path.join(groups_dir, "*.yaml"))):
            group_name = os.path.splitext(os.path.basename(group_file))[0]

            try:
                with open(group_file, 'r') as f:
                    group_config = yaml.safe_load(f.read())
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Error loading host group {group_name}: {str(e)}")
                continue

            if isinstance(group_config, dict):
                group_config = group_config.get('hosts')

            if not isinstance(group_config, list):
                logger.warning(f"Host group {group_name} does not define a list of hosts")
                continue

            groups[group_name] = [str(host) for host in group_config if host is not None]

        return groups

    def _merge_secrets(self, config, secrets):
        """Merge secrets into config by replacing ${VAR} placeholders"""
        def replace_vars(obj):
            if isinstance(obj, str):
                for key, value in secrets.items():
                    obj = obj.replace(f"${{{key}}}", value)
                return obj
            elif isinstance(obj, dict):
                return {k: replace_vars(v) for k, v in obj.items()}
            elif isinstance(obj, list):
                return [replace_vars(item) for item in obj]
            else:
                return obj

        return replace_vars(config)

    def _build_settings(self, global_settings: Dict[str, Any]) -> ReclaimSettings:
        try:
            return ReclaimSettings.model_validate(global_settings)
        except ValidationError as e:
            raise ConfigError(f"Invalid settings in {self.config_file}: {e}")

    def get_settings(self) -> ReclaimSettings:
        return self.settings

    def get_host_groups(self) -> Dict[str, List[str]]:
        return self.config['host_groups']

    def get_host_group(self, group_name: str) -> List[str]:
        groups = self.get_host_groups()
        if group_name not in groups:
            raise ConfigError(f"Unknown host group: {group_name}")
        return groups[group_name]
