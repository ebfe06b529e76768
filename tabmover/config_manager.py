import os
import json
import logging

DEFAULT_SETTINGS = {
    "debounce_ms": 120,
    "command_timeout_seconds": 5.0,
    "display_source": "extension",
    "api_host": "127.0.0.1",
    "api_port": 5556,
    "log_dir": None,
}

DISPLAY_SOURCES = ("extension", "screeninfo")


class ConfigManager:
    """Manages the application settings stored in JSON format."""

    def __init__(self, config_path=None):
        """Initialize the configuration manager.

        Args:
            config_path (str, optional): Path to the config file. If None, uses default location.
        """
        self.logger = logging.getLogger("TabMover.ConfigManager")

        if config_path is None:
            # Default location is in the package directory
            self.config_path = os.path.join(
                os.path.dirname(os.path.abspath(__file__)), "tabmover_config.json"
            )
        else:
            self.config_path = config_path

        self.config_dir = os.path.dirname(os.path.abspath(self.config_path))

        # Ensure the config directory exists
        if not os.path.exists(self.config_dir):
            os.makedirs(self.config_dir)

        # Load or create the config file
        if not os.path.exists(self.config_path):
            self.logger.info(
                f"Config file not found. Creating default at {self.config_path}"
            )
            self.config = self._create_default_config()
            self.save_config()
        else:
            self.load_config()

        if not hasattr(self, "_last_saved_json"):
            self._last_saved_json = json.dumps(self.config, sort_keys=True)

    def load_config(self):
        """Load configuration from the JSON file."""
        try:
            with open(self.config_path, "r") as f:
                self.config = json.load(f)

            # Snapshot for change detection in save_config.
            self._last_saved_json = json.dumps(self.config, sort_keys=True)

            if not self._validate_config():
                self.logger.warning("Invalid config file. Creating new default config.")
                self.config = self._create_default_config()
                self.save_config()

            return True
        except (OSError, ValueError) as e:
            self.logger.error(f"Error loading config: {str(e)}")
            self.config = self._create_default_config()
            return False

    def save_config(self):
        """Save configuration to the JSON file, skipping unchanged writes."""
        try:
            if hasattr(self, "_last_saved_json"):
                current_json = json.dumps(self.config, sort_keys=True)
                if current_json == self._last_saved_json and os.path.exists(
                    self.config_path
                ):
                    return True

            with open(self.config_path, "w") as f:
                json.dump(self.config, f, indent=2)

            self._last_saved_json = json.dumps(self.config, sort_keys=True)
            self.logger.debug(f"Config saved to {self.config_path}")

            return True
        except OSError as e:
            self.logger.error(f"Error saving config: {str(e)}")
            return False

    def _create_default_config(self):
        """Create a default configuration structure."""
        return {"settings": dict(DEFAULT_SETTINGS)}

    def _validate_config(self):
        """Validate that the config has the required structure."""
        if not isinstance(self.config, dict):
            return False
        if "settings" not in self.config:
            self.config["settings"] = dict(DEFAULT_SETTINGS)
        if not isinstance(self.config["settings"], dict):
            return False

        # Fill in settings added after the file was written
        for key, value in DEFAULT_SETTINGS.items():
            self.config["settings"].setdefault(key, value)

        return True

    def get_settings(self):
        """Get application settings.

        Returns:
            dict: Settings dictionary
        """
        return dict(self.config.get("settings", DEFAULT_SETTINGS))

    def update_settings(self, settings_dict):
        """Update application settings.

        Args:
            settings_dict (dict): Settings to update (partial or full)

        Returns:
            bool: True if successful

        Raises:
            ValueError: On unknown keys or invalid values
        """
        unknown = sorted(set(settings_dict) - set(DEFAULT_SETTINGS))
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")

        source = settings_dict.get("display_source")
        if source is not None and source not in DISPLAY_SOURCES:
            raise ValueError(
                f"display_source must be one of {', '.join(DISPLAY_SOURCES)}"
            )
        for key in ("debounce_ms", "command_timeout_seconds", "api_port"):
            value = settings_dict.get(key)
            if value is not None and (
                isinstance(value, bool)
                or not isinstance(value, (int, float))
                or value < 0
            ):
                raise ValueError(f"{key} must be a non-negative number")

        log_dir = settings_dict.get("log_dir")
        if log_dir is not None and not isinstance(log_dir, str):
            raise ValueError("log_dir must be a path or null")

        self.config.setdefault("settings", {}).update(settings_dict)
        self.save_config()
        self.logger.info(f"Settings updated: {settings_dict}")
        return True

    def get_setting(self, key, default=None):
        """Get a specific setting value.

        Args:
            key (str): Setting key
            default: Default value if key doesn't exist

        Returns:
            The setting value or default
        """
        settings = self.get_settings()
        return settings.get(key, default)
