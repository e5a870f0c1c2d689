import json
import os

from loguru import logger
from pydantic import ValidationError

from streamfile.settings.models import AppModel

ENV_PREFIX = "STREAMFILE"


class SettingsManager:
    """Class that builds settings from defaults and environment, validated against a Pydantic schema."""

    def __init__(self, prefix: str = ENV_PREFIX):
        self.prefix = prefix
        self.load()

    def check_environment(self, settings, prefix="", seperator="_"):
        checked_settings = {}
        for key, value in settings.items():
            if isinstance(value, dict):
                sub_checked_settings = self.check_environment(
                    value, f"{prefix}{seperator}{key}"
                )
                checked_settings[key] = sub_checked_settings
            else:
                environment_variable = f"{prefix}_{key}".upper()
                if os.getenv(environment_variable, None):
                    new_value = os.getenv(environment_variable)
                    if isinstance(value, bool):
                        checked_settings[key] = (
                            new_value.lower() == "true" or new_value == "1"
                        )
                    elif isinstance(value, int):
                        checked_settings[key] = int(new_value)
                    elif isinstance(value, float):
                        checked_settings[key] = float(new_value)
                    else:
                        checked_settings[key] = new_value
                else:
                    checked_settings[key] = value
        return checked_settings

    def load(self, settings_dict: dict | None = None):
        """Load settings from a dict or the environment, validating against the AppModel schema."""
        try:
            if settings_dict is None:
                defaults = json.loads(AppModel().model_dump_json())
                settings_dict = self.check_environment(defaults, self.prefix)
            self.settings = AppModel.model_validate(settings_dict)
        except ValidationError as e:
            formatted_error = format_validation_error(e)
            logger.error(f"Settings validation failed:\n{formatted_error}")
            raise
        except ValueError as e:
            logger.error(f"Error parsing environment settings: {e}")
            raise


def format_validation_error(e: ValidationError) -> str:
    """Format validation errors in a user-friendly way"""
    messages = []
    for error in e.errors():
        field = ".".join(str(x) for x in error["loc"])
        message = error.get("msg")
        messages.append(f"• {field}: {message}")
    return "\n".join(messages)


settings_manager = SettingsManager()
