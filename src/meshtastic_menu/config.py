"""Configuration handling for the Meshtastic Menu Server."""

from dataclasses import dataclass
from pathlib import Path
import yaml

from .core.menu_renderer import RenderSettings


@dataclass
class Config:
    """Configuration settings for the menu server.

    Attributes:
        menu_file: YAML file describing the menu tree.
        channel_limit: Maximum characters per message.
        separator: Token placed between lines of a page.
        exit_enabled: Whether pages offer "0.Exit".
        default_page_size: Items per page unless a node overrides it.
        multi_select_delimiter: Separator between multi-selected items.
        connection_type: Meshtastic connection type (serial, ble, tcp).
        device: Device path, BLE address, or hostname.
        session_timeout_minutes: Session inactivity timeout.
    """

    menu_file: str = "~/menu.yaml"
    channel_limit: int = 230
    separator: str = "\n"
    exit_enabled: bool = True
    default_page_size: int = 5
    multi_select_delimiter: str = ","
    connection_type: str = "serial"
    device: str | None = None
    session_timeout_minutes: int = 5

    def get_menu_path(self) -> Path:
        """Get menu file as expanded Path object."""
        return Path(self.menu_file).expanduser()

    def render_settings(self) -> RenderSettings:
        """Get the settings passed to the menu renderer."""
        return RenderSettings(
            channel_limit=self.channel_limit,
            separator=self.separator,
            exit_enabled=self.exit_enabled,
            default_page_size=self.default_page_size,
        )


def load_config(path: str | Path) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Config object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    # Extract sections
    menu = data.get("menu", {})
    meshtastic = data.get("meshtastic", {})
    session = data.get("session", {})

    return Config(
        menu_file=menu.get("file", Config.menu_file),
        channel_limit=menu.get("channel_limit", Config.channel_limit),
        separator=menu.get("separator", Config.separator),
        exit_enabled=menu.get("exit_enabled", Config.exit_enabled),
        default_page_size=menu.get("default_page_size", Config.default_page_size),
        multi_select_delimiter=menu.get("multi_select_delimiter", Config.multi_select_delimiter),
        connection_type=meshtastic.get("connection_type", Config.connection_type),
        device=meshtastic.get("device", Config.device),
        session_timeout_minutes=session.get("timeout_minutes", Config.session_timeout_minutes),
    )
