from enum import Enum


class CliColor(str, Enum):
    """CLI color scheme"""

    SUCCESS = "green"
    ERROR = "red"
    WARNING = "yellow"
    INFO = "blue"
    HEADER = "cyan"
    ADDRESS = "bright_blue"
    HASH = "bright_black"
    PROGRESS = "yellow"
    NEUTRAL = "white"
    VALUE = "bright_magenta"

    # Proposal states
    PENDING = "bright_yellow"
    EXECUTED = "bright_green"
    CANCELLED = "bright_red"
    EXPIRED = "bright_black"
