"""Host commands: region actions plus core argument, mark, and quit commands."""

from .core import (
    digit_argument,
    exchange_point_and_mark,
    keyboard_quit,
    negative_argument,
    set_mark_command,
    undefined,
    universal_argument,
)
from .regions import (
    DEFAULT_REGION_ACTIONS,
    RegionAction,
    capitalize_region,
    comment_or_uncomment_region,
    copy_region,
    delete_region,
    downcase_region,
    indent_region,
    kill_region,
    region_command,
    upcase_region,
)

__all__ = [
    "DEFAULT_REGION_ACTIONS",
    "RegionAction",
    "capitalize_region",
    "comment_or_uncomment_region",
    "copy_region",
    "delete_region",
    "digit_argument",
    "downcase_region",
    "exchange_point_and_mark",
    "indent_region",
    "keyboard_quit",
    "kill_region",
    "negative_argument",
    "region_command",
    "set_mark_command",
    "undefined",
    "universal_argument",
    "upcase_region",
]
