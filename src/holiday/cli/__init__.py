"""
CLI commands for Holiday.
"""

from holiday.cli.transition import (
    handle_transition_command,
    register_transition_parsers,
    transition_command,
)
from holiday.cli.verify import handle_verify_command, register_verify_parser, verify_command
from holiday.cli.verify_mode import (
    handle_verify_mode_command,
    register_verify_mode_parser,
    verify_mode_command,
)

__all__ = [
    "transition_command",
    "register_transition_parsers",
    "handle_transition_command",
    "verify_command",
    "register_verify_parser",
    "handle_verify_command",
    "verify_mode_command",
    "register_verify_mode_parser",
    "handle_verify_mode_command",
]
