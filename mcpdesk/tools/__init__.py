from .config import load_servers_config, parse_server_config, server_from_dict
from .arguments import coerce_argument, validate_arguments

__all__ = [
    "load_servers_config",
    "parse_server_config",
    "server_from_dict",
    "coerce_argument",
    "validate_arguments",
]
