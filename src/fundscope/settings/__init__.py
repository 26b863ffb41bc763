from .environment import parse_env_bool, parse_env_float, parse_env_int, parse_env_str
from .settings import DEFAULT_API_URL, FundscopeSettings, load_settings

__all__ = [
    "DEFAULT_API_URL",
    "FundscopeSettings",
    "load_settings",
    "parse_env_bool",
    "parse_env_float",
    "parse_env_int",
    "parse_env_str",
]
