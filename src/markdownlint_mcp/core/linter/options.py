"""
Tolerant readers for rule options.

Rule configuration comes straight from user files, so every accessor
falls back to the documented default instead of raising when a value has
the wrong type or is out of range.
"""
from typing import Any, Iterable, Optional


def rule_options(config: Any, identifier: str) -> dict:
    """
    Return the option dict for a rule.

    Anything that is not a dict (``True``, ``False``, missing, garbage)
    yields ``{}``. Aliases are resolved to identifiers before rules run.
    """
    if not isinstance(config, dict):
        return {}
    value = config.get(identifier)
    return value if isinstance(value, dict) else {}


def option_int(
    options: dict,
    key: str,
    default: int,
    minimum: Optional[int] = None,
    maximum: Optional[int] = None,
) -> int:
    value = options.get(key, default)
    # bool is an int subclass but never a sensible count
    if isinstance(value, bool) or not isinstance(value, int):
        return default
    if minimum is not None and value < minimum:
        return default
    if maximum is not None and value > maximum:
        return default
    return value


def option_bool(options: dict, key: str, default: bool) -> bool:
    value = options.get(key, default)
    return value if isinstance(value, bool) else default


def option_str(options: dict, key: str, default: str) -> str:
    value = options.get(key, default)
    return value if isinstance(value, str) else default


def option_choice(options: dict, key: str, choices: Iterable[str], default: str) -> str:
    """Like option_str, but only values from ``choices`` are accepted."""
    value = options.get(key, default)
    return value if isinstance(value, str) and value in tuple(choices) else default


def option_list(options: dict, key: str, default: list[str]) -> list[str]:
    """Return a list of strings, dropping non-string members."""
    value = options.get(key, default)
    if not isinstance(value, (list, tuple)):
        return list(default)
    return [v for v in value if isinstance(v, str)]
