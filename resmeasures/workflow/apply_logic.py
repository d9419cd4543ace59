"""
Apply logic strings for upgrade options and downselects.

The YAML form nests ``and``/``or``/``not`` mappings and lists of
``Parameter|Option`` strings; the argument form is a flat string using
``&&``, ``||`` and ``!``.

    >>> make_apply_logic_arg({"or": ["Vintage|1950s", "Vintage|1960s"]})
    '(Vintage|1950s||Vintage|1960s)'
"""

from typing import Any


def make_apply_logic_arg(logic: Any) -> str:
    """
    Convert YAML apply logic into its argument string.

    A list is a conjunction, ``{"and": [...]}`` is the same list, ``{"or": [...]}``
    a disjunction and ``{"not": x}`` a negation.

    Raises:
        ValueError: For an unknown operator or value type
    """
    if isinstance(logic, dict):
        if len(logic) != 1:
            raise ValueError(f"Apply logic mapping must have exactly one key, got {sorted(logic)}.")
        key, val = next(iter(logic.items()))
        if key == "and":
            return make_apply_logic_arg(val)
        if key == "or":
            return "(" + "||".join(make_apply_logic_arg(v) for v in val) + ")"
        if key == "not":
            return "!" + make_apply_logic_arg(val)
        raise ValueError(f"Unknown apply logic operator '{key}'.")
    if isinstance(logic, list):
        return "(" + "&&".join(make_apply_logic_arg(v) for v in logic) + ")"
    if isinstance(logic, str):
        return logic
    raise ValueError(f"Unsupported apply logic value: {logic!r}")
