"""Which condition templates and keys are safe.

Shared by write-time validation of stored conditions and by the runtime
interpolator, so a template accepted on create is one the interpolator renders.
"""

import re
from collections.abc import Iterator
from typing import Any

DANGEROUS_KEYS = frozenset(
    {
        "__proto__",
        "constructor",
        "prototype",
        "__class__",
        "__dict__",
        "__globals__",
        "__builtins__",
        "__subclasses__",
        "__init__",
        "__mro__",
    }
)
DISALLOWED_VARIABLES = frozenset({"process.env", "os.environ"})
# Parsed as constants by the template engine, never looked up in the context.
RESERVED_NAMES = frozenset({"true", "false", "none", "True", "False", "None"})

_PLACEHOLDER = re.compile(r"\{\{(.*?)\}\}", re.DOTALL)
_DOTTED_NAME = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*(?:\.[A-Za-z_][A-Za-z0-9_]*)*$")
_TRAVERSAL = ("..", "/", "\\")
_CALL_OR_SUBSCRIPT = ("(", ")", "[", "]")


def template_errors(template: str) -> list[str]:
    """Reasons a condition template is unsafe to render; empty when it is fine."""
    errors: list[str] = []
    if "{%" in template or "{#" in template:
        errors.append("Template statements and comments are not allowed")
    for match in _PLACEHOLDER.finditer(template):
        variable = match.group(1).strip()
        if variable in DISALLOWED_VARIABLES or any(
            variable.startswith(f"{name}.") for name in DISALLOWED_VARIABLES
        ):
            errors.append(f"Unauthorized template variable: {variable}")
        if any(seq in variable for seq in _TRAVERSAL):
            errors.append(f"Invalid template variable format: {variable}")
        if any(ch in variable for ch in _CALL_OR_SUBSCRIPT):
            errors.append(
                f"Template variable cannot contain function calls or array access: {variable}"
            )
        if not _DOTTED_NAME.match(variable):
            errors.append(f"Template variable must be a dotted name: {variable}")
        elif any(part in DANGEROUS_KEYS for part in variable.split(".")):
            errors.append(f"Dangerous template variable: {variable}")
        elif variable.split(".")[0] in RESERVED_NAMES:
            errors.append(f"Reserved template variable: {variable}")
    return errors


def validate_template_variables(template: str) -> bool:
    """True when every ``{{...}}`` placeholder is a plain, allowed variable path."""
    return not template_errors(template)


def _strings(value: Any) -> Iterator[str]:
    if isinstance(value, str):
        yield value
    elif isinstance(value, list):
        for item in value:
            yield from _strings(item)
    elif isinstance(value, dict):
        for item in value.values():
            yield from _strings(item)


def invalid_condition_templates(conditions: Any) -> list[str]:
    """Templated string leaves of a condition tree that fail validation."""
    return [s for s in _strings(conditions) if "{{" in s and template_errors(s)]
