"""Message template rendering and output formatting."""

import json
import os
import re
import traceback
from collections.abc import Mapping
from typing import Any

from logrouter.core.models import LogEvent, LogLevel

DEFAULT_OUTPUT_TEMPLATE = (
    "{timestamp:%Y-%m-%d %H:%M:%S} [{level}]<{thread_id}> "
    "[{source_context}] {message}{newline}{exception}"
)

# {{ | }} | {name} | {@name} | {$name} | {name:spec}
_TOKEN = re.compile(
    r"\{\{|\}\}|\{(?P<hint>[@$]?)(?P<name>[A-Za-z_][A-Za-z0-9_.]*)(?::(?P<spec>[^{}]*))?\}"
)


def _render_value(value: Any, hint: str, spec: str | None) -> str:
    if hint == "@":
        return json.dumps(value, default=str, ensure_ascii=False)
    if hint == "$":
        return str(value)
    if spec:
        try:
            return format(value, spec)
        except (TypeError, ValueError):
            return str(value)
    if isinstance(value, str):
        return value
    if value is None:
        return "null"
    if isinstance(value, Mapping):
        return json.dumps(dict(value), default=str, ensure_ascii=False)
    if isinstance(value, (list, tuple)):
        return json.dumps(value, default=str, ensure_ascii=False)
    return str(value)


def render_message(template: str, args: Mapping[str, Any]) -> str:
    """Substitute named placeholders in a message template.

    Strings render literally and structured values as JSON. A ``@`` hint
    forces JSON, a ``$`` hint forces ``str()``. Placeholders with no
    matching argument are left untouched; ``{{`` and ``}}`` are escapes.

    Args:
        template: Message template, e.g. ``"Processed {count} items"``.
        args: Values keyed by placeholder name.

    Returns:
        The rendered message.
    """

    def substitute(match: re.Match[str]) -> str:
        token = match.group(0)
        if token == "{{":
            return "{"
        if token == "}}":
            return "}"
        name = match.group("name")
        if name not in args:
            return token
        return _render_value(args[name], match.group("hint"), match.group("spec"))

    return _TOKEN.sub(substitute, template)


def escape_template(text: str) -> str:
    """Escape braces so ``text`` renders verbatim as a message template."""
    return text.replace("{", "{{").replace("}", "}}")


def format_exception(exception: BaseException | None) -> str:
    """Render an exception with its traceback, or an empty string."""
    if exception is None:
        return ""
    lines = traceback.format_exception(
        type(exception), exception, exception.__traceback__
    )
    return "".join(lines).replace("\n", os.linesep)


def format_event(event: LogEvent, template: str = DEFAULT_OUTPUT_TEMPLATE) -> str:
    """Apply an output template to an event.

    Available fields: ``timestamp`` (local datetime), ``level`` (4 char
    abbreviation), ``level_name``, ``thread_id``, ``source_context``,
    ``message``, ``message_template``, ``properties`` (JSON), ``newline``
    and ``exception`` (traceback text, empty when absent).
    """
    return template.format(
        timestamp=event.local_time,
        level=event.level.abbreviation,
        level_name=event.level.name,
        thread_id=event.thread_id,
        source_context=event.source_context,
        message=render_message(event.message_template, event.args),
        message_template=event.message_template,
        properties=json.dumps(dict(event.properties), default=str, ensure_ascii=False),
        newline=os.linesep,
        exception=format_exception(event.exception),
    )


def validate_template(template: str) -> None:
    """Check an output template against a sample event.

    Raises:
        ValueError: If the template references unknown fields or is malformed.
    """
    sample = LogEvent(
        timestamp=86400.0,
        level=LogLevel.INFORMATION,
        source_context="",
        message_template="",
    )
    try:
        format_event(sample, template)
    except (KeyError, IndexError, ValueError, AttributeError) as e:
        raise ValueError(f"Invalid output template {template!r}: {e}") from e
