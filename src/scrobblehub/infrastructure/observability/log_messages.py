"""Structured log message templates for source resolution diagnostics.

Hey future me - config problems are the #1 support question! Instead of
"Source was not added", the pass logs things like:

    ⚠️ Source configs have naming conflicts
    ├─ Name: unnamed
    ├─ Conflicts: Config object from ENV of type [subsonic], Config object from subsonic.json of type [subsonic]
    └─ 💡 Names will be suffixed with their position (unnamed1, unnamed2)

Principles:
1. **Icon First** - Visual marker for quick scanning (🔴 = error, ⚠️ = warning, ✅ = success)
2. **Action/Entity** - What failed/succeeded
3. **Context** - Source name, type, origin file
4. **Hints** - Actionable troubleshooting steps

Usage:
    from scrobblehub.infrastructure.observability.log_messages import LogMessages

    logger.warning(LogMessages.naming_conflict(name="home", origins=[...]))
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any


@dataclass
class LogTemplate:
    """A reusable log message template with placeholders.

    The format() method replaces {placeholders} with actual values and adds
    visual formatting (icons, tree structure, hints).
    """

    icon: str
    title: str
    fields: dict[str, str]
    hint: str | None = None

    def format(self, **kwargs: Any) -> str:
        """Format the template with provided values.

        Args:
            **kwargs: Values to fill into template placeholders

        Returns:
            Formatted multi-line log message with icon, title, fields, and optional hint
        """
        lines = [f"{self.icon} {self.title}"]

        field_items = list(self.fields.items())
        for i, (key, value_template) in enumerate(field_items):
            # Last field uses └─ instead of ├─
            prefix = "└─" if i == len(field_items) - 1 and not self.hint else "├─"
            try:
                value = value_template.format(**kwargs)
            except (KeyError, IndexError) as e:
                value = f"<missing: {e}>"
            lines.append(f"{prefix} {key}: {value}")

        if self.hint:
            try:
                hint_text = self.hint.format(**kwargs)
            except (KeyError, IndexError) as e:
                hint_text = f"<missing: {e}>"
            lines.append(f"└─ 💡 {hint_text}")

        return "\n".join(lines)


def _literal(value: Any) -> str:
    # Values land in str.format() templates; user data may contain braces.
    return str(value).replace("{", "{{").replace("}", "}}")


class LogMessages:
    """Collection of standardized log message templates.

    Template categories:
    - Config files (parse errors, deprecated shapes)
    - Config entries (structural errors, naming conflicts)
    - Source lifecycle (construct/init/auth)
    - Connection checks
    """

    # === Config Files ===

    @staticmethod
    def config_file_unparsable(path: str, error: str | None = None) -> str:
        """Format a per-type file parse failure.

        Args:
            path: File that failed to parse
            error: Parser error message
        """
        fields = {"File": _literal(path)}
        if error:
            fields["Reason"] = _literal(error)
        return LogTemplate(
            icon="🔴",
            title=f"{path} config file could not be parsed",
            fields=fields,
            hint="Validate the file with a JSON linter. Sources from this file are skipped.",
        ).format()

    @staticmethod
    def config_deprecated_shape(path: str) -> str:
        """Format the warning for legacy single-object [type].json files."""
        return LogTemplate(
            icon="⚠️",
            title="DEPRECATED: configurations in all [type].json files must be in an array",
            fields={"File": _literal(path)},
            hint="Wrap the object in [ ] to silence this warning.",
        ).format()

    # === Config Entries ===

    @staticmethod
    def config_entry_invalid(label: str, errors: Sequence[str]) -> str:
        """Format a structural validation failure for one entry.

        Args:
            label: Entry description (origin, name, type)
            errors: Individual problems found
        """
        return LogTemplate(
            icon="🔴",
            title="Source config has structural errors and will not be used",
            fields={"Entry": _literal(label), "Errors": _literal(" | ".join(errors))},
        ).format()

    @staticmethod
    def naming_conflict(name: str, origins: Sequence[str]) -> str:
        """Format the duplicate name warning for one (type, name) group.

        Args:
            name: Shared name
            origins: One description per conflicting entry
        """
        fields = {"Name": _literal(name)}
        for i, origin in enumerate(origins, start=1):
            fields[f"#{i}"] = _literal(origin)
        return LogTemplate(
            icon="⚠️",
            title=f'Source configs have naming conflicts -- the following configs have the same name "{name}"',
            fields=fields,
            hint=f"Names will be suffixed with their position ({_literal(name)}1, {_literal(name)}2, ...)",
        ).format()

    @staticmethod
    def unnamed_hint() -> str:
        """Explain where "unnamed" configs come from."""
        return (
            'HINT: "unnamed" configs occur when using ENVs, if a multi-user mode config '
            'does not have a "name" property, or if a config is built in single-user mode'
        )

    # === Source Lifecycle ===

    @staticmethod
    def source_not_added(name: str, source_type: str, error: str) -> str:
        """Format the message for an entry dropped during construction."""
        return LogTemplate(
            icon="🔴",
            title=f"Source {name} of type {source_type} was not added because of unrecoverable errors",
            fields={"Reason": _literal(error)},
        ).format()

    @staticmethod
    def source_init_failed(name: str, source_type: str, reason: str | None = None) -> str:
        """Format an initialization failure (source excluded)."""
        fields = {"Source": f"{_literal(source_type)} / {_literal(name)}"}
        if reason:
            fields["Reason"] = _literal(reason)
        return LogTemplate(
            icon="❌",
            title=f"({name}) {source_type} source failed to initialize",
            fields=fields,
            hint="Source needs to be successfully initialized before activity capture can begin.",
        ).format()

    @staticmethod
    def source_auth_failed(name: str, source_type: str, reason: str | None = None) -> str:
        """Format an authentication failure (source still registered)."""
        fields = {"Source": f"{_literal(source_type)} / {_literal(name)}"}
        if reason:
            fields["Reason"] = _literal(reason)
        return LogTemplate(
            icon="⚠️",
            title=f"({name}) {source_type} source auth failed.",
            fields=fields,
            hint="The source stays registered but will not capture activity until auth succeeds.",
        ).format()

    @staticmethod
    def sources_built(registered: int, total: int) -> str:
        """Format the resolution pass summary."""
        icon = "✅" if registered == total else "⚠️"
        return LogTemplate(
            icon=icon,
            title="Source resolution complete",
            fields={"Registered": str(registered), "Configured": str(total)},
        ).format()

    # === Connection Checks ===

    @staticmethod
    def connection_failed(
        service: str,
        target: str,
        error: str | None = None,
        hint: str | None = None,
    ) -> str:
        """Format a connection failure message.

        Args:
            service: Service name (e.g., "Subsonic")
            target: Connection target (URL)
            error: Error message from exception
            hint: Custom troubleshooting hint
        """
        fields = {"Service": _literal(service), "Target": _literal(target)}
        if error:
            fields["Reason"] = _literal(error)

        return LogTemplate(
            icon="🔴",
            title=f"{service} Connection Failed",
            fields=fields,
            hint=_literal(hint) if hint else f"Check if {_literal(service)} is running and accessible",
        ).format()
