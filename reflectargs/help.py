"""
Reflectargs help renderer.

Help(command).lines() formats a command's metadata into plain text lines:

    git remote add - Add a remote

    usage: git remote add [--fetch=<bool>, --fetch] [--help] <name> <url>

    Arguments:
      <name> (string)          name of the remote
      <url> (string)

    Options:
      --fetch=<bool>, --fetch  fetch right away (default: false)
      --help                   Show this help text

Sections without entries are left out; commands with children end with a
"Commands:" block and a pointer to the children's help. Labels of every block
share one left column, sized to the longest label plus two spaces.
"""
import enum


def _format(value):
    """
    Render a default value the way it would be typed on the command line.
    """
    if value is None:
        return "none"
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, enum.Enum):
        return value.name
    return str(value)


class Help:
    """
    Pure formatter over one command; show() emits the lines through the
    command's settings.log_info sink.
    """

    def __init__(self, command, /):
        self.command = command

    def _options(self):
        """
        Yield (label, description) for every option, sorted by identifier.
        """
        for parameter in sorted(self.command.named, key=lambda x: x.name):
            label = "--%s=<%s>" % (parameter.display, parameter.typename)
            if parameter.flag:
                label += ", --%s" % parameter.display
            if parameter.many:
                label += ", ..."
                annotation = "(accepts many, default: none)"
            else:
                annotation = "(default: %s)" % _format(parameter.default)
            yield label, " ".join(filter(None, (parameter.descr, annotation)))
        if self.command.settings.auto_help:
            yield "--help", "Show this help text"

    def _arguments(self):
        for parameter in self.command.positionals:
            if parameter.many:
                label = "<%s> (one or more %s)" % (parameter.display, parameter.typename)
            else:
                label = "<%s> (%s)" % (parameter.display, parameter.typename)
            yield label, parameter.descr

    def _commands(self):
        for child in self.command.children:
            yield child.name, child.descr

    def usage(self):
        """
        Return the one-line usage summary (without the "usage: " prefix).
        """
        command = self.command
        parts = [command.fullname]
        parts.extend("[%s]" % label for label, _ in self._options())
        for parameter in command.positionals:
            parts.append("<%s> (...)" % parameter.display if parameter.many else "<%s>" % parameter.display)
        if command.children:
            parts.append("(<command>)" if command.bound else "<command>")
        return " ".join(parts)

    def lines(self):
        """
        Return the help text as a list of lines (no trailing blank lines).
        """
        command = self.command
        arguments = list(self._arguments())
        options = list(self._options())
        commands = list(self._commands())

        width = max(map(len, (label for label, _ in arguments + options + commands)), default=0) + 2

        def block(title, entries):
            if not entries:
                return []
            return [title] + [f"  {label.ljust(width)}{descr}".rstrip() for label, descr in entries] + [""]

        lines = [command.fullname + (" - " + command.descr if command.descr else ""), ""]
        lines += ["usage: " + self.usage(), ""]
        lines += block("Arguments:", arguments)
        lines += block("Options:", options)
        lines += block("Commands:", commands)
        if commands:
            lines.append("Run '%s [command] --help' for more information on a command." % command.fullname)

        while lines and not lines[-1]:
            lines.pop()
        return lines

    def show(self):
        for line in self.lines():
            self.command.settings.log_info(line)


__all__ = (
    "Help",
)
