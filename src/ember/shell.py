"""Interactive mode for the Ember interpreter. Uses cmd as backend."""

import cmd
import sys

from .runtime import run_source


class Shell(cmd.Cmd):
    """
    Ember interpreter shell.

    Each line is an independent program: it is lexed, parsed and run with a
    fresh environment, so variables do not carry over between lines.
    """
    intro = "Ember interpreter\nType 'help' for more information, 'exit' or Ctrl-D to leave."
    prompt = "> "
    COMMANDS = ("help", "exit", "EOF")

    def __init__(self, stdin=None, stdout=None, stderr=None, max_errors: int = 20):
        super().__init__(stdin=stdin, stdout=stdout)
        if stdin is not None:
            self.use_rawinput = False
        self.stderr = stderr if stderr is not None else sys.stderr
        self.max_errors = max_errors
        self.line_num = 0
        self.failures = 0

    def onecmd(self, line):
        """Only a bare command word is a shell command; anything else is source."""
        command = line.strip()
        if not command:
            return self.emptyline()
        if command in self.COMMANDS:
            return super().onecmd(command)
        return self.default(line)

    def default(self, line):
        """Runs one line of Ember source."""
        self.line_num += 1
        result = run_source(line, output=self.stdout, filename="<stdin>",
                            max_errors=self.max_errors)
        if not result.success:
            self.failures += 1
            for error_line in result.error_lines():
                print(error_line, file=self.stderr)

    def do_help(self, arg):
        """Short introduction instead of per-command docs."""
        print("Ember statements:\n"
              "  var name = expression;   declare a variable\n"
              "  print expression;        print a value\n"
              "  { ... }                  block with its own scope\n"
              "  name = expression;       assign to a declared variable\n\n"
              "Each line runs on its own; declarations do not persist.", file=self.stdout)

    def emptyline(self):
        """Do not repeat previous command on empty line."""
        return False

    def do_EOF(self, arg):
        """Exits interpreter."""
        print(file=self.stdout)
        return self.do_exit(arg)

    def do_exit(self, arg):
        """Exits interpreter."""
        return True
