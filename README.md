# tinyshell

A small command shell library. It takes a command line, splits it into
words and operators, expands `$VARIABLES` and `$?`, checks the syntax,
groups the words into commands joined by pipes, and runs them. Builtins run
in the shell itself; everything else is looked up on `PATH` and started as
a separate program.

## What it understands

- Words, `"double quoted"` and `'single quoted'` text. Single-quoted text is
  not expanded. Adjacent words with no space between them are joined.
- `$NAME` expansion from the environment and `$?` for the last exit status.
  Only the first reference that resolves in a word is expanded; a reference
  that cannot be resolved is left as written.
- Pipelines: `cmd1 | cmd2 | cmd3`. The status of a pipeline is that of its
  last stage.
- Redirections: `< file`, `> file`, `>> file` and here-documents `<< END`.
  A quoted here-document delimiter turns off expansion inside the body.
- Builtins: `cd`, `pwd`, `env`, `echo` (with `-n`), `export`, `unset`
  and `exit`.

Misplaced operators, such as a dangling pipe or a redirection with no file
name, are reported as `minishell: syntax error near unexpected token` and
set the status to 2. A command that cannot be found on `PATH` is reported
as `command not found` with status 127.

## Using it from Python

```python
import sys

from tinyshell.environment import Environment
from tinyshell.executor import Executor

env = Environment({"PATH": "/usr/bin:/bin", "HOME": "/tmp"})
shell = Executor(env, sys.stdout, sys.stderr)
shell.run_line("export GREETING=hello")
shell.run_line("echo $GREETING world | tr a-z A-Z")
print(shell.status)
```

`Executor()` with no environment starts from a copy of `os.environ`.
`Executor.run_line(line, reader)` lexes, parses and runs one line and
returns its status, which is also kept in `Executor.status`. The optional
`reader` is called with the prompt `"> "` to fetch here-document lines and
returns a line, or `None` at end of input; without one, lines are read with
`input()`.

A lone `exit` raises `tinyshell.builtins.ShellExit`, whose `code` is the
exit status the caller should end with. Inside a pipeline, builtins work on
a copy of the environment and `exit` does not end the shell.

The stages can also be used on their own:

```python
from tinyshell.lexer import lex
from tinyshell.parser import parse

tokens = lex("cat < notes.txt | grep todo > out.txt", env.to_envp(), 0)
commands = parse(tokens)
for command in commands:
    print(command.cmd, command.args, command.redirections)
```

`lex` and `parse` raise `tinyshell.errors.ShellSyntaxError` on misplaced
operators; its `token` attribute holds the offending token.

`Environment` keeps variables in insertion order; `export` without
arguments lists them sorted by name, and `env` prints only those that have
a value.

## What it does not do

The package has no command to run and no interactive prompt of its own:
there is no line editing or history. A prompt loop is left to the caller,
for example:

```python
from tinyshell.builtins import ShellExit
from tinyshell.executor import install_prompt_signals

install_prompt_signals()  # ignore SIGQUIT, SIGINT raises KeyboardInterrupt
while True:
    try:
        line = input("minishell$ ")
    except EOFError:
        break
    except KeyboardInterrupt:
        print()
        continue
    try:
        shell.run_line(line)
    except ShellExit as exc:
        sys.exit(exc.code)
```

There is no globbing, no `&&`/`||`, no `;`, no subshells and no job control.

## Running the tests

Install the package together with its `test` extra and run `pytest` from
the project directory.