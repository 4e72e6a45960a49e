# zeekit

Building blocks for a text editor: a text buffer, cursors that move by
grapheme cluster, an undo tree, CSS-like highlighting rules, and tools that
fetch and compile tree-sitter grammars.

## What is in it

- `zeekit.text.Rope` is a mutable text buffer. You can convert between char,
  byte and line indices, slice it, insert text and remove ranges.
- `zeekit.graphemes` finds extended grapheme cluster boundaries
  (`prev_grapheme_boundary`, `next_grapheme_boundary`) and yields clusters
  with their byte spans (`rope_graphemes`). It also measures display width,
  counting tabs as a given width (`width`), and removes trailing whitespace and
  trailing blank lines (`strip_trailing_whitespace`).
- `zeekit.diff` defines `OpaqueDiff`, which records where an edit happened and
  its size in bytes and chars, and `DeleteOperation`.
- `zeekit.cursor.Cursor` inserts and deletes characters, deletes lines and
  selections, manages a selection anchor, and adjusts itself after edits
  (`reconcile`, `sync`). Every edit returns an `OpaqueDiff` or a
  `DeleteOperation`.
- `zeekit.movement` moves a cursor by grapheme, line, word or paragraph, and
  to the start or end of a line or of the buffer. It takes a `Direction` of
  `FORWARD` or `BACKWARD`.
- `zeekit.tree.EditTree` keeps branching revisions, with `undo`, `redo`,
  `next_child` and `previous_child`. `format_tree` returns a layout position
  for each revision, which you can use to draw the tree.
- `zeekit.selector` parses selectors such as `pair > string:nth-child(0)`.
  Several selectors can be joined with commas, and node kinds can be quoted.
- `zeekit.highlight` reads JSON rule files that map selectors to scopes
  (`parse_rules`, `RawHighlightRules`). It finds the scope for a stack of
  syntax tree nodes (`HighlightRules.matches`).
- `zeekit.config` and `zeekit.mode` describe editing modes: filename patterns,
  indentation, comment token and grammar source. `ModeConfig.from_dict` builds
  a mode from decoded configuration data and rejects unknown fields.
- `zeekit.git` runs `git` commands. `zeekit.builder` checks grammars out from
  git, installs their query files and compiles them into shared libraries.
- `zeekit.clipboard.create()` returns an in-memory clipboard that threads can
  share.

## Installation

```
pip install zeekit
```

## Example

```python
from zeekit.cursor import Cursor
from zeekit.movement import Direction, move_horizontally
from zeekit.text import Rope
from zeekit.tree import EditTree

text = Rope("Hello world!\n")
cursor = Cursor()
move_horizontally(text, cursor, Direction.FORWARD, 5)
cursor.insert_char(text, ",")
print(str(text))  # Hello, world!

tree = EditTree(Rope(""))
diff = Cursor().insert_chars(tree.staged_mut(), "first draft")
tree.create_revision(diff, Cursor.end_of_buffer(tree.staged()))
tree.undo()
print(repr(str(tree.staged())))  # ''
```

Highlighting rules are compiled against a language's node kind names. The
name at position `i` in the list is the name of node kind id `i`:

```python
from zeekit.highlight import parse_rules

rules = parse_rules(
    ["source_file", "identifier"],
    '{"name": "Demo", "scopes": {"identifier": "variable",'
    ' "source_file > identifier": "variable.top"}}',
)
identifier = rules.get_selector_node_id(1)
source_file = rules.get_selector_node_id(0)
print(rules.matches([identifier, source_file], [0, 0], "x"))
# Scope(name='variable.top')
```

## Grammars and configuration

`zeekit.builder` keeps its files under the directory returned by
`zeekit.config.config_dir()`. That directory is taken from the
`ZEE_CONFIG_DIR` environment variable when it is set. Otherwise it is a `zee`
directory inside the user's configuration directory.

Building a grammar needs `git` and a C/C++ compiler. The compiler is the one
named by the `CXX` environment variable, or else `c++` (`cl.exe` on Windows).
`fetch_and_build_tree_sitter_parsers` builds the grammars of several modes in
parallel.

## What it does not do

- It does not load compiled grammars, parse text or run tree-sitter queries.
  To use highlighting rules you supply the node kind names and node stacks
  yourself.
- It has no screen, key bindings or command-line program. It is a library.
- The clipboard lives inside the process. It does not reach the system
  clipboard.

## Running the tests

```
pip install -e .[test]
pytest
```