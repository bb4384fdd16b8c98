# mdtome

`mdtome` turns a directory of Markdown files into an in-memory book. The
layout of the book comes from a `SUMMARY.md` outline; the chapters come from
the files it links to. On top of that it works out which renderers and
preprocessors a book's configuration asks for, and in what order the
preprocessors should run.

## The SUMMARY.md outline

```markdown
# Summary

[Introduction](./intro.md)

# Part One

- [Getting started](./start.md)
    - [Installing](./install.md)
- [Draft chapter]()

---

[Appendix](./appendix.md)
```

* An optional `# Title` heading comes first; HTML comments before it are skipped.
* Plain links before the first list are *prefix* chapters; they are not numbered.
* List items are *numbered* chapters. Nested lists give nested section numbers
  (`1.`, `1.1.`, `2.` ...), and numbering carries on across separators (`---`)
  and across parts introduced by further `#` headings, which become
  `PartTitle` items.
* Plain links after the numbered chapters are *suffix* chapters. A list after
  the suffix chapters is an error.
* A link with an empty target, such as `[Draft chapter]()`, is a draft chapter
  with no file behind it (its `location` is `None`).
* `%20` in a link target is read as a space.

## Parsing an outline

```python
from mdtome.summary_parser import parse_summary, SummaryParseError

with open("src/SUMMARY.md", encoding="utf-8") as fh:
    summary = parse_summary(fh.read())

print(summary.title)
for item in summary.all_items():
    print(item)
```

`parse_summary` returns a `mdtome.summary.Summary` holding `Link`,
`Separator` and `PartTitle` items. Malformed outlines raise
`SummaryParseError`, with the line and column of the problem in the message.
A `SectionNumber` prints in dotted form, for example `1.2.`.

## Loading a book

```python
from mdtome.book import load_book, Chapter

book = load_book("src", create_missing=True)

for item in book.iter():
    if isinstance(item, Chapter):
        print(item, "(draft)" if item.is_draft_chapter() else item.path)
```

`load_book` reads `SUMMARY.md` from the given source directory and every
chapter it names. With `create_missing=True` (the default), chapter files that
do not exist yet are created with a heading holding the chapter's name. A
leading UTF-8 byte order mark is stripped from chapter contents. A missing
`SUMMARY.md`, a malformed outline, or missing or unreadable chapters raise
`BookError`.

`Book.iter()` (also used by iterating over the book) walks it depth first,
each chapter before its sub-items; `Book.for_each_mut(func)` calls `func` on
every item, children before their parent, so chapters can be changed in
place. `Book.push_item` appends a top-level item. `Chapter.draft(name)` makes
a chapter with no file.

## Planning renderers and preprocessors

The configuration is a mapping shaped like a parsed `book.toml`:

```python
import tomllib

from mdtome.pipeline import determine_preprocessors, determine_renderers
from mdtome.selection import preprocessor_should_run

with open("book.toml", "rb") as fh:
    config = tomllib.load(fh)

renderers = determine_renderers(config)
preprocessors = determine_preprocessors(config)

for renderer in renderers:
    for pre in preprocessors:
        if preprocessor_should_run(pre, renderer.name, config):
            print(f"{pre.name} runs before {renderer.name}")
```

* Without an `[output]` table the HTML renderer is used. Output tables other
  than `html` and `markdown` name external commands, taken from their `command`
  key or defaulting to `mdtome-<name>`. Renderers come back sorted by name.
* The built-in `links` and `index` preprocessors are enabled unless
  `build.use-default-preprocessors` is false. Tables under `[preprocessor]`
  add more, with `before` and `after` lists controlling their order; names in
  those lists that are not configured are ignored with a warning. Ties are
  broken by name, malformed `before`/`after` values and cyclic orderings raise
  `PipelineError`.
* `preprocessor.<name>.renderers` restricts a preprocessor to the listed
  renderers. Otherwise built-in preprocessors support every renderer, and an
  external one is asked by running `<command> supports <renderer>`: exit
  status zero means supported.

`mdtome.selection.build_dir_for(root, build_dir, renderer_count, backend_name)`
gives the output directory for a renderer: the build directory itself when
there is at most one renderer, a sub-directory named after the renderer when
there are several.

## A do-nothing preprocessor

`mdtome.nop.NopPreprocessor` hands the book back unchanged from
`run(config, book)`. It supports every renderer except one named
`not-supported`, and raises `RuntimeError` when its own configuration table
(`preprocessor.nop-preprocessor`) contains a `blow-up` key. It is a useful
starting point and test double for preprocessors of your own.

## What it does not do

`mdtome` is a library only: it has no command-line program. It loads books
and plans the pipeline, but it does not render output (HTML or otherwise),
does not run the preprocessors it selects, does not read `book.toml` itself,
and has no development server or file watcher.