# exercisekit

A command-line runner for a set of small Rust programming exercises. Each
exercise is a source file that has to compile and, depending on its mode, pass
its tests or lints. While a file still contains an `I AM NOT DONE` marker
comment, it counts as pending. Once the marker is removed and the file
compiles, it counts as done.

The exercises are described in an `info.toml` file in the working directory.
Each `[[exercises]]` entry gives a `name`, a `path`, a `mode` (`compile`,
`test`, `clippy` or `buildscript`) and a `hint`. The compiler toolchain
(`rustc`, and `cargo` for the clippy and build-script modes) must be on your
`PATH`. Every command except `--version` stops with exit code 1 if
`info.toml` is missing or `rustc --version` cannot be run.

## Installation

```
pip install exercisekit
```

## Usage

Run every command from the directory that holds `info.toml`.

```
exercisekit                 # print the welcome text and a short introduction
exercisekit --version       # print the version
exercisekit watch           # re-verify the exercises whenever a file changes
exercisekit verify          # verify every exercise in order, stopping at the first failure
exercisekit run NAME        # compile and run (or test) one exercise
exercisekit run next        # run the first exercise that is not done yet
exercisekit hint NAME       # print the hint for an exercise
exercisekit reset NAME      # restore an exercise with "git stash -- <path>"
exercisekit list            # show every exercise with its path and status
exercisekit lsp             # write rust-project.json for rust-analyzer
exercisekit cicvverify      # grade every exercise and write a JSON report
```

`run`, `verify` and `reset` exit with code 1 when the exercise fails or cannot
be found. `--nocapture` (given before the command) shows the output of test
exercises:

```
exercisekit --nocapture run NAME
```

### Listing exercises

`exercisekit list` accepts the following options:

- `-p` / `--paths`: print only the paths
- `-n` / `--names`: print only the names
- `-f` / `--filter PATTERNS`: keep only exercises whose name or path contains
  one of the comma-separated patterns
- `-u` / `--unsolved`: keep only pending exercises
- `-s` / `--solved`: keep only finished exercises

The last line of the listing shows your overall progress.

### Watch mode

`exercisekit watch` verifies the exercises and then waits for changes to `.rs`
files under `./exercises`, re-verifying the changed exercise first and then
the remaining pending ones. At its prompt you can type:

- `hint`: show the hint for the current exercise
- `clear`: clear the screen
- `quit`: leave watch mode
- `!<cmd>`: run a command, for example `!rustc --explain E0381`
- `help`: list these commands

`exercisekit watch --success-hints` also shows the hint each time an exercise
succeeds.

### rust-analyzer support

`exercisekit lsp` collects every `.rs` file below `./exercises` and writes
`./rust-project.json`. The standard library sources are taken from the
`RUST_SRC_PATH` environment variable if it is set, otherwise from
`rustc --print sysroot`.

### Grading report

`exercisekit cicvverify` runs every exercise one after another and prints a
line for each one as it finishes. It then writes
`.github/result/check_result.json` (the directory must already exist) with a
`name`/`result` entry for each exercise, a `user_name` field (always `null`)
and `statistics` holding `total_exercations`, `total_succeeds`,
`total_failures` and `total_time` in seconds.

### Output

Set the `NO_EMOJI` environment variable to use plain characters in place of
emoji in status messages.

## Use from Python

The same steps are available as functions:

```python
from exercisekit.exercise import load_exercises
from exercisekit.verify import ExerciseFailed, verify
from exercisekit.cicv import cicv_verify

exercises = load_exercises("info.toml")
try:
    verify(exercises, (0, len(exercises)))
except ExerciseFailed as failure:
    print("stopped at", failure.exercise.name)

report = cicv_verify(exercises, "check_result.json")
print(report.to_json())
```

`Exercise.state()` returns the lines around the pending marker, and
`Exercise.looks_done()` tells whether the marker has been removed.

## What it does not do

exercisekit ships no exercises of its own: you supply `info.toml` and the
exercise files. Whether an exercise is done is judged only by the marker
comment and a successful build or test run.