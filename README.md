# drillrun

drillrun drives a directory of small Rust exercises. Each exercise is a source
file with a deliberate mistake and an `I AM NOT DONE` marker comment. drillrun
compiles and runs each exercise with `rustc` or `cargo`, shows what went wrong,
and counts an exercise as done once it builds, passes and the marker is gone.

## Requirements

- Python 3.11 or newer
- `rustc` and `cargo` on your `PATH`
- An exercise directory with an `info.toml` file at its top level

## Installation

```
pip install .
```

This installs the `drillrun` command.

## The exercise list

`info.toml` lists the exercises in the recommended order:

```toml
[[exercises]]
name = "intro1"
path = "exercises/intro/intro1.rs"
mode = "compile"
hint = "Remove the I AM NOT DONE comment to move on."
```

`mode` is one of:

- `compile` – build the file with `rustc` and run the binary
- `test` – build it as a test harness with `rustc --test` and run the tests
- `clippy` – write `exercises/clippy/Cargo.toml` and run `cargo clippy` with
  warnings denied
- `buildscript` – write `exercises/tests/Cargo.toml` and run `cargo test`

An exercise is pending while a line of the form `// I AM NOT DONE` remains in
its file.

## Usage

Run every command from the directory that holds `info.toml`.

```
drillrun                  # welcome text and a short guide
drillrun --version        # show the version
drillrun verify           # check all exercises in order, stop at the first failure
drillrun watch            # re-check whenever an exercise file changes
drillrun run intro1       # compile and run a single exercise
drillrun run next         # run the first exercise that is not done
drillrun hint intro1      # show the hint for an exercise
drillrun reset intro1     # run "git stash -- <file>" on an exercise
drillrun list             # table of exercises with their status
drillrun list --solved    # only the finished ones
drillrun list --unsolved  # only the pending ones
drillrun list -f if,var   # filter by comma-separated name or path fragments
drillrun list --paths     # only paths (--names for only names)
drillrun lsp              # write rust-project.json for rust-analyzer
drillrun cicvverify       # run every exercise and write a JSON report
```

Add `--nocapture` before the subcommand to see the output of test exercises,
for example `drillrun --nocapture run testSuccess`.

The command exits with status 1 when `info.toml` is missing, `rustc` cannot
be found, an exercise name is unknown, or the checked exercise fails.

### Watch mode

`drillrun watch` checks the exercises in order and then watches `./exercises`
for created or modified `.rs` files, re-checking the changed exercise first and
then every pending one. While it runs you can type:

- `hint` – show the hint for the current exercise
- `clear` – clear the screen
- `quit` – leave watch mode
- `!<cmd>` – run a command, for example `!rustc --explain E0381`
- `help` – list these commands

`drillrun watch --success-hints` also prints the hint after an exercise passes.

### Reports

`drillrun cicvverify` runs every exercise concurrently, counts successes and
failures and writes the result as JSON to `.github/result/check_result.json`.
The `.github/result` directory must already exist.

### Output

Set the `NO_EMOJI` environment variable to replace emoji with plain symbols.
Colours are used when standard output is a terminal; `CLICOLOR=0` turns them
off and `CLICOLOR_FORCE=1` turns them on.

## Using it as a library

- `drillrun.exercise.load_exercises(path)` reads `info.toml` into `Exercise`
  objects; `Exercise.state()` and `Exercise.looks_done()` report the marker,
  `Exercise.compile()` returns a `CompiledExercise` or raises `CompileError`.
- `drillrun.verify.verify(exercises, progress, verbose, success_hints)` raises
  `VerificationError` at the first exercise that does not pass.
- `drillrun.run.run(exercise, verbose)` and `drillrun.run.reset(exercise)`
  handle a single exercise.
- `drillrun.project.RustAnalyzerProject` builds `rust-project.json`.
- `drillrun.cli.main(argv)` runs the command line.

## What it does not do

drillrun ships no exercises of its own: it needs an existing exercise directory
with an `info.toml`. It does not install or manage the Rust toolchain.

## Running the tests

```
pip install .[test]
pytest
```