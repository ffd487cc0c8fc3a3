# logrt

`logrt` gathers the text of log files into one merged log file.

You can point it at a single file or at a folder. For a folder, it walks every
file below it in sorted order. It opens zip, tar, gzip, xz and bzip2 archives,
including archives nested inside other archives, down to a depth of 10 levels.

An item counts as text in either of these cases:

- its leading bytes or its name mark it as text (`.txt`, `.md`, `.log`,
  `.json`, `.xml`, `.toml`, `.rs`, or XML/HTML content);
- it is of unknown type, but it decodes as UTF-8 or is shorter than 256 bytes.

Other unknown binary items are skipped.

When sorting is on, which is the default, the collected text is processed in
three steps:

1. It is split into lines, on `\n` or `\r\n`.
2. Empty lines are dropped.
3. The remaining lines are sorted.

The result is written to a new `<input name>_<6 random characters>.log` file.
By default this file goes in a `log_rt` directory under the system temporary
directory.

## Installation

```
pip install .
```

To install the test requirements as well:

```
pip install ".[test]"
```

## Command line

```
logrt PATH
```

This analyses `PATH` and prints the outcome. When the log has been written, it
is opened with the selected viewer command. The exit status is 0 on success
and 1 on failure. If you run `logrt` without a path, it prints the usage
message and exits with status 2.

Options:

- `--no-sort`: keep the text in the order it was found, without splitting or
  sorting it.
- `--command N`: the index of the viewer command to open the log with. The
  default is 0.
- `--list-commands`: print the viewer commands with their indexes, then exit.
- `--clear`: delete the output directory and create it again, empty. If a path
  is also given, the analysis runs afterwards.
- `--config-dir DIR`: the directory that holds `commands.json`.
- `--output-dir DIR`: the directory where generated logs are written.

### Viewers

The programs that can open a finished log are listed in `commands.json`. By
default, this file is read from the directory of the running program. Each
entry has:

- a `description`;
- an `executable`;
- a list of `args`, in which `{file}` is replaced with the path of the
  generated log.

If the file does not exist, it is created with four entries:

- klogg
- Notepad
- `open`
- gedit

If the file cannot be read, a single placeholder entry with an empty
executable is used instead. With that entry, no viewer is started.

Example `commands.json`:

```json
[
  {
    "description": "Use gedit (Linux)",
    "executable": "gedit",
    "args": ["{file}"]
  }
]
```

## Library use

```python
from logrt.analysis import Completed, run_analysis

outcome = run_analysis("/var/log/archive", notify=print, sorted_output=True)
if isinstance(outcome, Completed):
    print(outcome.log_path, outcome.elapsed_ms)
else:
    print(outcome.message)
```

`notify` receives these updates while the analysis runs:

- `FileProcessed(name)` for each item that is read;
- then either `Completed(log_path, elapsed_ms)` or `AnalysisFailed(message)`.

The outcome is also returned. `process_input_path` does the same work, but it
returns the log path and raises `AnalysisError` on failure.

Other building blocks:

- `logrt.file_handler.identify_file_type(source, item_name)` returns a
  `FileType`. It looks first at the item's leading bytes, then at its name.
- `logrt.file_handler.process_item(source, item_name)` returns the list of
  text chunks found in a path or in bytes. It raises `ExtractionError` when
  something cannot be read or unpacked.
- `logrt.analysis.split_lines(chunks)` returns the non-empty lines of the
  chunks.
- `logrt.config.load_commands(config_dir)` returns the `CommandConfig`
  entries. It raises `ConfigError` when the file is invalid.
- `logrt.app.clear_log_dir(log_dir)` empties and recreates the output
  directory. It returns a status message.
- `logrt.app.LogAnalyzerApp` holds the state of a run: path, viewer, sort flag
  and status message. It runs the analysis on a background thread.

## Limitations

- There is no graphical window, no file browser and no drag and drop. The
  package is used from the command line or as a library.
- 7z archives are recognised but cannot be unpacked. Meeting one stops the
  analysis with an error.
- There is no progress bar. Progress is reported only through `notify`
  updates and the status message.

## Running the tests

```
pytest
```