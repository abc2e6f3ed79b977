#!/usr/bin/env python3
"""
classforward - Class forwarding preprocessor for single-file components

Lets a parent component style a child component by its type name and makes
those styles land on the child's rendered elements.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

How it works:
    - Parent style:   Button .icon { color: red }
      becomes         :global( .icon.scoped-1a2b3c-button) { color: red }
    - Parent markup:  <Button/>
      becomes         <Button _forwardedClass='scoped-1a2b3c-button'/>
    - Child script:   gains  export let _forwardedClass = ""
    - Child markup:   <div class="x">  becomes  <div class={'x ' + _forwardedClass}>

Usage:
    classforward inputdir/ outputdir/ [--pattern '**/*.svelte']

    Every matching component under inputdir is transformed and written to
    the same relative path under outputdir.

Examples:
    # Transform all components
    classforward src/ build/

    # Custom prop name and class prefix, with position maps
    classforward src/ build/ --propName _cls --classPrefix fwd --maps

    # Verbose output
    classforward src/ build/ -vv
"""

import json
import sys
from functools import partial
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import Preprocessor, __version__, LOG, state_connectToLogger
from .lib.errors import ClassForwardError, NamerLoadError
from .lib.naming import namer_load, scopedClass_default
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
      _                 __                              _
  ___| | __ _ ___ ___  / _| ___  _ ____      ____ _ _ __| |
 / __| |/ _` / __/ __|| |_ / _ \| '__\ \ /\ / / _` | '__| |
| (__| | (_| \__ \__ \|  _| (_) | |   \ V  V / (_| | |  |_|
 \___|_|\__,_|___/___/|_|  \___/|_|    \_/\_/ \__,_|_|  (_)

  Class forwarding for single-file components
"""

# Define CLI arguments
parser = ArgumentParser(
    description="classforward - forward classes into child components and scope component selectors",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--pattern",
    default=appsettings.file_glob,
    type=str,
    help="Glob (relative to inputdir) selecting component files",
)

parser.add_argument(
    "--propName",
    default=None,
    type=str,
    help="Forwarding prop name (default from CLASSFORWARD_PROP_NAME or settings)",
)

parser.add_argument(
    "--classPrefix",
    default=None,
    type=str,
    help="Prefix of generated scoped class names (default from settings)",
)

parser.add_argument(
    "--maps",
    action="store_true",
    default=False,
    help="Also write <file>.map.json position maps next to each output",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def preprocessor_create(state: ProgramState) -> Preprocessor:
    """
    Build the Preprocessor for a run from CLI overrides and settings

    Raises:
        NamerLoadError: If settings.class_namer cannot be imported
    """
    if state.classPrefix:
        namer = partial(scopedClass_default, prefix=state.classPrefix)
    else:
        namer = namer_load(appsettings.class_namer)
    return Preprocessor(namer=namer, prop_name=state.propName)


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment.

    Verifies that the input directory exists and the configured class namer
    can be loaded, then creates the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with envOK set

    Exits:
        1 if inputdir is missing or the class namer cannot be loaded
    """
    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    if state.inputdir is None or not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    try:
        preprocessor_create(state)
    except NamerLoadError as e:
        print(f"Error: {e}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Input directory: {state.inputdir}", level=2)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def sources_collect(inputstate: ProgramState) -> ProgramState:
    """
    Find component files under inputdir.

    Args:
        inputstate: Program state with inputdir and pattern

    Returns:
        ProgramState with sourceFiles (sorted, files only)
    """
    state = inputstate.copy()

    pattern = state.pattern or appsettings.file_glob
    state.sourceFiles = sorted(p for p in state.inputdir.glob(pattern) if p.is_file())
    LOG(f"Found {len(state.sourceFiles)} file(s) matching {pattern}", level=1)
    return state


def components_transform(inputstate: ProgramState) -> ProgramState:
    """
    Transform every collected component and write the results.

    A file that fails (malformed markup or style, underivable name) is
    reported and not written; the others are still processed.

    Args:
        inputstate: Program state with sourceFiles

    Returns:
        ProgramState with transformResults, one dict per file:
            - input: str (source path)
            - output: str (written path, or None on failure)
            - status: bool
            - error: str (only on failure)
    """
    state = inputstate.copy()
    preprocessor = preprocessor_create(state)
    results = []

    for source_file in state.sourceFiles:
        relative = source_file.relative_to(state.inputdir)
        output_file = state.outputdir / relative
        LOG(f"Transforming {relative}", level=2)

        try:
            text = source_file.read_text(encoding="utf-8")
            result = preprocessor.process(text, relative.as_posix())
        except (ClassForwardError, OSError, UnicodeDecodeError) as e:
            print(f"Error in {relative}: {e}", file=sys.stderr)
            results.append({'input': str(source_file), 'output': None, 'status': False, 'error': str(e)})
            continue

        output_file.parent.mkdir(parents=True, exist_ok=True)
        output_file.write_text(result.code, encoding="utf-8")
        if state.maps:
            map_file = output_file.with_name(output_file.name + ".map.json")
            map_file.write_text(json.dumps(result.map.to_dict(), indent=2), encoding="utf-8")

        results.append({'input': str(source_file), 'output': str(output_file), 'status': True})

    state.transformResults = results
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display transformation results.

    Args:
        inputstate: Program state with transformResults populated

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if transformResults is missing or any file failed
    """
    state: ProgramState = inputstate.copy()
    if state.transformResults is None:
        print("Error: Transformation did not run", file=sys.stderr)
        sys.exit(1)

    succeeded = [r for r in state.transformResults if r['status']]
    failed = [r for r in state.transformResults if not r['status']]

    LOG(f"\n✓ Transformed {len(succeeded)} component(s)", level=1)
    for result in succeeded:
        LOG(f"  {result['output']}", level=2)

    if failed:
        print(f"{len(failed)} component(s) failed:", file=sys.stderr)
        for result in failed:
            print(f"  {result['input']}: {result['error']}", file=sys.stderr)
        sys.exit(1)
    return state


@chris_plugin(
    parser=parser,
    title="classforward - Class forwarding preprocessor",
    category="Utility",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - transform component files from inputdir into outputdir.

    Orchestrates the pipeline:
        1. env_check: Validate paths and the class namer
        2. sources_collect: Glob component files
        3. components_transform: Process and write each file
        4. results_report: Summarize, exit 1 on failures

    Args:
        options: CLI arguments from argparse
            - pattern: str - Glob relative to inputdir
            - propName: Optional[str] - Forwarding prop name
            - classPrefix: Optional[str] - Scoped class prefix
            - maps: bool - Write position maps
            - verbosity: int - Logging verbosity level (1-3)
        inputdir: Directory containing component sources
        outputdir: Directory where transformed components are written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, sources_collect, components_transform, results_report)


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
