"""
CLI pipeline tests

Runs the pipeline stages on temporary directories of component files.
"""

import json

import pytest

from classforward.__main__ import (
    components_transform,
    env_check,
    results_report,
    sources_collect,
)
from classforward.models import ProgramState, pipeline


@pytest.fixture
def project(tmp_path):
    """Input tree with two components and an output location"""
    inputdir = tmp_path / "in"
    (inputdir / "lib").mkdir(parents=True)
    (inputdir / "App.svelte").write_text(
        "<Button/>\n<style>Button .icon { color: red }</style>\n", encoding="utf-8"
    )
    (inputdir / "lib" / "Button.svelte").write_text(
        '<button class="btn"><slot/></button>\n', encoding="utf-8"
    )
    (inputdir / "notes.txt").write_text("not a component", encoding="utf-8")
    return inputdir, tmp_path / "out"


def make_state(inputdir, outputdir, **kwargs):
    options = {"pattern": "**/*.svelte", "verbosity": 0}
    options.update(kwargs)
    return ProgramState(inputdir=inputdir, outputdir=outputdir, **options)


class TestStages:
    """Test individual stages"""

    def test_env_check_creates_output(self, project):
        inputdir, outputdir = project
        state = env_check(make_state(inputdir, outputdir))
        assert state.envOK is True
        assert outputdir.is_dir()

    def test_env_check_missing_input(self, tmp_path):
        with pytest.raises(SystemExit) as exc_info:
            env_check(make_state(tmp_path / "missing", tmp_path / "out"))
        assert exc_info.value.code == 1

    def test_sources_collect(self, project):
        inputdir, outputdir = project
        state = sources_collect(make_state(inputdir, outputdir))
        assert [p.relative_to(inputdir).as_posix() for p in state.sourceFiles] == [
            "App.svelte", "lib/Button.svelte",
        ]

    def test_state_copied(self, project):
        """Stages do not mutate their input state"""
        inputdir, outputdir = project
        initial = make_state(inputdir, outputdir)
        sources_collect(initial)
        assert initial.sourceFiles == []

    def test_report_without_results(self, project):
        inputdir, outputdir = project
        with pytest.raises(SystemExit):
            results_report(make_state(inputdir, outputdir))


class TestPipeline:
    """Test complete runs"""

    def test_outputs_written(self, project):
        inputdir, outputdir = project
        state = pipeline(
            make_state(inputdir, outputdir),
            env_check, sources_collect, components_transform, results_report,
        )

        assert all(result["status"] for result in state.transformResults)
        app = (outputdir / "App.svelte").read_text(encoding="utf-8")
        button = (outputdir / "lib" / "Button.svelte").read_text(encoding="utf-8")

        assert "<Button _forwardedClass='scoped-" in app
        assert ":global( .icon.scoped-" in app
        assert "<button class={'btn ' + _forwardedClass}>" in button
        assert 'export let _forwardedClass = ""' in button
        assert not (outputdir / "notes.txt").exists()

    def test_maps_written(self, project):
        inputdir, outputdir = project
        pipeline(
            make_state(inputdir, outputdir, maps=True),
            env_check, sources_collect, components_transform, results_report,
        )

        data = json.loads((outputdir / "App.svelte.map.json").read_text(encoding="utf-8"))
        assert data["source"] == "App.svelte"
        assert data["segments"]

    def test_overrides(self, project):
        inputdir, outputdir = project
        pipeline(
            make_state(inputdir, outputdir, propName="_cls", classPrefix="fwd"),
            env_check, sources_collect, components_transform, results_report,
        )

        app = (outputdir / "App.svelte").read_text(encoding="utf-8")
        assert "<Button _cls='fwd-" in app
        assert ":global( .icon.fwd-" in app

    def test_failure_reported(self, project, capsys):
        """A broken file fails the run but the others are still written"""
        inputdir, outputdir = project
        (inputdir / "Broken.svelte").write_text("<div>", encoding="utf-8")

        state = pipeline(make_state(inputdir, outputdir), env_check, sources_collect, components_transform)
        failed = [r for r in state.transformResults if not r["status"]]
        assert len(failed) == 1
        assert failed[0]["input"].endswith("Broken.svelte")
        assert (outputdir / "App.svelte").exists()

        with pytest.raises(SystemExit) as exc_info:
            results_report(state)
        assert exc_info.value.code == 1
        assert "Broken.svelte" in capsys.readouterr().err
