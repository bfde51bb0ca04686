"""End-to-end tests for fs2laynii/pipeline/runner.py with a fake tool runner."""

import pytest

from conftest import FakeRunner
from fs2laynii.pipeline import (
    LayniiPipeline,
    StageFailure,
    StageStatus,
    resolve_parameters,
    summarize,
)

EXPECTED_ARTIFACTS = {
    "brain.finalsurfs.0.3mm.nii.gz",
    *(f"{h}.{r}" for h in ("lh", "rh") for r in ("csf_outer", "gm_outer", "wm_boundary", "gm_inner")),
    *(f"{h}.{r}.filled.nii.gz" for h in ("lh", "rh") for r in ("csf_outer", "gm_outer", "wm_boundary", "gm_inner")),
    *(f"{h}.{t}.nii.gz" for h in ("lh", "rh") for t in ("csf", "wm", "gm")),
    "lh.rim.nii.gz",
    "rh.rim.nii.gz",
    "both.rim.nii.gz",
}

LAYER_FILES = {"lh.rim_layers_equivol.nii.gz", "rh.rim_layers_equivol.nii.gz", "both.rim_layers_equivol.nii.gz"}


def snapshot(directory):
    return {p.name: p.read_bytes() for p in directory.iterdir()}


def run(ctx, runner=None, **options):
    runner = runner or FakeRunner()
    pipeline = LayniiPipeline(ctx, resolve_parameters(**options), runner=runner)
    return pipeline, pipeline.run(), runner


class TestEndToEnd:
    def test_distance_mode_artifacts(self, ctx):
        _, results, runner = run(ctx)
        names = {p.name for p in ctx.work_dir.iterdir()}
        assert names == EXPECTED_ARTIFACTS | LAYER_FILES
        assert summarize(results) == {"created": 29, "cached": 0, "failed": 0}
        assert runner.count("mri_convert") == 1
        assert runner.count("mris_expand") == 4
        assert runner.count("mris_fill") == 8

    def test_layering_invocations(self, ctx):
        _, _, runner = run(ctx)
        layering = [cmd for cmd, _ in runner.calls if cmd[0] == "LN2_LAYERS"]
        assert [cmd[2] for cmd in layering] == [
            str(ctx.rim("lh")), str(ctx.rim("rh")), str(ctx.rim("both"))
        ]
        for cmd in layering:
            assert cmd[3:] == ["-nr_layers", "11", "-equivol", "-iter_smooth", "0", "-incl_borders"]

    def test_stage_order(self, ctx):
        _, _, runner = run(ctx)
        order = []
        for tool in runner.tools():
            if not order or order[-1] != tool:
                order.append(tool)
        assert order == ["mri_convert", "mris_expand", "mris_fill", "LN2_LAYERS"]

    def test_creates_work_dir(self, subjects_dir):
        from fs2laynii.pipeline import SubjectContext
        ctx = SubjectContext(subjects_dir, "sub-01")
        assert not ctx.work_dir.exists()
        run(ctx)
        assert ctx.work_dir.is_dir()

    def test_thickness_mode(self, ctx):
        _, results, runner = run(ctx, metric="t")
        assert runner.count("mris_expand") == 8
        assert not any(r.failed for r in results)

    def test_equidistant(self, ctx):
        _, _, runner = run(ctx, model="d", n_layers=5)
        layering = [cmd for cmd, _ in runner.calls if cmd[0] == "LN2_LAYERS"]
        assert len(layering) == 3
        assert all("-equivol" not in cmd and cmd[4] == "5" for cmd in layering)
        assert ctx.work_dir.joinpath("both.rim_layers.nii.gz").exists()


class TestIdempotence:
    def test_second_run_invokes_nothing(self, ctx):
        run(ctx)
        before = snapshot(ctx.work_dir)
        _, results, runner = run(ctx)
        assert runner.calls == []
        assert all(r.status is StageStatus.CACHED for r in results)
        assert snapshot(ctx.work_dir) == before

    def test_equidistant_alternative_name_is_cached(self, ctx):
        run(ctx, model="d")
        for rim in ("lh", "rh", "both"):
            layers = ctx.work_dir / f"{rim}.rim_layers.nii.gz"
            layers.rename(ctx.work_dir / f"{rim}.rim_layers_equidist.nii.gz")
        _, results, runner = run(ctx, model="d")
        assert runner.calls == []
        assert all(r.status is StageStatus.CACHED for r in results)

    def test_force_layering(self, ctx):
        run(ctx)
        _, _, runner = run(ctx, force_layering=True)
        assert runner.tools() == ["LN2_LAYERS"] * 3

    def test_resumes_from_first_missing_artifact(self, ctx):
        run(ctx)
        ctx.filled("rh", "wm_boundary").unlink()
        ctx.label("rh", "wm").unlink()
        ctx.rim("rh").unlink()
        ctx.rim("both").unlink()
        _, results, runner = run(ctx)
        assert runner.tools() == ["mris_fill"]
        created = {r.artifact.name for r in results if r.status is StageStatus.CREATED}
        assert created == {"rh.wm_boundary.filled.nii.gz", "rh.wm.nii.gz", "rh.rim.nii.gz", "both.rim.nii.gz"}


class TestLayeringSwitch:
    @pytest.mark.parametrize("value", ["1", "yes"])
    def test_stop_value_skips_layering(self, ctx, value):
        _, results, runner = run(ctx, stop_layering=value)
        assert runner.count("LN2_LAYERS") == 0
        assert ctx.rim("both").exists()
        assert all(r.stage != "layering" for r in results)

    def test_zero_runs_layering(self, ctx):
        _, _, runner = run(ctx, stop_layering="0")
        assert runner.count("LN2_LAYERS") == 3


class TestFailures:
    def test_failure_does_not_stop_pipeline(self, ctx):
        _, results, runner = run(ctx, runner=FakeRunner(fail_on={"mris_fill"}))
        assert runner.count("mris_fill") == 8
        assert summarize(results)["failed"] > 0
        assert not ctx.rim("both").exists()
        # rims are missing, so the layering engine is never launched
        assert runner.count("LN2_LAYERS") == 0

    def test_rerun_recovers(self, ctx):
        run(ctx, runner=FakeRunner(fail_on={"mris_fill"}))
        _, results, runner = run(ctx)
        assert runner.count("mris_expand") == 0
        assert runner.count("mris_fill") == 8
        assert not any(r.failed for r in results)
        assert ctx.rim("both").exists()

    def test_strict_aborts_on_first_failure(self, ctx):
        pipeline = LayniiPipeline(
            ctx, resolve_parameters(strict=True), runner=FakeRunner(fail_on={"mris_fill"})
        )
        with pytest.raises(StageFailure) as excinfo:
            pipeline.run()
        assert excinfo.value.result.stage == "fill:csf_outer"
        assert len(pipeline.results) == 1 + 8 + 1
        assert pipeline.runner.count("mris_fill") == 1

    def test_no_partial_files_left(self, ctx):
        run(ctx, runner=FakeRunner(fail_on={"mris_expand"}))
        assert not [p for p in ctx.work_dir.iterdir() if p.name.startswith(".partial-")]

    def test_strict_stops_at_first_surface_failure(self, ctx):
        runner = FakeRunner(fail_on={"mris_expand"})
        pipeline = LayniiPipeline(ctx, resolve_parameters(strict=True), runner=runner)
        with pytest.raises(StageFailure) as excinfo:
            pipeline.run()
        assert excinfo.value.result.stage == "surface:csf_outer"
        assert runner.count("mris_expand") == 1
        assert len(pipeline.results) == 2
        # later surfaces, copies included, are never produced
        assert {p.name for p in ctx.work_dir.iterdir()} == {"brain.finalsurfs.0.3mm.nii.gz"}

    def test_strict_stops_at_first_label_failure(self, ctx):
        runner = FakeRunner(fail_on={"fscalc"})
        pipeline = LayniiPipeline(ctx, resolve_parameters(strict=True, arithmetic="fscalc"), runner=runner)
        with pytest.raises(StageFailure) as excinfo:
            pipeline.run()
        assert excinfo.value.result.stage == "label:csf"
        assert runner.count("fscalc") == 1
        assert len(pipeline.results) == 1 + 8 + 8 + 1

    def test_strict_stops_at_first_layering_failure(self, ctx):
        runner = FakeRunner(fail_on={"LN2_LAYERS"})
        pipeline = LayniiPipeline(ctx, resolve_parameters(strict=True), runner=runner)
        with pytest.raises(StageFailure) as excinfo:
            pipeline.run()
        assert excinfo.value.result.stage == "layering"
        assert runner.count("LN2_LAYERS") == 1
        assert len(pipeline.results) == 1 + 8 + 8 + 9 + 1

    def test_layering_without_output_fails(self, ctx):
        _, results, runner = run(ctx, runner=FakeRunner(silent_on={"LN2_LAYERS"}))
        layering = [r for r in results if r.stage == "layering"]
        assert runner.count("LN2_LAYERS") == 3
        assert len(layering) == 3
        assert all(r.failed and "wrote no output" in r.cause for r in layering)
