"""Tests for model recreation."""

import pytest

from model_snapshot.core.artifacts import write_model
from model_snapshot.core.exceptions import MissingSectionError
from model_snapshot.core.recreate import Recreation, recreate_model

from conftest import make_output_collect


class FakePipeline:
    """Records the calls made by recreate_model."""

    def __init__(self):
        self.calls = []

    def build_inputs(self, **kwargs):
        self.calls.append(("build_inputs", kwargs))
        return {"restored_from": kwargs["json_file"]}

    def run_model(self, **kwargs):
        self.calls.append(("run_model", kwargs))
        return {"allSolutions": ["1_2_3"], "inputs": kwargs["input_collect"]}


class TestRecreate:
    """Test replaying a stored model through external steps."""

    @pytest.fixture
    def model_file(self, input_collect, tmp_path):
        outputs = make_output_collect(["1_2_3"], plot_folder=f"{tmp_path}/Robyn_r/")
        return write_model(input_collect, outputs, quiet=True).json_file

    def test_returns_both_objects(self, model_file):
        """Inputs and outputs come back as a pair."""
        fake = FakePipeline()
        result = recreate_model(model_file, fake.build_inputs, fake.run_model)

        assert isinstance(result, Recreation)
        assert result.input_collect == {"restored_from": model_file}
        assert result.output_collect["inputs"] is result.input_collect

    def test_collaborators_seeded_with_file(self, model_file):
        """Both steps receive the file path; the fit never exports."""
        fake = FakePipeline()
        recreate_model(model_file, fake.build_inputs, fake.run_model, quiet=True, cores=4)

        (name_1, kwargs_1), (name_2, kwargs_2) = fake.calls
        assert name_1 == "build_inputs"
        assert kwargs_1 == {"json_file": model_file, "quiet": True, "cores": 4}
        assert name_2 == "run_model"
        assert kwargs_2["json_file"] == model_file
        assert kwargs_2["export"] is False
        assert kwargs_2["cores"] == 4

    def test_requires_exported_model(self, input_collect, tmp_path):
        """An inputs-only file can't be recreated; nothing is called."""
        json_file = write_model(input_collect, dir=tmp_path, quiet=True).json_file
        fake = FakePipeline()

        with pytest.raises(MissingSectionError):
            recreate_model(json_file, fake.build_inputs, fake.run_model)
        assert fake.calls == []

    def test_collaborator_errors_propagate(self, model_file):
        """Failures inside the fitting step are not wrapped."""
        def failing_run(**kwargs):
            raise RuntimeError("fit diverged")

        with pytest.raises(RuntimeError, match="fit diverged"):
            recreate_model(model_file, FakePipeline().build_inputs, failing_run)
