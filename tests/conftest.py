import pytest
import pandas as pd
import numpy as np

import matplotlib
matplotlib.use('Agg')

from benchmark.specs import ModelSpec, ResamplingConfig


@pytest.fixture(scope="session")
def seed():
    return 42


def make_clinical_df(n, n_positive, seed, n_extra=0):
    """
    Deterministic synthetic patient table.

    Includes:
      - PatientID / DoctorInCharge (administrative, must be dropped)
      - Diagnosis (binary target with exactly n_positive positives)
      - continuous, binary and ordinal clinical attributes, some predictive
    """
    rng = np.random.default_rng(seed)

    diagnosis = np.zeros(n, dtype=int)
    diagnosis[:n_positive] = 1
    rng.shuffle(diagnosis)

    df = pd.DataFrame({
        "PatientID": np.arange(4751, 4751 + n),
        "Age": rng.integers(60, 91, size=n),
        "Gender": rng.integers(0, 2, size=n),
        "BMI": rng.normal(27.0, 4.0, size=n),
        "Smoking": rng.integers(0, 2, size=n),
        "SleepQuality": rng.normal(7.0, 1.5, size=n),
        "EducationLevel": rng.integers(0, 4, size=n),
        "MMSE": rng.normal(22.0, 3.0, size=n) - 6.0 * diagnosis,
        "FunctionalAssessment": rng.normal(6.0, 2.0, size=n) - 2.5 * diagnosis,
        "MemoryComplaints": (rng.random(n) < 0.2 + 0.4 * diagnosis).astype(int),
    })
    for i in range(n_extra):
        df[f"Marker_{i}"] = rng.normal(0.0, 1.0, size=n)

    df["DoctorInCharge"] = "XXXConfid"
    df["Diagnosis"] = diagnosis
    return df


@pytest.fixture
def clinical_df(seed):
    """120 patients, 36 diagnosed."""
    return make_clinical_df(120, 36, seed)


@pytest.fixture
def model_df(clinical_df):
    """Cleaned table the harness consumes: identifiers dropped, target kept."""
    return clinical_df.drop(columns=["PatientID", "DoctorInCharge"])


@pytest.fixture
def resampling():
    return ResamplingConfig(n_splits=3, n_repeats=2, scoring="roc_auc", n_jobs=1)


@pytest.fixture
def small_specs():
    return {
        "decision_tree": ModelSpec("decision_tree", "decision_tree", {"max_depth": [2, 3]}),
        "knn": ModelSpec("knn", "knn", {"n_neighbors": [3, 7]}),
    }


@pytest.fixture
def base_config(tmp_path, seed):
    cfg = {
        "experiment": {
            "name": "pytest_diagnosis",
            "seed": seed,
            "output_dir": str(tmp_path / "runs")
        },
        "data": {
            "dataset_path": "DUMMY.csv",
            "target_column": "Diagnosis",
            "positive_label": 1
        },
        "preprocessing": {
            "columns_to_drop": ["PatientID", "DoctorInCharge"]
        },
        "split": {
            "train_fraction": 0.8
        },
        "cross_validation": {
            "n_splits": 3,
            "n_repeats": 2,
            "scoring": "roc_auc",
            "n_jobs": 1
        },
        "models": {
            "decision_tree": {
                "type": "decision_tree",
                "param_grid": {"max_depth": [2, 4]}
            },
            "knn": {
                "type": "knn",
                "param_grid": {"n_neighbors": [5, 9]}
            }
        },
        "metrics": {
            "save_plots": False,
            "plot_param": {"decision_tree": "max_depth"}
        }
    }
    return cfg


@pytest.fixture
def patch_dataset_loader(monkeypatch, clinical_df):
    """
    Monkeypatch load_dataset so runners don't hit disk.
    """
    def _fake_load_dataset(config, dataset_path=None):
        return clinical_df.copy(), "test_dataset.csv"

    monkeypatch.setattr("benchmark.data.load_dataset", _fake_load_dataset)
    monkeypatch.setattr("runners.run_benchmark.load_dataset", _fake_load_dataset)
    monkeypatch.setattr("runners.run_eda.load_dataset", _fake_load_dataset)
    return _fake_load_dataset


@pytest.fixture
def write_yaml(tmp_path):
    import yaml
    def _write(cfg, name="temp.yaml"):
        p = tmp_path / name
        with open(p, "w") as f:
            yaml.safe_dump(cfg, f, default_flow_style=False)
        return str(p)
    return _write
