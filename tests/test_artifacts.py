import os
import json
import copy
import yaml
import joblib
import pytest

from runners import run_benchmark, run_eda
from benchmark.config_schema import ConfigurationError


def test_run_creates_required_artifacts(base_config, write_yaml, patch_dataset_loader):
    cfg_path = write_yaml(base_config, "diag.yaml")
    run_dir = run_benchmark.run_benchmark(cfg_path, dataset_path="IGNORED.csv")

    assert os.path.isdir(run_dir)
    for name in ["config.yaml", "metrics.json", "data_profile.json", "comparison.md",
                 "decision_tree.joblib", "knn.joblib"]:
        assert os.path.isfile(os.path.join(run_dir, name)), f"Missing artifact: {name}"

    with open(os.path.join(run_dir, "metrics.json"), "r") as f:
        metrics = json.load(f)

    for key in ["experiment_name", "seed", "target_column", "positive_label", "cross_validation", "models"]:
        assert key in metrics, f"Missing key in metrics.json: {key}"

    assert set(metrics["models"]) == {"decision_tree", "knn"}
    for model in metrics["models"].values():
        assert model["ok"] is True
        counts = model["confusion_matrix"]
        assert sum(counts.values()) == 24  # 20% of 120 patients

    # Saved config must contain the same target
    with open(os.path.join(run_dir, "config.yaml"), "r") as f:
        saved_cfg = yaml.safe_load(f)
    assert saved_cfg["data"]["target_column"] == base_config["data"]["target_column"]


def test_saved_pipeline_predicts(base_config, write_yaml, patch_dataset_loader, clinical_df):
    cfg_path = write_yaml(base_config, "diag.yaml")
    run_dir = run_benchmark.run_benchmark(cfg_path, dataset_path="IGNORED.csv")

    pipeline = joblib.load(os.path.join(run_dir, "knn.joblib"))
    X = clinical_df.drop(columns=["PatientID", "DoctorInCharge", "Diagnosis"])
    predictions = pipeline.predict(X)
    assert len(predictions) == len(X)
    assert set(predictions) <= {0, 1}


def test_data_profile_contains_required_info(base_config, write_yaml, patch_dataset_loader):
    cfg_path = write_yaml(base_config, "profile_test.yaml")
    run_dir = run_benchmark.run_benchmark(cfg_path, dataset_path="IGNORED.csv")

    with open(os.path.join(run_dir, "data_profile.json"), "r") as f:
        profile = json.load(f)

    required_keys = [
        "dataset_path",
        "dataset_hash",
        "total_rows",
        "total_columns",
        "feature_count",
        "features_used",
        "target_column",
        "target_stats",
        "timestamp"
    ]
    for key in required_keys:
        assert key in profile, f"Missing key in data_profile.json: {key}"

    assert profile["feature_count"] == len(profile["features_used"])
    assert "PatientID" not in profile["features_used"]
    assert profile["target_stats"]["value_counts"] == {"0": 84, "1": 36}
    assert profile["target_stats"]["proportions"]["1"] == pytest.approx(0.3)


def test_metrics_include_fold_level_scores(base_config, write_yaml, patch_dataset_loader):
    cfg_path = write_yaml(base_config, "fold_test.yaml")
    run_dir = run_benchmark.run_benchmark(cfg_path, dataset_path="IGNORED.csv")

    with open(os.path.join(run_dir, "metrics.json"), "r") as f:
        metrics = json.load(f)

    expected_folds = base_config["cross_validation"]["n_splits"] * base_config["cross_validation"]["n_repeats"]
    for model in metrics["models"].values():
        assert len(model["cv_results"]) == 2
        for row in model["cv_results"]:
            assert isinstance(row["all"], list)
            assert len(row["all"]) == expected_folds


def test_plots_written_when_enabled(base_config, write_yaml, patch_dataset_loader):
    cfg = copy.deepcopy(base_config)
    cfg["metrics"]["save_plots"] = True
    cfg_path = write_yaml(cfg, "plots.yaml")
    run_dir = run_benchmark.run_benchmark(cfg_path, dataset_path="IGNORED.csv")

    plots_dir = os.path.join(run_dir, "plots")
    assert os.path.isfile(os.path.join(plots_dir, "model_comparison.png"))
    assert os.path.isfile(os.path.join(plots_dir, "decision_tree_confusion.png"))
    assert os.path.isfile(os.path.join(plots_dir, "decision_tree_max_depth.png"))
    assert not os.path.exists(os.path.join(plots_dir, "knn_n_neighbors.png"))


def test_failed_model_recorded_in_metrics(base_config, write_yaml, patch_dataset_loader):
    cfg = copy.deepcopy(base_config)
    cfg["models"]["svm"] = {"type": "svm", "param_grid": {"kernel": ["not_a_kernel"]}}
    cfg_path = write_yaml(cfg, "failing.yaml")
    run_dir = run_benchmark.run_benchmark(cfg_path, dataset_path="IGNORED.csv")

    with open(os.path.join(run_dir, "metrics.json"), "r") as f:
        metrics = json.load(f)

    assert metrics["models"]["svm"]["ok"] is False
    assert "svm" in metrics["models"]["svm"]["error"]
    assert metrics["models"]["knn"]["ok"] is True
    assert not os.path.exists(os.path.join(run_dir, "svm.joblib"))


def test_invalid_config_is_rejected(base_config, write_yaml, patch_dataset_loader):
    cfg = copy.deepcopy(base_config)
    cfg["models"]["knn"]["type"] = "invalid_model"
    cfg_path = write_yaml(cfg, "bad.yaml")

    with pytest.raises(ConfigurationError):
        run_benchmark.run_benchmark(cfg_path, dataset_path="IGNORED.csv")


def test_output_dir_override(base_config, write_yaml, patch_dataset_loader, tmp_path):
    cfg_path = write_yaml(base_config, "diag.yaml")
    out = tmp_path / "elsewhere"
    run_dir = run_benchmark.run_benchmark(cfg_path, dataset_path="IGNORED.csv", output_dir=str(out))
    assert os.path.dirname(run_dir) == str(out)


def test_eda_runner_writes_tables(base_config, write_yaml, patch_dataset_loader):
    cfg_path = write_yaml(base_config, "eda.yaml")
    eda_dir = run_eda.run_eda(cfg_path, dataset_path="IGNORED.csv")

    for name in ["class_balance.csv", "feature_summary.csv", "normality_tests.csv",
                 "target_correlations.csv", "outliers.csv"]:
        assert os.path.isfile(os.path.join(eda_dir, "tables", name)), f"Missing table: {name}"
    for name in ["class_balance.png", "correlation_matrix.png"]:
        assert os.path.isfile(os.path.join(eda_dir, "figures", name)), f"Missing figure: {name}"

    with open(os.path.join(eda_dir, "dataset_info.json"), "r") as f:
        info = json.load(f)
    assert info["class_balance"]["1"] == pytest.approx(0.3)
