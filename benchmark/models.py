# Model building utilities
# Every model is wrapped with a StandardScaler so scaling statistics are
# learned from whatever data the pipeline is fit on and nothing else.

from sklearn.ensemble import GradientBoostingClassifier, RandomForestClassifier
from sklearn.linear_model import LogisticRegression
from sklearn.neighbors import KNeighborsClassifier
from sklearn.pipeline import Pipeline
from sklearn.preprocessing import StandardScaler
from sklearn.svm import SVC
from sklearn.tree import DecisionTreeClassifier

try:
    from xgboost import XGBClassifier
    HAS_XGBOOST = True
except ImportError:
    XGBClassifier = None
    HAS_XGBOOST = False

try:
    from lightgbm import LGBMClassifier
    HAS_LIGHTGBM = True
except ImportError:
    LGBMClassifier = None
    HAS_LIGHTGBM = False


SUPPORTED_MODELS = [
    'decision_tree',
    'random_forest',
    'knn',
    'svm',
    'xgboost',
    'gradient_boosting',
    'lightgbm',
    'logistic_regression',
]

# Step names inside the pipeline; grid parameters are routed to MODEL_STEP
SCALER_STEP = 'scaler'
MODEL_STEP = 'model'


def build_model(model_type, seed, params=None):
    """
    Build and return an unfitted classifier.

    Note: KNN has no random component and doesn't take random_state.
    Tree-based, kernel and boosted models use random_state for reproducibility.
    """
    params = dict(params or {})

    if model_type == 'decision_tree':
        return DecisionTreeClassifier(random_state=seed, **params)

    elif model_type == 'random_forest':
        return RandomForestClassifier(random_state=seed, **params)

    elif model_type == 'knn':
        return KNeighborsClassifier(**params)

    elif model_type == 'svm':
        return SVC(random_state=seed, **params)

    elif model_type == 'xgboost':
        if not HAS_XGBOOST:
            raise ImportError("XGBoost not installed. Run: pip install xgboost")
        return XGBClassifier(
            random_state=seed,
            verbosity=0,
            eval_metric='logloss',
            **params
        )

    elif model_type == 'gradient_boosting':
        return GradientBoostingClassifier(random_state=seed, **params)

    elif model_type == 'lightgbm':
        if not HAS_LIGHTGBM:
            raise ImportError("LightGBM not installed. Run: pip install lightgbm")
        return LGBMClassifier(random_state=seed, verbose=-1, **params)

    elif model_type == 'logistic_regression':
        params.setdefault('max_iter', 1000)
        return LogisticRegression(random_state=seed, **params)

    else:
        raise ValueError(
            f"Unknown model type: '{model_type}'. "
            f"Supported: {SUPPORTED_MODELS}"
        )


def build_pipeline(model_type, seed, params=None):
    """Build a scaler + classifier pipeline for one model type."""
    return Pipeline([
        (SCALER_STEP, StandardScaler()),
        (MODEL_STEP, build_model(model_type, seed, params)),
    ])


def pipeline_params(params):
    """Prefix bare hyperparameter names so they reach the classifier step."""
    return {f"{MODEL_STEP}__{key}": value for key, value in params.items()}
