"""
Supervised classification of feature vectors by nearest attractor template.
"""

from typing import Any, Mapping, Optional, Sequence, Union
import torch
from torch import Tensor

from ..base.data_structures import UNCLASSIFIED, ClassificationResult, ClusteringMethod
from ..base.interfaces import DistanceMetric, FeatureClassifier
from ..distances import get_metric
from ..features.extraction import FeatureExtractor, Featurizer
from ..utils.device import parse_device
from ..utils.validation import validate_data


class TemplateClassifier(FeatureClassifier):
    """Assign every feature vector to its nearest template.

    Templates are trajectories, one per known attractor, featurized on every
    call. A sample's label is its template's identity: the mapping key when
    templates are a mapping with integer keys, otherwise the 1-based position.
    The error is the metric distance to that template.

    Parameters
    ----------
    featurizer : callable or FeatureExtractor
        Used to featurize the templates
    metric : str or DistanceMetric, default='euclidean'
        Feature-space distance
    clust_method : str or ClusteringMethod, default='kNN'
        'kNN' or 'kNN_thresholded'
    clustering_threshold : float, default=0.0
        With 'kNN_thresholded', samples at or beyond this distance get -1
    device : str or torch.device, optional
        Computation device (CPU by default)
    verbose : int, default=0
        Verbosity level
    """

    def __init__(self,
                 featurizer: Union[Featurizer, FeatureExtractor],
                 metric: Union[str, DistanceMetric] = 'euclidean',
                 clust_method: Union[str, ClusteringMethod] = ClusteringMethod.KNN,
                 clustering_threshold: float = 0.0,
                 device: Optional[Union[str, torch.device]] = None,
                 verbose: int = 0):
        if isinstance(featurizer, FeatureExtractor):
            self.extractor = featurizer
        else:
            self.extractor = FeatureExtractor(featurizer)
        self.metric = get_metric(metric)
        self.clust_method = ClusteringMethod.coerce(clust_method)
        if clustering_threshold < 0:
            raise ValueError(f"clustering_threshold must be non-negative, "
                             f"got {clustering_threshold}")
        self.clustering_threshold = float(clustering_threshold)
        self.device = parse_device(device)
        self.verbose = verbose

    @property
    def is_supervised(self) -> bool:
        return True

    def template_features(self, templates: Union[Mapping[Any, Any], Sequence[Any]]):
        """Featurize templates.

        Returns:
            (feature_dim, n_templates) tensor and the label of every template
        """
        template_features, keys = self.extractor.extract_attractor_features(templates)
        if all(isinstance(key, int) and key != UNCLASSIFIED for key in keys):
            template_labels = keys
        else:
            template_labels = list(range(1, len(keys) + 1))
        return template_features.to(self.device), template_labels

    def classify(self, features: Tensor, templates=None, **kwargs) -> ClassificationResult:
        """Match every sample to its nearest template.

        Args:
            features: (feature_dim, n_samples) feature matrix
            templates: Mapping of label to trajectory, or sequence of trajectories

        Returns:
            ClassificationResult
        """
        if self.clust_method not in (ClusteringMethod.KNN, ClusteringMethod.KNN_THRESHOLDED):
            raise ValueError(f"Incorrect clustering mode: {self.clust_method!r}")
        if templates is None or len(templates) == 0:
            raise ValueError("Supervised classification requires at least one template")

        features = validate_data(features, device=self.device)
        template_features, template_labels = self.template_features(templates)

        if template_features.shape[0] != features.shape[0]:
            raise ValueError(f"Templates have {template_features.shape[0]} features, "
                             f"samples have {features.shape[0]}")

        # (n_samples, n_templates); argmin keeps the first template on ties
        distances = self.metric.pairwise(features.t(), template_features.t().to(features.dtype))
        errors, nearest = distances.min(dim=1)

        label_lookup = torch.tensor(template_labels, dtype=torch.long, device=self.device)
        labels = label_lookup[nearest]

        if self.clust_method is ClusteringMethod.KNN_THRESHOLDED:
            labels = labels.clone()
            labels[errors >= self.clustering_threshold] = UNCLASSIFIED

        if self.verbose:
            n_outliers = int((labels == UNCLASSIFIED).sum().item())
            print(f"Template matching ({self.clust_method.value}): {len(template_labels)} "
                  f"templates, {n_outliers} unclassified of {labels.shape[0]}")

        keys = list(templates.keys()) if isinstance(templates, Mapping) else None
        return ClassificationResult(
            labels=labels,
            errors=errors,
            metadata={
                'template_labels': template_labels,
                'template_keys': keys,
                'template_features': template_features
            }
        )

    def __repr__(self) -> str:
        return (f"TemplateClassifier(metric={self.metric!r}, "
                f"clust_method={self.clust_method.value!r}, "
                f"clustering_threshold={self.clustering_threshold})")
