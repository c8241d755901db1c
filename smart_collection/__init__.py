"""Ordered in-memory collection whose add/remove operations can be canceled and resumed.

This package depends only on the standard library and PyYAML.
"""

from smart_collection.collection import Collection, View
from smart_collection.config import CollectionConfig, load_collection_config, load_config_mapping
from smart_collection.config_namespace import ConfigNamespace
from smart_collection.errors import ConfigurationError, UnknownEventError, UnknownFeatureError
from smart_collection.events import CollectionEvent, EventEmitter, available_events, resolve_event
from smart_collection.features import Feature, FeatureRegistry, default_feature_registry
from smart_collection.logging_utils import setup_collection_logger
from smart_collection.mutation import (
    Mutation,
    MutationContinuation,
    MutationKind,
    MutationState,
    begin_mutation,
)
from smart_collection.recorder import (
    DefaultMutationRecorder,
    MutationRecorder,
    NullMutationRecorder,
)

__all__ = [
    "Collection",
    "CollectionConfig",
    "CollectionEvent",
    "ConfigNamespace",
    "ConfigurationError",
    "DefaultMutationRecorder",
    "EventEmitter",
    "Feature",
    "FeatureRegistry",
    "Mutation",
    "MutationContinuation",
    "MutationKind",
    "MutationRecorder",
    "MutationState",
    "NullMutationRecorder",
    "UnknownEventError",
    "UnknownFeatureError",
    "View",
    "available_events",
    "begin_mutation",
    "default_feature_registry",
    "load_collection_config",
    "load_config_mapping",
    "resolve_event",
    "setup_collection_logger",
]
