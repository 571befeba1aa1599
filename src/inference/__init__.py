"""
Inference layer: preprocessing, model backends and the class label table.
"""

from .backend import InferenceBackend
from .labels import LabelTable
from .preprocess import to_model_input

__all__ = ["InferenceBackend", "LabelTable", "to_model_input"]
