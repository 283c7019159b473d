from .exporter import GraphExporterPort
from .similarity import SimilarityPort
from .smell_source import SmellSourcePort

__all__ = ["GraphExporterPort", "SimilarityPort", "SmellSourcePort"]
