from .condensation import Condenser
from .condensed_graph import CondensedGraph
from .graph import Edge, Graph
from .report_service import ReportService
from .similarity_linker import LinkScore, SimilarityLinker
from .smell_tracker import SmellTracker
from .track_graph import TrackGraph


__all__ = [
    'Condenser',
    'CondensedGraph',
    'Edge',
    'Graph',
    'LinkScore',
    'ReportService',
    'SimilarityLinker',
    'SmellTracker',
    'TrackGraph',
]
