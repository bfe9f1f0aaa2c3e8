from golink.models.link_model import LinkModel
from golink.models.link_stats_model import LinkStatsModel


__all__ = [
    'LinkModel',
    'LinkStatsModel',
]
