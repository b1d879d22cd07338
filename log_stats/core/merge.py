from typing import Iterable

from .models import LogStats

# ======================================================================
# STATS MERGING / FUSION DES STATISTIQUES
# ======================================================================

class StatsMerger:
    """
    EN: Fold per-file stats, in any order, into one aggregate
    FR: Fusionne les statistiques par fichier, dans n'importe quel ordre, en un agrégat

    The average response time is weighted by each file's request count:
    sum(avg_i * n_i) / sum(n_i).
    """

    def __init__(self):
        self._stats = LogStats()
        self._weighted_response = 0.0 # EN: sum(avg_i * n_i) | FR: somme(moy_i * n_i)
        self.merged_count = 0

    def add(self, stats: LogStats) -> None:
        total = self._stats
        total.total_requests += stats.total_requests
        total.total_bytes += stats.total_bytes
        total.max_response_ms = max(total.max_response_ms, stats.max_response_ms)

        # EN: Per-key sums for every mapping | FR: Sommes par clé pour chaque compteur
        merged_maps = total.count_maps()
        for name, counts in stats.count_maps().items():
            target = merged_maps[name]
            for key, count in counts.items():
                target[key] += count

        self._weighted_response += stats.avg_response_ms * stats.total_requests
        if total.total_requests > 0:
            total.avg_response_ms = self._weighted_response / total.total_requests
        self.merged_count += 1

    @property
    def result(self) -> LogStats:
        """EN: Aggregate so far | FR: Agrégat courant"""
        return self._stats


def merge_stats(stats_list: Iterable[LogStats]) -> LogStats:
    """EN: Merge several LogStats at once | FR: Fusionne plusieurs LogStats d'un coup"""
    merger = StatsMerger()
    for stats in stats_list:
        merger.add(stats)
    return merger.result
