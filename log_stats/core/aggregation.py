import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from .errors import FileOpenError, LineParseError
from .models import LogStats, RequestRecord
from .parsers import parse_line

logger = logging.getLogger(__name__)

# ======================================================================
# PER-FILE AGGREGATION / AGRÉGATION PAR FICHIER
# ======================================================================

def fold_record(stats: LogStats, record: RequestRecord) -> None:
    """
    EN: Add one parsed request to running stats (average is computed at the end)
    FR: Ajoute une requête analysée aux statistiques (la moyenne est calculée à la fin)
    """
    stats.total_requests += 1
    stats.by_method[record.method] += 1
    stats.by_status[record.status] += 1
    stats.by_path[record.path] += 1

    # EN: Optional identity fields | FR: Champs d'identité optionnels
    if record.client_ip:
        stats.by_ip[record.client_ip] += 1
    if record.user_agent:
        stats.by_user_agent[record.user_agent] += 1

    stats.total_bytes += record.bytes_sent
    if record.response_ms > stats.max_response_ms:
        stats.max_response_ms = record.response_ms


def aggregate_lines(lines: Iterable[str], source: Optional[str] = None,
                    strip_query_string: bool = False) -> LogStats:
    """
    EN: Aggregate lines in order, skipping those that cannot be parsed
    FR: Agrège les lignes dans l'ordre, en ignorant celles non analysables

    Args/Paramètres:
        lines: EN: Raw log lines | FR: Lignes de log brutes
        source: EN: Originating file, kept on the stats | FR: Fichier d'origine, conservé dans les stats
        strip_query_string: EN: Drop "?..." from paths | FR: Retirer "?..." des chemins

    Returns/Retourne:
        LogStats: EN: Stats of the parsed lines | FR: Statistiques des lignes analysées
    """
    stats = LogStats(source=source)
    response_sum = 0

    for line_num, line in enumerate(lines, 1):
        line = line.rstrip('\r\n')
        if not line.strip(): # EN: Skip empty lines | FR: Ignorer lignes vides
            continue

        try:
            record = parse_line(line, strip_query_string=strip_query_string)
        except LineParseError as e:
            logger.debug("%s:%d skipped - %s - %s", source or '<lines>', line_num, e, line[:50])
            continue

        fold_record(stats, record)
        response_sum += record.response_ms

    if stats.total_requests > 0:
        stats.avg_response_ms = response_sum / stats.total_requests
    return stats


def _read_lines(f, max_bytes: Optional[int] = None):
    """EN: Raw lines of a binary file, up to max_bytes | FR: Lignes brutes d'un fichier binaire, jusqu'à max_bytes"""
    if max_bytes is None:
        yield from f
        return
    remaining = max_bytes
    for raw in f:
        remaining -= len(raw)
        if remaining < 0:
            return
        yield raw


def aggregate_file(log_path: Union[str, Path], strip_query_string: bool = False,
                   max_bytes: Optional[int] = None) -> LogStats:
    """
    EN: Stream one log file into a LogStats
    FR: Lit un fichier log en flux vers un LogStats

    Args/Paramètres:
        max_bytes: EN: Stop after this many bytes of whole lines | FR: Arrêt après ce nombre d'octets de lignes entières

    Raises/Lève:
        FileOpenError: EN: File cannot be opened or read | FR: Fichier impossible à ouvrir ou lire
    """
    source = str(log_path)
    try:
        with open(log_path, 'rb') as f:
            lines = (raw.decode('utf-8', errors='replace') for raw in _read_lines(f, max_bytes))
            return aggregate_lines(lines, source=source, strip_query_string=strip_query_string)
    except OSError as e:
        raise FileOpenError(source, e.strerror or str(e)) from e
