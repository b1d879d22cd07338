import logging
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from contextlib import closing
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, Iterator, List, Optional, Union

from .aggregation import aggregate_file
from .config import DEFAULT_CHANNEL_CAPACITY
from .errors import FileError, FileProcessingError
from .merge import StatsMerger
from .models import LogStats

logger = logging.getLogger(__name__)

FileResult = Union[LogStats, FileError]

# EN: Put on the channel once every task has finished
# FR: Déposé sur le canal une fois toutes les tâches terminées
_CLOSED = object()

# ======================================================================
# FAN-OUT / FAN-IN / DISTRIBUTION ET COLLECTE
# ======================================================================

@dataclass
class AnalysisResult:
    """
    EN: Merged stats plus what happened to each file
    FR: Statistiques fusionnées et devenir de chaque fichier
    """
    stats: LogStats
    files: List[LogStats] = field(default_factory=list) # EN: Arrival order | FR: Ordre d'arrivée
    errors: List[FileError] = field(default_factory=list)


def _process_file(log_path: str, results: queue.Queue, stop: threading.Event,
                  strip_query_string: bool, max_bytes: Optional[int]) -> None:
    """EN: Task body: own the stats until handed off | FR: Tâche : possède ses stats jusqu'à la remise"""
    if stop.is_set():
        return
    try:
        logger.debug("Processing %s", log_path)
        result = aggregate_file(log_path, strip_query_string=strip_query_string, max_bytes=max_bytes)
    except FileError as e:
        result = e
    except Exception as e:
        # EN: Still one result per path | FR: Toujours un résultat par chemin
        logger.debug("Unexpected failure on %s", log_path, exc_info=True)
        result = FileProcessingError(log_path, f"{type(e).__name__}: {e}")
    # EN: Blocks while the channel is full | FR: Bloque tant que le canal est plein
    results.put(result)


def _close_when_done(executor: ThreadPoolExecutor, results: queue.Queue) -> None:
    executor.shutdown(wait=True)
    results.put(_CLOSED)


def iter_file_results(log_paths: Iterable, channel_capacity: int = DEFAULT_CHANNEL_CAPACITY,
                      max_workers: Optional[int] = None,
                      strip_query_string: bool = False,
                      byte_limits: Optional[Dict[str, int]] = None) -> Iterator[FileResult]:
    """
    EN: Process every file as a pool task and yield results as they complete
    FR: Traite chaque fichier comme une tâche du pool et renvoie les résultats à mesure

    Closing the generator early stops pending files and waits for running ones.
    La fermeture anticipée du générateur annule les fichiers en attente et attend ceux en cours.

    Args/Paramètres:
        log_paths: EN: Existing log files | FR: Fichiers log existants
        channel_capacity: EN: Results waiting to be consumed | FR: Résultats en attente de lecture
        max_workers: EN: Pool size, None = one thread per file | FR: Taille du pool, None = un thread par fichier
        strip_query_string: EN: Drop "?..." from paths | FR: Retirer "?..." des chemins
        byte_limits: EN: Path -> bytes to read, missing = whole file | FR: Chemin -> octets à lire, absent = fichier entier

    Yields/Renvoie:
        LogStats or FileError, in completion order / dans l'ordre de fin
    """
    if channel_capacity < 1:
        raise ValueError("channel_capacity must be at least 1")
    if max_workers is not None and max_workers < 1:
        raise ValueError("max_workers must be at least 1")

    paths = [str(path) for path in log_paths]
    results = queue.Queue(maxsize=channel_capacity)
    stop = threading.Event()

    executor = ThreadPoolExecutor(
        max_workers=max_workers or max(1, len(paths)),
        thread_name_prefix="log-stats-worker"
    )
    byte_limits = byte_limits or {}
    for path in paths:
        executor.submit(_process_file, path, results, stop, strip_query_string, byte_limits.get(path))

    # EN: Pool shutdown then close, so the reader never polls
    # FR: Arrêt du pool puis fermeture, le lecteur n'a pas à scruter
    threading.Thread(
        target=_close_when_done, args=(executor, results),
        name="log-stats-closer", daemon=True
    ).start()

    closed = False
    try:
        while True:
            item = results.get()
            if item is _CLOSED:
                closed = True
                return
            yield item
    finally:
        if not closed:
            # EN: Consumer left early: skip pending files, unblock running ones
            # FR: Le consommateur est parti : ignorer les fichiers en attente, débloquer les autres
            stop.set()
            while results.get() is not _CLOSED:
                pass


def analyze_files(log_paths: Iterable, channel_capacity: int = DEFAULT_CHANNEL_CAPACITY,
                  max_workers: Optional[int] = None, strip_query_string: bool = False,
                  byte_limits: Optional[Dict[str, int]] = None,
                  on_result: Optional[Callable[[FileResult], None]] = None) -> AnalysisResult:
    """
    EN: Aggregate several log files concurrently and merge the results
    FR: Agrège plusieurs fichiers log en parallèle et fusionne les résultats

    Args/Paramètres:
        on_result: EN: Called with each per-file result on arrival | FR: Appelé avec chaque résultat à son arrivée

    Returns/Retourne:
        AnalysisResult: EN: Merged stats, per-file stats and file errors | FR: Stats fusionnées, par fichier et erreurs
    """
    merger = StatsMerger()
    result = AnalysisResult(stats=merger.result)

    with closing(iter_file_results(log_paths, channel_capacity, max_workers, strip_query_string,
                                   byte_limits)) as items:
        for item in items:
            if isinstance(item, FileError):
                logger.debug("File skipped: %s", item)
                result.errors.append(item)
            else:
                merger.add(item)
                result.files.append(item)
            if on_result is not None:
                on_result(item)

    return result
