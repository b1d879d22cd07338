import os
import time
from pathlib import Path
from typing import Dict, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .aggregation import aggregate_lines
from .config import Colors, MIN_ANALYSIS_INTERVAL
from .merge import StatsMerger
from .models import LogStats
from .reporting import generate_reports, print_report
from .utils import colorize, log_error

# ======================================================================
# WATCH MODE COMPONENTS / COMPOSANTS DU MODE SURVEILLANCE
# ======================================================================

READ_BLOCK = 64 * 1024


def complete_lines_end(log_path) -> int:
    """
    EN: Byte offset just past the last newline, 0 if none or unreadable
    FR: Position juste après le dernier saut de ligne, 0 si aucun ou illisible
    """
    try:
        with open(log_path, 'rb') as f:
            end = f.seek(0, os.SEEK_END)
            while end > 0:
                start = max(0, end - READ_BLOCK)
                f.seek(start)
                newline = f.read(end - start).rfind(b'\n')
                if newline != -1:
                    return start + newline + 1
                end = start
    except OSError:
        # EN: Reported by the analysis itself | FR: Signalé par l'analyse elle-même
        return 0
    return 0


def snapshot_positions(log_paths) -> Dict[str, int]:
    """
    EN: Where each file's complete lines end right now. The initial pass reads
        up to there and watching resumes from there.
    FR: Fin des lignes complètes de chaque fichier à cet instant. L'analyse
        initiale lit jusque-là et la surveillance reprend à partir de là.
    """
    return {str(log_path): complete_lines_end(log_path) for log_path in log_paths}


class LogFilesHandler(FileSystemEventHandler):
    """
    EN: Monitor log files and fold appended lines into cumulative stats
    FR: Surveille les fichiers log et intègre les lignes ajoutées aux stats cumulées
    """

    def __init__(self, config: Dict, initial_stats: Optional[LogStats] = None,
                 positions: Optional[Dict[str, int]] = None):
        """
        EN: Initialize watchdog configuration
        FR: Initialiser la configuration de surveillance

        Args/Paramètres:
            config: EN: Watch parameters dictionary | FR: Dictionnaire de paramètres de surveillance
            initial_stats: EN: Stats of the content already read | FR: Stats du contenu déjà lu
            positions: EN: Offsets where that read stopped | FR: Positions où cette lecture s'est arrêtée
        """
        super().__init__()
        self.config = config
        self.min_interval = config.get('min_interval', MIN_ANALYSIS_INTERVAL)
        self.strip_query_string = config.get('strip_query', False)
        self.merger = StatsMerger() # EN: Cumulative traffic data | FR: Données de trafic cumulées
        if initial_stats is not None:
            self.merger.add(initial_stats)
        self.last_report_time = 0.0 # EN: Last report timestamp | FR: Horodatage dernier rapport

        # EN: Resolved path -> last read byte offset | FR: Chemin résolu -> dernière position lue
        if positions is None:
            positions = snapshot_positions(config['log_paths'])
        self.positions = {Path(log_path).resolve(): offset for log_path, offset in positions.items()}

    @property
    def stats(self) -> LogStats:
        return self.merger.result

    def on_modified(self, event):
        """
        EN: Triggered on file modification events
        FR: Déclenché sur les événements de modification de fichier
        """
        log_path = Path(event.src_path).resolve()
        if log_path in self.positions:
            self.process_changes(log_path)

    def process_changes(self, log_path: Path) -> int:
        """
        EN: Read and aggregate complete lines appended since the last call
        FR: Lire et agréger les lignes complètes ajoutées depuis le dernier appel

        Returns/Retourne:
            int: EN: Requests added | FR: Requêtes ajoutées
        """
        try:
            current_size = log_path.stat().st_size

            # EN: Handle log rotation | FR: Gérer la rotation des logs
            if current_size < self.positions[log_path]:
                print(colorize(f"⚠️ {log_path.name} rotated - resetting position", Colors.YELLOW))
                self.positions[log_path] = 0

            if current_size == self.positions[log_path]:
                return 0

            with open(log_path, 'rb') as f:
                f.seek(self.positions[log_path])
                chunk = f.read()
        except OSError as e:
            log_error(e, f"watching {log_path}")
            return 0

        # EN: Leave a partially written last line for later | FR: Laisser une dernière ligne incomplète pour plus tard
        complete = chunk[:chunk.rfind(b'\n') + 1]
        if not complete:
            return 0
        self.positions[log_path] += len(complete)

        lines = complete.decode('utf-8', errors='replace').splitlines()
        new_stats = aggregate_lines(lines, source=str(log_path),
                                    strip_query_string=self.strip_query_string)
        if new_stats.total_requests:
            print(colorize(f"\n🔄 {log_path.name}: {new_stats.total_requests} new requests", Colors.CYAN))
            self.merger.add(new_stats)
            self.maybe_report()
        return new_stats.total_requests

    def maybe_report(self, force: bool = False) -> bool:
        """EN: Print the report, at most once per interval | FR: Afficher le rapport, au plus une fois par intervalle"""
        now = time.time()
        if not force and now - self.last_report_time < self.min_interval:
            return False
        self.last_report_time = now
        print_report(self.stats)
        return True

def watch_log_files(config: Dict, initial_stats: Optional[LogStats] = None,
                    positions: Optional[Dict[str, int]] = None):
    """
    EN: Start continuous log files monitoring
    FR: Démarrer la surveillance continue des fichiers log

    Args/Paramètres:
        config: EN: Monitoring configuration | FR: Configuration de surveillance
        initial_stats: EN: Stats of the initial full pass | FR: Stats de la première analyse complète
        positions: EN: Offsets where that pass stopped | FR: Positions où cette analyse s'est arrêtée
    """
    event_handler = LogFilesHandler(config, initial_stats, positions)
    observer = Observer()
    # EN: One schedule per directory | FR: Une surveillance par répertoire
    for directory in {log_path.parent for log_path in event_handler.positions}:
        observer.schedule(event_handler, path=str(directory), recursive=False)

    print(colorize("\n👀 Starting real-time monitoring...", Colors.BLUE))
    print(colorize("   Press Ctrl+C to stop\n", Colors.GRAY))

    try:
        observer.start()
        # EN: Main monitoring loop | FR: Boucle principale de surveillance
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        observer.stop()
        print(colorize("\n🛑 Monitoring stopped", Colors.RED))
    observer.join()

    event_handler.maybe_report(force=True)
    if config.get('export'):
        print(colorize("📊 Generating final reports...", Colors.BLUE))
        generate_reports(event_handler.stats, config['output'])
    return event_handler.stats
