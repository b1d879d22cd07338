import argparse
import logging
import os
import sys
from pathlib import Path

from log_stats.core.config import Colors, DEFAULT_CHANNEL_CAPACITY, MIN_ANALYSIS_INTERVAL
from log_stats.core.coordinator import analyze_files
from log_stats.core.errors import FileError
from log_stats.core.reporting import generate_reports, print_report
from log_stats.core.utils import colorize, log_error
from log_stats.core.watch import snapshot_positions, watch_log_files

def main(argv=None):
    """
    EN: Command-line interface entry point
    FR: Point d'entrée de l'interface en ligne de commande
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    # EN: Initialize Windows color support | FR: Initialisation du support couleur pour Windows
    if os.name == 'nt':
        Colors.init_windows_support()
    if args.no_color:
        Colors.disable_colors()

    # EN: Library diagnostics only on demand | FR: Diagnostics de la bibliothèque sur demande
    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format='%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s'
        )

    # EN: Validate log files existence | FR: Vérification de l'existence des fichiers log
    log_paths = filter_existing(args.log_files)
    if not log_paths:
        exit_with_error("No log file found", Colors.RED)

    # EN: Build analysis configuration | FR: Construction de la configuration d'analyse
    config = {
        'log_paths': log_paths,
        'strip_query': args.strip_query,
        'workers': args.workers,
        'channel_capacity': args.channel_capacity,
        'output': args.output,
        'export': args.export,
        'min_interval': args.min_interval,
        # EN: Watch mode resumes exactly where the first pass stops
        # FR: La surveillance reprend exactement où la première analyse s'arrête
        'positions': snapshot_positions(log_paths) if args.watch else None,
    }

    # EN: Execute selected mode | FR: Exécution du mode sélectionné
    stats = handle_single_run(config)
    if args.watch:
        handle_watch_mode(config, stats)

def create_parser() -> argparse.ArgumentParser:
    """
    EN: Create CLI argument parser with analysis options
    FR: Crée le parser d'arguments pour les options d'analyse
    """
    parser = argparse.ArgumentParser(
        prog='log-stats',
        description=colorize("Access Log Statistics - Apache and simple formats", Colors.BLUE),
        epilog=colorize("Example: log-stats access.log app.log --strip-query --export", Colors.GRAY),
        formatter_class=argparse.RawTextHelpFormatter
    )

    # EN: Log files arguments | FR: Arguments des fichiers log
    parser.add_argument(
        'log_files',
        nargs='+',
        help="Paths to the log files (e.g. /var/log/apache2/access.log)"
    )

    # EN: Parsing options | FR: Options d'analyse
    parser.add_argument(
        '-q', '--strip-query',
        action='store_true',
        help="Count paths without their query string"
    )

    # EN: Concurrency options | FR: Options de parallélisme
    parser.add_argument(
        '-j', '--workers',
        type=positive_int,
        default=None,
        help="Worker threads processing files (default: one per file)"
    )

    parser.add_argument(
        '--channel-capacity',
        type=positive_int,
        default=DEFAULT_CHANNEL_CAPACITY,
        help=f"Per-file results waiting to be merged (default: {DEFAULT_CHANNEL_CAPACITY})"
    )

    # EN: Output control group | FR: Groupe de contrôle de sortie
    parser.add_argument(
        '-o', '--output',
        default='traffic_report',
        help="Output file base name (default: traffic_report)"
    )

    parser.add_argument(
        '-e', '--export',
        action='store_true',
        help="Write CSV and HTML reports"
    )

    parser.add_argument(
        '--no-color',
        action='store_true',
        help="Disable colored output"
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help="Show skipped lines and task activity"
    )

    # EN: Watch mode group | FR: Groupe du mode surveillance
    parser.add_argument(
        '--watch',
        action='store_true',
        help='Keep watching the files for new lines'
    )

    parser.add_argument(
        '--min-interval',
        type=int,
        default=MIN_ANALYSIS_INTERVAL,
        help=f"Minimum seconds between reports in watch mode (default: {MIN_ANALYSIS_INTERVAL})"
    )

    return parser

def positive_int(value: str) -> int:
    """EN: argparse type for integers >= 1 | FR: Type argparse pour entiers >= 1"""
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: {value!r}")
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1: {number}")
    return number

def filter_existing(log_files) -> list:
    """
    EN: Keep existing paths, printing a status line for each
    FR: Garde les chemins existants, en affichant un statut pour chacun
    """
    existing = []
    for log_file in log_files:
        log_path = Path(log_file)
        if log_path.exists():
            existing.append(log_path)
            print(colorize(f"✓ {log_file}", Colors.GREEN))
        else:
            print(colorize(f"✗ {log_file} (file not found)", Colors.YELLOW))
    return existing

def handle_single_run(config: dict):
    """
    EN: Handle one-time analysis of all files
    FR: Gère une analyse unique de tous les fichiers
    """
    print(colorize(f"\n🔍 Analyzing {len(config['log_paths'])} file(s)", Colors.BLUE))

    result = analyze_files(
        config['log_paths'],
        channel_capacity=config['channel_capacity'],
        max_workers=config['workers'],
        strip_query_string=config['strip_query'],
        byte_limits=config.get('positions'),
        on_result=print_progress
    )

    print()
    print_report(result.stats)
    if result.errors:
        print(colorize(f"\n⚠️ {len(result.errors)} file(s) could not be read", Colors.YELLOW))

    if config['export']:
        generate_reports(result.stats, config['output'])
    return result.stats

def handle_watch_mode(config: dict, stats):
    """
    EN: Handle continuous log monitoring
    FR: Gère la surveillance continue des fichiers log
    """
    # EN: Reports are written once, when monitoring stops | FR: Les rapports sont écrits une fois, à l'arrêt
    watch_log_files(config, stats, config.get('positions'))

def print_progress(item):
    """EN: Per-file completion line | FR: Ligne de fin de traitement par fichier"""
    if isinstance(item, FileError):
        log_error(item, "file skipped")
    else:
        print(colorize(f"✅ Processed: {item.source} ({item.total_requests} valid lines)", Colors.GREEN))

def exit_with_error(message: str, color: str = Colors.RED):
    """
    EN: Print error message and exit with code 1
    FR: Affiche un message d'erreur et quitte avec le code 1
    """
    print(colorize(f"\n❌ Error: {message}", color))
    sys.exit(1)

if __name__ == "__main__":
    main()
