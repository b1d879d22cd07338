import csv
from datetime import datetime
from http import HTTPStatus
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from jinja2 import Template

from .config import Colors, DEFAULT_OUTPUT_DIR, PATH_DISPLAY_WIDTH, TOP_N
from .models import LogStats
from .utils import colorize, format_bytes, safe_filename, truncate

# ======================================================================
# REPORT HELPERS / AIDES AU RAPPORT
# ======================================================================

def status_description(code: int) -> str:
    """EN: Standard reason phrase, "" if unknown | FR: Libellé standard, "" si inconnu"""
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return ''

def top_items(counts: Dict, n: int = TOP_N) -> List[Tuple]:
    """
    EN: Most frequent (key, count) pairs, ties broken by key
    FR: Paires (clé, nombre) les plus fréquentes, égalités départagées par clé
    """
    return sorted(counts.items(), key=lambda x: (-x[1], str(x[0])))[:n]

def percentage(count: int, total: int) -> float:
    return count / total * 100 if total else 0.0

# ======================================================================
# CONSOLE REPORT / RAPPORT CONSOLE
# ======================================================================

def print_report(stats: LogStats) -> None:
    """
    EN: Print the aggregate traffic report
    FR: Affiche le rapport de trafic agrégé
    """
    total = stats.total_requests
    print("=" * 50)
    print(colorize("LOG ANALYSIS REPORT", Colors.BOLD))
    print("=" * 50)

    print(colorize(f"\n📊 TOTAL REQUESTS: {total}\n", Colors.BLUE))
    print(f"💾 Total bytes transferred: {format_bytes(stats.total_bytes)}\n")

    print(colorize("📈 REQUESTS BY METHOD:", Colors.CYAN))
    for method, count in top_items(stats.by_method, len(stats.by_method)):
        print(f"  {method:<8}: {count:3d} ({percentage(count, total):5.1f}%)")

    print(colorize("\n🔴 STATUS CODES:", Colors.CYAN))
    for code in sorted(stats.by_status):
        count = stats.by_status[code]
        # EN: Color by status class | FR: Couleur selon la classe du statut
        color = Colors.RED if code >= 500 else Colors.YELLOW if code >= 400 else Colors.GREEN
        print(f"  {colorize(f'{code:3d}', color)} {status_description(code):<20}: "
              f"{count:3d} ({percentage(count, total):5.1f}%)")

    print(colorize("\n⏱️  RESPONSE TIME:", Colors.CYAN))
    print(f"  Average: {stats.avg_response_ms:.2f} ms")
    print(f"  Maximum: {stats.max_response_ms} ms")

    if stats.by_ip:
        print(colorize("\n🌐 MOST ACTIVE IPs:", Colors.CYAN))
        for ip, count in top_items(stats.by_ip):
            print(f"  {ip:<15}: {count:4d} ({percentage(count, total):5.1f}%)")

    print(colorize("\n🔗 MOST REQUESTED ENDPOINTS:", Colors.CYAN))
    for path, count in top_items(stats.by_path):
        print(f"  {truncate(path, PATH_DISPLAY_WIDTH):<20}: {count:3d} ({percentage(count, total):5.1f}%)")

    print("=" * 50)

# ======================================================================
# FILE REPORTS / RAPPORTS FICHIERS
# ======================================================================

def generate_reports(stats: LogStats, base_name: str = 'traffic_report',
                     output_dir: Optional[Path] = None) -> Tuple[Path, Path]:
    """
    EN: Main report generation workflow (CSV + HTML)
    FR: Flux principal de génération de rapports (CSV + HTML)

    Args/Paramètres:
        stats: EN: Aggregated traffic stats | FR: Statistiques de trafic agrégées
        base_name: EN: Base name for output files | FR: Nom de base des fichiers de sortie
        output_dir: EN: Destination, DEFAULT_OUTPUT_DIR if None | FR: Destination, DEFAULT_OUTPUT_DIR si None

    Returns/Retourne:
        (csv_path, html_path)
    """
    # EN: Ensure output directory exists | FR: Vérifier l'existence du dossier de sortie
    output_dir = Path(output_dir or DEFAULT_OUTPUT_DIR)
    output_dir.mkdir(parents=True, exist_ok=True)

    base_name = safe_filename(Path(base_name).stem)
    csv_path = output_dir / f"{base_name}.csv"
    html_path = output_dir / f"{base_name}.html"

    _generate_csv_report(stats, csv_path)
    _generate_html_report(stats, html_path)

    # EN: Print generation confirmation | FR: Afficher la confirmation de génération
    print(colorize("📊 Reports generated:", Colors.BLUE))
    print(f"  - CSV: {csv_path}")
    print(f"  - HTML: {html_path}")
    return csv_path, html_path

def _generate_csv_report(stats: LogStats, output_path: Path) -> None:
    """
    EN: One row per metric and key, machine readable
    FR: Une ligne par métrique et clé, lisible par machine
    """
    fieldnames = ['Metric', 'Key', 'Value']

    with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
        writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
        writer.writeheader()

        # EN: Scalar metrics first | FR: Métriques scalaires d'abord
        for metric, value in (
            ('total_requests', stats.total_requests),
            ('total_bytes', stats.total_bytes),
            ('avg_response_ms', f"{stats.avg_response_ms:.2f}"),
            ('max_response_ms', stats.max_response_ms),
        ):
            writer.writerow({'Metric': metric, 'Key': '', 'Value': value})

        # EN: Then every counter, most frequent first | FR: Puis chaque compteur, le plus fréquent d'abord
        for name, counts in stats.count_maps().items():
            for key, count in top_items(counts, len(counts)):
                writer.writerow({'Metric': name, 'Key': key, 'Value': count})

HTML_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <title>Traffic Analysis Dashboard</title>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <script src="https://cdn.jsdelivr.net/npm/chart.js"></script>
    <style>
        :root {
            --bg-color: #f5f7fa;
            --card-bg: #ffffff;
            --text-color: #2c3e50;
            --muted: #7f8c8d;
        }
        body {
            font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif;
            margin: 0;
            padding: 20px;
            background-color: var(--bg-color);
            color: var(--text-color);
        }
        .summary-bar {
            display: flex;
            justify-content: space-between;
            background: var(--card-bg);
            padding: 15px;
            border-radius: 6px;
            margin-bottom: 20px;
        }
        .summary-item { text-align: center; padding: 0 15px; }
        .summary-value { font-size: 1.5em; font-weight: bold; }
        .summary-label { font-size: 0.9em; color: var(--muted); }
        .dashboard {
            display: grid;
            grid-template-columns: repeat(auto-fit, minmax(300px, 1fr));
            gap: 20px;
            margin-bottom: 30px;
        }
        .card {
            background: var(--card-bg);
            border-radius: 8px;
            box-shadow: 0 4px 6px rgba(0, 0, 0, 0.05);
            padding: 20px;
        }
        .card-header { font-weight: 600; font-size: 1.2em; margin-bottom: 15px; }
        .chart-container { position: relative; height: 250px; width: 100%; }
        table { width: 100%; border-collapse: collapse; }
        td { padding: 4px 8px; border-bottom: 1px solid #eee; font-family: monospace; word-break: break-all; }
        td.count { text-align: right; }
    </style>
</head>
<body>
    <h1>Traffic Analysis Dashboard</h1>
    <p class="summary-label">Generated {{ now }}</p>

    <div class="summary-bar">
        <div class="summary-item">
            <div class="summary-value">{{ stats.total_requests }}</div>
            <div class="summary-label">Requests</div>
        </div>
        <div class="summary-item">
            <div class="summary-value">{{ total_bytes }}</div>
            <div class="summary-label">Transferred</div>
        </div>
        <div class="summary-item">
            <div class="summary-value">{{ '%.2f'|format(stats.avg_response_ms) }} ms</div>
            <div class="summary-label">Average response</div>
        </div>
        <div class="summary-item">
            <div class="summary-value">{{ stats.max_response_ms }} ms</div>
            <div class="summary-label">Max response</div>
        </div>
    </div>

    <div class="dashboard">
        <div class="card">
            <div class="card-header">Methods</div>
            <div class="chart-container"><canvas id="methodChart"></canvas></div>
        </div>
        <div class="card">
            <div class="card-header">Status Codes</div>
            <div class="chart-container"><canvas id="statusChart"></canvas></div>
        </div>
    </div>

    <div class="dashboard">
        {% for title, rows in sections %}
        <div class="card">
            <div class="card-header">{{ title }}</div>
            <table>
                {% for key, count in rows %}
                <tr><td>{{ key }}</td><td class="count">{{ count }}</td></tr>
                {% else %}
                <tr><td>No data</td><td></td></tr>
                {% endfor %}
            </table>
        </div>
        {% endfor %}
    </div>

    <script>
        document.addEventListener('DOMContentLoaded', function() {
            const methods = {{ methods | tojson }};
            new Chart(document.getElementById('methodChart').getContext('2d'), {
                type: 'bar',
                data: {
                    labels: Object.keys(methods),
                    datasets: [{ label: 'Requests', data: Object.values(methods), backgroundColor: '#3498db' }]
                },
                options: {
                    responsive: true,
                    maintainAspectRatio: false,
                    scales: { y: { beginAtZero: true } },
                    plugins: { legend: { display: false } }
                }
            });

            const statuses = {{ statuses | tojson }};
            new Chart(document.getElementById('statusChart').getContext('2d'), {
                type: 'pie',
                data: {
                    labels: Object.keys(statuses),
                    datasets: [{
                        data: Object.values(statuses),
                        backgroundColor: ['#2ecc71', '#3498db', '#f39c12', '#e74c3c', '#9b59b6', '#1abc9c', '#34495e']
                    }]
                },
                options: {
                    responsive: true,
                    maintainAspectRatio: false,
                    plugins: { legend: { position: 'bottom' } }
                }
            });
        });
    </script>
</body>
</html>
"""

def _generate_html_report(stats: LogStats, output_file: Path) -> None:
    """
    EN: Generate HTML dashboard with charts
    FR: Générer un tableau de bord HTML avec graphiques
    """
    template = Template(HTML_TEMPLATE, autoescape=True)

    # EN: JS object keys must be strings | FR: Les clés d'objet JS doivent être des chaînes
    statuses = {
        f"{code} {status_description(code)}".strip(): stats.by_status[code]
        for code in sorted(stats.by_status)
    }

    html_content = template.render(
        stats=stats,
        now=datetime.now().strftime('%Y-%m-%d %H:%M:%S'),
        total_bytes=format_bytes(stats.total_bytes),
        methods=dict(top_items(stats.by_method, len(stats.by_method))),
        statuses=statuses,
        sections=[
            ('Most Active IPs', top_items(stats.by_ip)),
            ('Most Requested Endpoints', top_items(stats.by_path)),
            ('Top User Agents', top_items(stats.by_user_agent)),
        ],
    )

    with open(output_file, 'w', encoding='utf-8') as f:
        f.write(html_content)
