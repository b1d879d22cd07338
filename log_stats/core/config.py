import os
from pathlib import Path

# ======================================================================
# LOG FORMAT CONFIGURATION / CONFIGURATION DES FORMATS DE LOG
# ======================================================================

# EN: Timestamp layout of the simple space-delimited format
# FR: Format d'horodatage du format simple délimité par espaces
SIMPLE_TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S'

# EN: Apache timestamp layouts, tried in order (with offset, then without)
# FR: Formats d'horodatage Apache, essayés dans l'ordre (avec décalage, puis sans)
APACHE_TIMESTAMP_FORMATS = (
    '%d/%b/%Y:%H:%M:%S %z',
    '%d/%b/%Y:%H:%M:%S',
)

# EN: Suffix marking the response time field | FR: Suffixe du champ de temps de réponse
RESPONSE_TIME_SUFFIX = 'ms'

# ======================================================================
# PATHS CONFIGURATION / CONFIGURATION DES CHEMINS
# ======================================================================

# EN: Base project directory and report location
# FR: Répertoire du projet et emplacement des rapports
PROJECT_ROOT = Path(__file__).parent.parent.parent
DEFAULT_OUTPUT_DIR = Path(
    os.getenv('LOG_STATS_OUTPUT_DIR', PROJECT_ROOT / 'outputs')
) # EN: Env override | FR: Surcharge par variable d'environnement

# ======================================================================
# RUNTIME CONSTANTS / CONSTANTES D'EXÉCUTION
# ======================================================================

DEFAULT_CHANNEL_CAPACITY = 2 # EN: Pending per-file results | FR: Résultats par fichier en attente
TOP_N = 5 # EN: Entries in "top" report sections | FR: Entrées des sections "top" du rapport
PATH_DISPLAY_WIDTH = 30 # EN: Max path width in console | FR: Largeur max des chemins en console
MIN_ANALYSIS_INTERVAL = 5  # EN: Seconds between reports (watch mode) | FR: Secondes entre rapports (mode surveillance)

# ======================================================================
# COLOR CONFIGURATION / CONFIGURATION DES COULEURS
# ======================================================================

class Colors:
    # EN: Color code constants | FR: Constantes de codes couleur
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    ORANGE = '\033[33m'
    BLUE = '\033[94m'
    CYAN = '\033[96m'
    GRAY = '\033[90m'
    BOLD = '\033[1m'
    END = '\033[0m'

    # EN: Platform-specific initialization | FR: Initialisation spécifique par plateforme
    @classmethod
    def init_windows_support(cls):
        # EN: Enable color support for Windows | FR: Activer le support couleur pour Windows
        if os.name == 'nt':
            import colorama
            colorama.init() # EN: Windows color emulation | FR: Émulation couleur pour Windows

    @classmethod
    def disable_colors(cls):
        # EN: Disable all color codes (--no-color) | FR: Désactiver tous les codes couleur (--no-color)
        for attr in dir(cls):
            if attr.isupper():
                setattr(cls, attr, '')
