import re
from datetime import datetime

from .config import SIMPLE_TIMESTAMP_FORMAT
from .models import LogFormat

# ======================================================================
# FORMAT DETECTION / DÉTECTION DU FORMAT
# ======================================================================

# EN: Strict shape of "YYYY-MM-DD HH:MM:SS" | FR: Forme stricte de "YYYY-MM-DD HH:MM:SS"
SIMPLE_TIMESTAMP_PATTERN = re.compile(r'\d{4}-\d{2}-\d{2} \d{2}:\d{2}:\d{2}', re.ASCII)


def is_simple_timestamp(text: str) -> bool:
    """
    EN: Check that text is a valid "YYYY-MM-DD HH:MM:SS" timestamp
    FR: Vérifie que le texte est un horodatage "YYYY-MM-DD HH:MM:SS" valide
    """
    if not SIMPLE_TIMESTAMP_PATTERN.fullmatch(text):
        return False
    try:
        datetime.strptime(text, SIMPLE_TIMESTAMP_FORMAT)
    except ValueError: # EN: e.g. month 13 | FR: ex. mois 13
        return False
    return True


def detect_format(line: str) -> LogFormat:
    """
    EN: Classify a raw log line, first matching rule wins. Never raises.
    FR: Classe une ligne brute, la première règle satisfaite l'emporte. Ne lève jamais.

    Args/Paramètres:
        line: EN: Raw log line | FR: Ligne de log brute

    Returns/Retourne:
        LogFormat: EN: Detected dialect or UNKNOWN | FR: Dialecte détecté ou UNKNOWN
    """
    if not line:
        return LogFormat.UNKNOWN

    # EN: Apache request line and bracketed timestamp | FR: Requête Apache et horodatage entre crochets
    if 'HTTP/' in line and '[' in line:
        return LogFormat.APACHE

    fields = line.split()
    if len(fields) >= 6 and is_simple_timestamp(f"{fields[0]} {fields[1]}"):
        return LogFormat.SIMPLE

    if '{' in line and '}' in line:
        return LogFormat.JSON

    return LogFormat.UNKNOWN
