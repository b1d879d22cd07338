import re
from datetime import datetime

from .config import Colors

# ======================================================================
# OUTPUT FORMATTING / FORMATAGE DE SORTIE
# ======================================================================

def colorize(text, color: str) -> str:
    """
    EN: Apply ANSI color codes to terminal text (Windows compatible)
    FR: Applique des codes couleur ANSI au texte terminal (compatible Windows)

    Args/Paramètres:
        text: EN: Text to colorize | FR: Texte à colorer
        color: EN: ANSI color code | FR: Code couleur ANSI

    Returns/Retourne:
        str: EN: Colored text string | FR: Texte coloré
    """
    return f"{color}{text}{Colors.END}"

def format_bytes(size_bytes: int) -> str:
    """
    EN: Human readable byte size, e.g. 2048 -> "2.00 KB"
    FR: Taille lisible, ex. 2048 -> "2.00 KB"
    """
    units = ['B', 'KB', 'MB', 'GB']
    size = float(size_bytes)
    for unit in units[:-1]:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0
    return f"{size:.2f} {units[-1]}" # EN: Everything above stays in GB | FR: Au-delà tout reste en GB

def truncate(text: str, max_len: int) -> str:
    """EN: Shorten text with a "..." suffix | FR: Raccourcit le texte avec un suffixe "..." """
    if len(text) <= max_len:
        return text
    return text[:max_len - 3] + '...'

# ======================================================================
# INPUT VALIDATION / VALIDATION D'ENTRÉE
# ======================================================================

def safe_filename(filename: str) -> str:
    """
    EN: Sanitize filename by replacing special characters
    FR: Nettoie un nom de fichier en remplaçant les caractères spéciaux

    Args/Paramètres:
        filename: EN: Original filename | FR: Nom de fichier original

    Returns/Retourne:
        str: EN: Sanitized filename | FR: Nom de fichier nettoyé
    """
    # EN: Replace non-alphanumeric characters except ._- | FR: Remplace caractères non alphanumériques sauf ._-
    sanitized = re.sub(r'[^a-zA-Z0-9_.-]', '_', filename)
    # EN: Trim to 255 characters for filesystem safety | FR: Tronque à 255 caractères pour sécurité système
    return sanitized[:255]

# ======================================================================
# ERROR HANDLING / GESTION DES ERREURS
# ======================================================================

def log_error(error: Exception, context: str = "") -> None:
    """
    Log errors with timestamp and context
    Loggue les erreurs avec horodatage et contexte

    Args:
        error: Exception object - Objet exception
        context: Error context message - Message de contexte
    """
    timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
    error_msg = f"[{timestamp}] ERROR: {str(error)}"
    if context:
        error_msg += f" | Context: {context}"
    print(colorize(error_msg, Colors.RED))
