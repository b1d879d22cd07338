import re
from datetime import datetime

from .config import APACHE_TIMESTAMP_FORMATS, RESPONSE_TIME_SUFFIX, SIMPLE_TIMESTAMP_FORMAT
from .detection import detect_format, is_simple_timestamp
from .errors import LineParseError
from .models import LogFormat, RequestRecord

# ======================================================================
# FIELD HELPERS / AIDES POUR LES CHAMPS
# ======================================================================

NUMBER_PATTERN = re.compile(r'[0-9]+', re.ASCII)
QUOTED_PATTERN = re.compile(r'"([^"]*)"')


def to_int(text: str) -> int:
    """
    EN: Parse a non-negative integer field, 0 when the field is not a number
    FR: Analyse un champ entier positif, 0 si le champ n'est pas un nombre
    """
    if not NUMBER_PATTERN.fullmatch(text):
        return 0
    try:
        return int(text)
    except ValueError:
        # EN: Beyond the interpreter digit limit | FR: Au-delà de la limite de chiffres de l'interpréteur
        return 0


def parse_response_time(field: str) -> int:
    """EN: "120ms" -> 120, anything else -> 0 | FR: "120ms" -> 120, sinon -> 0"""
    if not field.endswith(RESPONSE_TIME_SUFFIX):
        return 0
    return to_int(field[:-len(RESPONSE_TIME_SUFFIX)])


def strip_query(path: str) -> str:
    """EN: Drop the "?..." suffix of a path | FR: Supprime le suffixe "?..." d'un chemin"""
    return path.split('?', 1)[0]

# ======================================================================
# SIMPLE FORMAT / FORMAT SIMPLE
# ======================================================================

def parse_simple_line(line: str) -> RequestRecord:
    """
    EN: Parse "date time method path status response [user agent...]"
    FR: Analyse "date heure méthode chemin statut réponse [agent utilisateur...]"

    Example / Exemple:
        '2024-01-15 10:30:45 GET /home 200 120ms "Mozilla/5.0"'

    Raises/Lève:
        LineParseError: EN: Too few fields or bad timestamp | FR: Champs manquants ou horodatage invalide
    """
    parts = line.split(' ')
    if len(parts) < 7:
        raise LineParseError("malformed simple format")

    timestamp_str = f"{parts[0]} {parts[1]}"
    if not is_simple_timestamp(timestamp_str):
        raise LineParseError(f"invalid timestamp: {timestamp_str!r}")

    return RequestRecord(
        timestamp=datetime.strptime(timestamp_str, SIMPLE_TIMESTAMP_FORMAT),
        method=parts[2],
        path=parts[3],
        status=to_int(parts[4]),
        response_ms=parse_response_time(parts[5]),
        user_agent=' '.join(parts[6:]).strip('"'),
    )

# ======================================================================
# APACHE FORMAT / FORMAT APACHE
# ======================================================================

def parse_apache_timestamp(text: str) -> datetime:
    """EN: Try each Apache timestamp layout in turn | FR: Essaie chaque format d'horodatage Apache"""
    for fmt in APACHE_TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise LineParseError(f"invalid timestamp: {text!r}")


def parse_apache_line(line: str) -> RequestRecord:
    """
    EN: Positional parsing of an Apache common/combined log line
    FR: Analyse positionnelle d'une ligne de log Apache common/combined

    Expected log format / Format attendu:
    '127.0.0.1 - john [15/Jan/2024:10:30:45 -0300] "GET /home HTTP/1.1" 200 2326'
    (IP - user [timestamp] "request" status bytes ["referer" "user agent"])

    Raises/Lève:
        LineParseError: EN: Missing delimiter or bad timestamp | FR: Délimiteur manquant ou horodatage invalide
    """
    ip, sep, rest = line.partition(' ')
    if not sep:
        raise LineParseError("malformed apache format: no client address")

    # EN: User is kept verbatim, "-" included | FR: Utilisateur conservé tel quel, "-" compris
    user, sep, rest = rest.partition(' ')
    if not sep:
        raise LineParseError("malformed apache format: no user field")

    bracket_start = rest.find('[')
    bracket_end = rest.find(']', bracket_start + 1)
    if bracket_start == -1 or bracket_end == -1:
        raise LineParseError("malformed apache format: no bracketed timestamp")
    timestamp = parse_apache_timestamp(rest[bracket_start + 1:bracket_end])
    rest = rest[bracket_end + 1:]

    quote_start = rest.find('"')
    quote_end = rest.find('"', quote_start + 1)
    if quote_start == -1 or quote_end == -1:
        raise LineParseError("malformed apache format: no quoted request")

    request = rest[quote_start + 1:quote_end].split()
    if len(request) < 2:
        raise LineParseError("malformed request line")

    trailer = rest[quote_end + 1:]
    fields = trailer.split()
    if len(fields) < 2:
        raise LineParseError("malformed trailer")

    # EN: Combined format only: "referer" "user agent"
    # FR: Format combined uniquement : "referer" "agent utilisateur"
    quoted = QUOTED_PATTERN.findall(trailer)

    return RequestRecord(
        timestamp=timestamp,
        client_ip=ip,
        user=user,
        method=request[0],
        path=request[1],
        status=to_int(fields[0]),
        bytes_sent=to_int(fields[1]),
        user_agent=quoted[-1] if len(quoted) >= 2 else '',
    )

# ======================================================================
# DISPATCH / AIGUILLAGE
# ======================================================================

PARSERS = {
    LogFormat.SIMPLE: parse_simple_line,
    LogFormat.APACHE: parse_apache_line,
}


def parse_line(line: str, strip_query_string: bool = False) -> RequestRecord:
    """
    EN: Detect the line format and parse it, falling back to the simple parser
    FR: Détecte le format de la ligne et l'analyse, avec repli sur le format simple

    Args/Paramètres:
        line: EN: Raw log line | FR: Ligne de log brute
        strip_query_string: EN: Drop "?..." from paths | FR: Retirer "?..." des chemins

    Raises/Lève:
        LineParseError: EN: Line is not usable | FR: Ligne inexploitable
    """
    parser = PARSERS.get(detect_format(line))
    if parser is not None:
        record = parser(line)
    else:
        # EN: JSON and unknown lines get one chance as simple format
        # FR: Les lignes JSON et inconnues ont une chance en format simple
        try:
            record = parse_simple_line(line)
        except LineParseError:
            raise LineParseError("unsupported format") from None

    if strip_query_string:
        record.path = strip_query(record.path)
    return record
