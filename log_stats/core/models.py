from collections import defaultdict
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Dict, Optional


class LogFormat(Enum):
    """
    EN: Log dialects recognized line by line. JSON is detected but not parsed.
    FR: Dialectes reconnus ligne par ligne. JSON est détecté mais pas analysé.
    """
    UNKNOWN = 'unknown'
    SIMPLE = 'simple'
    APACHE = 'apache'
    JSON = 'json'


@dataclass
class RequestRecord:
    """
    EN: One normalized request, folded into LogStats then discarded
    FR: Une requête normalisée, intégrée aux LogStats puis abandonnée

    Empty strings mean "absent" for client_ip, user and user_agent.
    """
    method: str
    path: str
    timestamp: Optional[datetime] = None
    client_ip: str = ''
    user: str = ''
    status: int = 0
    bytes_sent: int = 0
    response_ms: int = 0
    user_agent: str = ''


def _counter():
    return defaultdict(int)


@dataclass
class LogStats:
    """
    EN: Traffic statistics for one file, or for several files once merged
    FR: Statistiques de trafic d'un fichier, ou de plusieurs une fois fusionnées
    """
    total_requests: int = 0
    by_method: Dict[str, int] = field(default_factory=_counter)
    by_status: Dict[int, int] = field(default_factory=_counter)
    by_path: Dict[str, int] = field(default_factory=_counter)
    by_ip: Dict[str, int] = field(default_factory=_counter)
    by_user_agent: Dict[str, int] = field(default_factory=_counter)
    avg_response_ms: float = 0.0
    max_response_ms: int = 0
    total_bytes: int = 0
    source: Optional[str] = None # EN: File path, None once merged | FR: Chemin du fichier, None après fusion

    def count_maps(self) -> Dict[str, Dict]:
        """EN: All key/count mappings by name | FR: Tous les compteurs par nom"""
        return {
            'method': self.by_method,
            'status': self.by_status,
            'path': self.by_path,
            'ip': self.by_ip,
            'user_agent': self.by_user_agent,
        }
