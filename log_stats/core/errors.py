# ======================================================================
# EXCEPTIONS / EXCEPTIONS
# ======================================================================

class LogStatsError(Exception):
    """EN: Base error of the package | FR: Erreur de base du paquet"""


class FileError(LogStatsError):
    """
    EN: A whole log file failed. Only this file is skipped.
    FR: Un fichier log entier a échoué. Seul ce fichier est ignoré.
    """
    action = "process"

    def __init__(self, path, reason):
        self.path = str(path)
        self.reason = reason
        super().__init__(f"Cannot {self.action} log file {self.path}: {reason}")


class FileOpenError(FileError):
    """EN: The file could not be opened or read | FR: Le fichier n'a pas pu être ouvert ou lu"""
    action = "open"


class FileProcessingError(FileError):
    """EN: Aggregating the file failed unexpectedly | FR: L'agrégation du fichier a échoué de façon inattendue"""


class LineParseError(LogStatsError, ValueError):
    """EN: A single line could not be parsed | FR: Une ligne n'a pas pu être analysée"""
