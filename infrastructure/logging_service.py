"""
Loggers par module : un fichier détaillé par service + le log principal.

- Les traces itératives (requêtes, rendus) vont dans logs/<module>.log
- Les avertissements et erreurs remontent aussi sur le logger principal
  "RubroQuote" (console), pour que la perte du cloud ou un export raté
  restent visibles même sans ouvrir les fichiers.

Usage:
    logger = get_module_logger("Repository", "repository.log")
    logger.debug("GET quotes -> 12 registos")   # fichier uniquement
    logger.warning("Supabase indisponível")     # fichier + console

Les tests appellent disable_all_logging() avant d'importer les services.
"""

import logging
import sys
from pathlib import Path

ROOT_LOGGER_NAME = "RubroQuote"

# Détecte si on est dans l'exécutable PyInstaller
IS_DIST = hasattr(sys, "_MEIPASS")

_LOGGING_DISABLED = IS_DIST
_LOG_DIR = Path("logs")


CONSOLE_FORMAT = '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
FILE_FORMAT = '%(asctime)s [%(levelname)s]: %(message)s'
TIME_FORMAT = '%H:%M:%S'
SILENT = logging.CRITICAL + 1


def _console_logger() -> logging.Logger:
    """Logger principal partagé : console, WARNING et plus."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if _LOGGING_DISABLED:
        root.setLevel(SILENT)
        return root
    root.setLevel(logging.DEBUG)
    if not root.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, TIME_FORMAT))
        handler.setLevel(logging.WARNING)
        root.addHandler(handler)
    return root


def _file_logger(module_name: str, filename: str) -> logging.Logger:
    """Logger détaillé d'un module, isolé du principal (propagate=False)."""
    logger = logging.getLogger(f"{ROOT_LOGGER_NAME}.{module_name}.detail")
    logger.propagate = False
    if _LOGGING_DISABLED:
        logger.setLevel(SILENT)
        if not logger.handlers:
            logger.addHandler(logging.NullHandler())
        return logger
    logger.setLevel(logging.DEBUG)
    if not logger.handlers:
        _LOG_DIR.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(_LOG_DIR / Path(filename).name), mode='a', encoding='utf-8')
        handler.setFormatter(logging.Formatter(FILE_FORMAT, TIME_FORMAT))
        logger.addHandler(handler)
    return logger


class ModuleFileLogger:
    """Logger écrivant dans un fichier dédié, avec écho des WARNING+ sur le log principal."""

    def __init__(self, module_name: str, detail_filename: str):
        self.module_name = module_name
        self.detail_filename = detail_filename
        self.main_logger = _console_logger()
        self.detail_logger = _file_logger(module_name, detail_filename)

    def _emit(self, level: int, message: str, echo: bool, exc_info: bool = False):
        self.detail_logger.log(level, message, exc_info=exc_info)
        if echo:
            self.main_logger.log(level, "[%s] %s", self.module_name, message, exc_info=exc_info)

    def debug(self, message: str):
        """Fichier détaillé uniquement."""
        self._emit(logging.DEBUG, message, echo=False)

    def info(self, message: str):
        """Fichier détaillé uniquement (pas de console)."""
        self._emit(logging.INFO, message, echo=False)

    def warning(self, message: str):
        self._emit(logging.WARNING, message, echo=True)

    def error(self, message: str, exc_info: bool = False):
        self._emit(logging.ERROR, message, echo=True, exc_info=exc_info)

    def exception(self, message: str):
        """Erreur avec traceback complet (à appeler depuis un bloc except)."""
        self._emit(logging.ERROR, message, echo=True, exc_info=True)

    def close(self):
        for handler in list(self.detail_logger.handlers):
            handler.close()
            self.detail_logger.removeHandler(handler)


_module_loggers = {}


def get_module_logger(module_name: str, detail_filename: str) -> ModuleFileLogger:
    """Récupère ou crée un logger module (cache pour éviter les handlers en double)."""
    key = f"{module_name}:{detail_filename}"
    if key not in _module_loggers:
        _module_loggers[key] = ModuleFileLogger(module_name, detail_filename)
    return _module_loggers[key]


def close_all_module_loggers():
    for logger in _module_loggers.values():
        logger.close()
    _module_loggers.clear()


def set_log_directory(path):
    """Change le dossier des fichiers détaillés (loggers créés après l'appel)."""
    global _LOG_DIR
    _LOG_DIR = Path(path)


def disable_all_logging():
    """Désactive tous les logs (exécutable, tests unitaires)."""
    global _LOGGING_DISABLED
    _LOGGING_DISABLED = True


def enable_logging():
    """Réactive les logs pour les loggers créés après cet appel."""
    global _LOGGING_DISABLED
    _LOGGING_DISABLED = False


def is_logging_disabled() -> bool:
    return _LOGGING_DISABLED


def clear_logs_directory():
    """Vide logs/ à la fermeture de l'application. Silencieux sur fichier verrouillé."""
    close_all_module_loggers()
    if not _LOG_DIR.exists():
        return
    for log_file in _LOG_DIR.glob("*.log"):
        try:
            log_file.unlink()
        except OSError:
            pass
