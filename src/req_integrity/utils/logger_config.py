import logging
import os
import sys
from req_integrity.utils.config import LOGS_DIR

def setup_logger():
    """
    Konfiguriert den Logger mit separaten Loglevels für Datei und Konsole.
    """
    logger = logging.getLogger("req_integrity")
    logger.setLevel(logging.INFO)  # Das niedrigste Level, das verarbeitet wird

    # Verhindern, dass bei jedem Import neue Handler hinzugefügt werden
    if logger.hasHandlers():
        logger.handlers.clear()

    logger.propagate = False
    os.makedirs(LOGS_DIR, exist_ok=True)
    log_file_path = os.path.join(LOGS_DIR, "req_integrity.log")

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    # 1. File Handler: alles ab INFO, inklusive der Trefferzahl pro Suchphase
    file_handler = logging.FileHandler(log_file_path, encoding="utf-8")
    file_handler.setLevel(logging.INFO)
    file_handler.setFormatter(formatter)

    # 2. Console Handler: nur Warnungen und Fehler
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.WARNING)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger

# Globale Logger-Instanz, die überall importiert werden kann
logger = setup_logger()
