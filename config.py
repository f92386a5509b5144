import os

# Konfiguration der Anwendung. Das Datenverzeichnis lässt sich über
# WORKHOURS_DATA_DIR umbiegen (z.B. Docker-Volume oder Tests).

BASE_DIR = os.path.abspath(os.path.dirname(__file__))
DATA_DIR = os.environ.get('WORKHOURS_DATA_DIR', os.path.join(BASE_DIR, 'data'))

DB_PATH = os.path.join(DATA_DIR, 'database.db')
LOG_DIR = os.path.join(DATA_DIR, 'logs')
BACKUP_DIR = os.path.join(DATA_DIR, 'backups')

LOG_FILE = os.path.join(LOG_DIR, 'tracker.log')
# Rotiert alle 30 Tage, behält max. 6 alte Dateien (180 Tage)
LOG_ROTATION_DAYS = 30
LOG_BACKUP_COUNT = 6

BACKUP_RETENTION_DAYS = 180

# Zulässige Werte im Eingabeformular
ANNUAL_LEAVE_CHOICES = [4, 5, 6, 7, 8]
HOURLY_LEAVE_CHOICES = [0, 1, 2, 3, 4]
OUTSIDE_TIME_STEP = 30 # Minuten

# Gültiger Jahresbereich für Monatsabfragen
MIN_YEAR = 1900
MAX_YEAR = 2999
