from flask import Flask, jsonify, request, send_file, current_app
from flask_cors import CORS
from werkzeug.exceptions import HTTPException
from werkzeug.security import generate_password_hash
from models import db, User
from logic import (
    DayEntry, WorkType, calculate_monthly_stats, format_date_string, get_month_days,
    is_weekend, normalize_time_str, parse_date_string
)
from repository import SqlEntryRepository
from exporter import build_month_workbook, workbook_to_bytes, export_filename
import config
import os
import re
import secrets
import shutil
import time
from datetime import datetime
import logging
from logging.handlers import TimedRotatingFileHandler

app = Flask(__name__)
CORS(app)

# Stelle sicher, dass alle Ordner existieren
for directory in [config.DATA_DIR, config.LOG_DIR, config.BACKUP_DIR]:
    os.makedirs(directory, exist_ok=True)

# --- 1. LOGGING KONFIGURATION (Log-Rotation) ---
log_handler = TimedRotatingFileHandler(
    config.LOG_FILE, when='D', interval=config.LOG_ROTATION_DAYS, backupCount=config.LOG_BACKUP_COUNT
)
log_handler.setFormatter(logging.Formatter('%(asctime)s - %(levelname)s - %(message)s'))
app.logger.addHandler(log_handler)
app.logger.setLevel(logging.INFO)

# --- DB KONFIGURATION ---
app.config['SQLALCHEMY_DATABASE_URI'] = f'sqlite:///{config.DB_PATH}'
app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
db.init_app(app)


# --- 2. DATENBANK BACKUPS (Backup-Rotation) ---
def perform_daily_backup():
    """Erstellt einmal am Tag ein Backup der SQLite Datenbank und löscht alte Backups"""
    today_str = datetime.now().strftime('%Y-%m-%d')
    backup_file = os.path.join(config.BACKUP_DIR, f'db_backup_{today_str}.db')

    if not os.path.exists(backup_file) and os.path.exists(config.DB_PATH):
        try:
            shutil.copy2(config.DB_PATH, backup_file)
            app.logger.info(f"Tägliches Datenbank-Backup erstellt: {backup_file}")
            cutoff = time.time() - (config.BACKUP_RETENTION_DAYS * 86400)
            for f in os.listdir(config.BACKUP_DIR):
                f_path = os.path.join(config.BACKUP_DIR, f)
                if os.path.isfile(f_path) and os.stat(f_path).st_mtime < cutoff:
                    os.remove(f_path)
                    app.logger.info(f"Altes Backup gelöscht (>{config.BACKUP_RETENTION_DAYS} Tage): {f}")
        except OSError as e:
            app.logger.error(f"Fehler beim DB-Backup: {e}", exc_info=True)

@app.before_request
def before_request_hook():
    perform_daily_backup()


# --- APP STARTUP ---
with app.app_context():
    db.create_all()
    app.config['ENTRY_REPOSITORY'] = SqlEntryRepository()
    app.logger.info("Anwendung erfolgreich gestartet.")


def get_repository():
    return current_app.config['ENTRY_REPOSITORY']


# --- VALIDIERUNGS-HELPER ---
def is_valid_date(date_str):
    if not re.match(r'^\d{4}-\d{2}-\d{2}$', str(date_str)): return False
    try:
        parse_date_string(date_str) # 2024-02-31 o.ä. abweisen
    except ValueError:
        return False
    return True

VALID_TYPES = [t.value for t in WorkType]


class ValidationError(ValueError):
    pass


class NotFoundError(Exception):
    pass


def error_response(message, status):
    return jsonify({"success": False, "message": message}), status


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _int_param(source, name):
    value = source.get(name)
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Ungültiger Parameter: {name}")


def check_year_month(year, month):
    if not config.MIN_YEAR <= year <= config.MAX_YEAR:
        raise ValidationError("Ungültiges Jahr")
    if not 1 <= month <= 12:
        raise ValidationError("Ungültiger Monat")


def parse_month_query():
    user_id = _int_param(request.args, 'userId')
    year = _int_param(request.args, 'year')
    month = _int_param(request.args, 'month')
    check_year_month(year, month)
    return user_id, year, month


def parse_entry_payload(d):
    """
    Prüft die Formularwerte und baut daraus einen DayEntry.
    Mitgeschickte berechnete Werte (totalHours usw.) werden ignoriert.
    """
    if d.get('workType') not in VALID_TYPES:
        raise ValidationError("Ungültiger Typ")
    work_type = WorkType(d['workType'])

    outside_time = d.get('outsideTime', 0)
    if not isinstance(outside_time, int) or isinstance(outside_time, bool) \
            or outside_time < 0 or outside_time % config.OUTSIDE_TIME_STEP:
        raise ValidationError("Ungültige Außer-Haus-Zeit")

    dinner_meal = d.get('dinnerMeal', False)
    if not isinstance(dinner_meal, bool):
        raise ValidationError("Ungültiger Wert für Abendessen")

    if work_type is WorkType.ANNUAL_LEAVE:
        leave = d.get('annualLeaveHours', 8)
        if not _is_number(leave) or leave not in config.ANNUAL_LEAVE_CHOICES:
            raise ValidationError("Ungültige Urlaubsstunden")
        return DayEntry(work_type=work_type, annual_leave_hours=leave,
                        outside_time=outside_time, dinner_meal=dinner_meal)

    times = {}
    for key in ['checkinTime', 'checkoutTime']:
        raw = d.get(key)
        value = normalize_time_str(raw)
        if raw and not value:
            raise ValidationError(f"Ungültige Uhrzeit: {key}")
        times[key] = value

    hourly_leave = d.get('hourlyLeave', 0)
    if not _is_number(hourly_leave) or hourly_leave not in config.HOURLY_LEAVE_CHOICES:
        raise ValidationError("Ungültiger Stundenurlaub")

    return DayEntry(
        work_type=work_type,
        checkin_time=times['checkinTime'],
        checkout_time=times['checkoutTime'],
        hourly_leave=hourly_leave,
        outside_time=outside_time,
        dinner_meal=dinner_meal,
    )


def _camel(key):
    head, *rest = key.split('_')
    return head + ''.join(p.title() for p in rest)


def stats_to_json(stats):
    return {_camel(k): v for k, v in stats.items()}


def _require_user(user_id):
    if not db.session.get(User, user_id):
        raise NotFoundError("Benutzer nicht gefunden")


# --- FEHLERBEHANDLUNG ---

@app.errorhandler(ValidationError)
def handle_validation_error(e):
    return error_response(str(e), 400)

@app.errorhandler(NotFoundError)
def handle_not_found(e):
    return error_response(str(e), 404)

@app.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return e
    app.logger.error(f"Unerwarteter Fehler bei {request.method} {request.path}: {e}", exc_info=True)
    return error_response("Interner Fehler", 500)


# --- API ROUTEN: AUTH (Platzhalter) ---

@app.route('/api/auth/register', methods=['POST'])
def register():
    d = request.get_json(silent=True) or {}
    username = str(d.get('username') or '').strip()
    if not username: return error_response("Benutzername fehlt", 400)
    if User.query.filter_by(username=username).first():
        return error_response("Benutzername bereits vergeben", 409)

    user = User(username=username, password_hash=generate_password_hash(str(d.get('password') or '')))
    db.session.add(user)
    db.session.commit()
    app.logger.info(f"Benutzer registriert: {username}")
    return jsonify({"id": user.id, "username": user.username}), 201

@app.route('/api/auth/login', methods=['POST'])
def login():
    # Keine echte Prüfung: jeder Benutzername wird angenommen und bei Bedarf angelegt
    d = request.get_json(silent=True) or {}
    username = str(d.get('username') or '').strip()
    if not username: return error_response("Benutzername fehlt", 400)

    user = User.query.filter_by(username=username).first()
    if not user:
        user = User(username=username, password_hash=generate_password_hash(str(d.get('password') or '')))
        db.session.add(user)
        db.session.commit()
    return jsonify({"id": user.id, "username": user.username, "token": secrets.token_hex(16)})


# --- API ROUTEN: EINTRÄGE ---

@app.route('/api/time-entries', methods=['GET'])
def get_month_entries():
    user_id, year, month = parse_month_query()
    entries = get_repository().list_by_month(user_id, year, month)
    return jsonify({d: e.to_dict() for d, e in entries.items()})

@app.route('/api/time-entries/<date_str>', methods=['GET'])
def get_entry(date_str):
    if not is_valid_date(date_str): return error_response("Ungültiges Datum", 400)
    user_id = _int_param(request.args, 'userId')
    entry = get_repository().get(user_id, date_str)
    if not entry: return error_response("Nicht gefunden", 404)
    return jsonify(entry.to_dict())

@app.route('/api/time-entries', methods=['POST'])
def create_entry():
    d = request.get_json(silent=True)
    if not d or not isinstance(d, dict): return error_response("Keine Daten empfangen", 400)
    if not is_valid_date(d.get('date')): return error_response("Ungültiges Datum", 400)
    user_id = _int_param(d, 'userId')
    entry = parse_entry_payload(d)
    _require_user(user_id)

    repo = get_repository()
    if repo.get(user_id, d['date']):
        return error_response("Für dieses Datum existiert bereits ein Eintrag", 409)
    repo.set(user_id, d['date'], entry)
    app.logger.info(f"Eintrag angelegt: user={user_id} date={d['date']} type={entry.work_type.value}")
    return jsonify(dict(entry.to_dict(), date=d['date'])), 201

@app.route('/api/time-entries/<date_str>', methods=['PUT'])
def save_entry(date_str):
    if not is_valid_date(date_str): return error_response("Ungültiges Datum", 400)
    d = request.get_json(silent=True)
    if not d or not isinstance(d, dict): return error_response("Keine Daten empfangen", 400)
    user_id = _int_param(d, 'userId')
    entry = parse_entry_payload(d)
    _require_user(user_id)

    get_repository().set(user_id, date_str, entry)
    app.logger.info(f"Eintrag gespeichert: user={user_id} date={date_str} type={entry.work_type.value}")
    return jsonify(dict(entry.to_dict(), date=date_str))

@app.route('/api/time-entries/<date_str>', methods=['DELETE'])
def delete_entry(date_str):
    if not is_valid_date(date_str): return error_response("Ungültiges Datum", 400)
    user_id = _int_param(request.args, 'userId')
    if not get_repository().delete(user_id, date_str):
        return error_response("Nicht gefunden", 404)
    app.logger.info(f"Eintrag gelöscht: user={user_id} date={date_str}")
    return '', 204

@app.route('/api/time-entries', methods=['DELETE'])
def purge_entries():
    before = request.args.get('before')
    if not is_valid_date(before): return error_response("Ungültiges Datum", 400)
    user_id = _int_param(request.args, 'userId')
    count = get_repository().delete_older_than(user_id, before)
    app.logger.info(f"{count} Einträge vor {before} gelöscht: user={user_id}")
    return jsonify({"success": True, "deleted": count})


# --- API ROUTEN: AUSWERTUNG ---

@app.route('/api/stats/month', methods=['GET'])
def get_month_stats():
    user_id, year, month = parse_month_query()
    entries = get_repository().list_by_month(user_id, year, month)
    return jsonify(stats_to_json(calculate_monthly_stats(year, month, entries)))

@app.route('/api/calendar/<int:year>/<int:month>', methods=['GET'])
def get_calendar(year, month):
    check_year_month(year, month)
    user_id = _int_param(request.args, 'userId')
    entries = get_repository().list_by_month(user_id, year, month)

    days = []
    for cell in get_month_days(year, month):
        date_str = format_date_string(cell["date"])
        entry = entries.get(date_str) if cell["current_month"] else None
        days.append({
            "date": date_str,
            "currentMonth": cell["current_month"],
            "isWeekend": is_weekend(cell["date"]),
            "entry": entry.to_dict() if entry else None,
        })
    return jsonify({"year": year, "month": month, "days": days})

@app.route('/api/export/month', methods=['GET'])
def export_month():
    user_id, year, month = parse_month_query()
    entries = get_repository().list_by_month(user_id, year, month)
    stats = calculate_monthly_stats(year, month, entries)

    wb = build_month_workbook(year, month, entries, stats)
    app.logger.info(f"Export erstellt: user={user_id} {year}-{month:02d} ({len(entries)} Einträge)")
    return send_file(
        workbook_to_bytes(wb),
        mimetype='application/vnd.openxmlformats-officedocument.spreadsheetml.sheet',
        as_attachment=True,
        download_name=export_filename(year, month),
    )

if __name__ == '__main__':
    app.run(host='0.0.0.0', port=5000, debug=False)
