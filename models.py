from datetime import datetime

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()


def _now():
    return datetime.now()


class User(db.Model):
    """
    Benutzer. Die Anmeldung ist ein Platzhalter, das Passwort wird nur
    gehasht abgelegt und nicht geprüft.
    """
    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(80), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=True)
    created_at = db.Column(db.DateTime, default=_now, nullable=False)


class TimeEntry(db.Model):
    """
    Ein Tageseintrag pro Benutzer und Datum.
    """
    __table_args__ = (db.UniqueConstraint('user_id', 'date', name='uq_time_entry_user_date'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('user.id'), nullable=False, index=True)
    date = db.Column(db.String(10), nullable=False, index=True) # Format: YYYY-MM-DD

    # 'office', 'remote', 'annual-leave'
    work_type = db.Column(db.String(20), nullable=False)

    checkin_time = db.Column(db.String(5), nullable=True)  # Format: HH:MM
    checkout_time = db.Column(db.String(5), nullable=True) # Format: HH:MM

    annual_leave_hours = db.Column(db.Float, nullable=True) # nur bei annual-leave
    hourly_leave = db.Column(db.Float, default=0.0)
    outside_time = db.Column(db.Integer, default=0) # in Minuten
    dinner_meal = db.Column(db.Boolean, default=False)

    # Berechnete Werte, gespeichert als ganze Minuten (Stunden * 60)
    raw_hours = db.Column(db.Integer, nullable=True)
    break_deduction = db.Column(db.Integer, nullable=True)
    total_hours = db.Column(db.Integer, nullable=False)

    created_at = db.Column(db.DateTime, default=_now, nullable=False)
    updated_at = db.Column(db.DateTime, default=_now, onupdate=_now, nullable=False)
