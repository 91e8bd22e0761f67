from datetime import datetime
from models.db import db

class ECode(db.Model):
    __tablename__ = "ecodes"

    id = db.Column(db.Integer, primary_key=True)
    login_id = db.Column(db.Integer, db.ForeignKey("logins.id"), nullable=False, index=True)

    # numeric code mailed to the user; unique so a code resolves to one pending signup
    code = db.Column(db.String(16), unique=True, nullable=False, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
