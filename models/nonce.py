from models.db import db

class Nonce(db.Model):
    __tablename__ = "nonces"

    ecode_id = db.Column(db.Integer, db.ForeignKey("ecodes.id"), primary_key=True)

    # never leaves the server; the client only sees its hash (the public nonce)
    secret_code = db.Column(db.String(64), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
