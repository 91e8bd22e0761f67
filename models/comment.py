from datetime import datetime
from models.db import db

class Comment(db.Model):
    __tablename__ = "comments"

    id = db.Column(db.Integer, primary_key=True)
    content = db.Column(db.Text, nullable=False)

    # null for a top-level comment, otherwise the comment being replied to
    thread_id = db.Column(db.Integer, db.ForeignKey("comments.id"), nullable=True, index=True)
    login_id = db.Column(db.Integer, db.ForeignKey("logins.id"), nullable=False, index=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)
